"""Network package exports."""

from .config import NetworkConfig
from .domain_types import EPSILON, NetworkPoint, NetworkSegment
from .errors import (
    InvalidGeometryError,
    NetmobError,
    NetworkIntegrityError,
    RouteMismatchError,
    SpatialReferenceError,
    TemporalConstructionError,
    UnknownRouteError,
    UnknownSubtypeError,
)
from .routes import Route, RouteCatalog

__all__ = [
    "EPSILON",
    "InvalidGeometryError",
    "NetmobError",
    "NetworkConfig",
    "NetworkIntegrityError",
    "NetworkPoint",
    "NetworkSegment",
    "Route",
    "RouteCatalog",
    "RouteMismatchError",
    "SpatialReferenceError",
    "TemporalConstructionError",
    "UnknownRouteError",
    "UnknownSubtypeError",
]
