"""Exception taxonomy shared by the network, temporal and analytics packages."""

from __future__ import annotations


class NetmobError(Exception):
    """Base class for all errors raised by netmob."""


class NetworkIntegrityError(NetmobError, ValueError):
    """Input violates an integrity rule of the network model."""


class UnknownRouteError(NetworkIntegrityError, KeyError):
    """A route identifier has no entry in the route catalog."""

    def __init__(self, route_id: object) -> None:
        self.route_id = route_id
        super().__init__(f"Unknown route identifier: {route_id!r}")

    def __str__(self) -> str:
        return self.args[0]


class RouteMismatchError(NetworkIntegrityError):
    """Network points of a single sequence lie on different routes."""


class SpatialReferenceError(NetworkIntegrityError):
    """Two operands are expressed in different spatial reference systems."""


class InvalidGeometryError(NetworkIntegrityError):
    """A geometry argument cannot be used by the requested operation."""


class TemporalConstructionError(NetmobError, ValueError):
    """A temporal value breaks an ordering or inclusivity invariant."""


class UnknownSubtypeError(NetmobError, RuntimeError):
    """Internal consistency failure: a temporal value has no known subtype."""


__all__ = [
    "InvalidGeometryError",
    "NetmobError",
    "NetworkIntegrityError",
    "RouteMismatchError",
    "SpatialReferenceError",
    "TemporalConstructionError",
    "UnknownRouteError",
    "UnknownSubtypeError",
]
