"""Route catalog: resolves network positions into absolute geometry."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import pandas as pd
from shapely import wkt
from shapely.geometry import LineString, Point, shape
from shapely.geometry.base import BaseGeometry
from shapely.strtree import STRtree

from . import geometry as geom_ops
from .config import NetworkConfig
from .domain_types import EPSILON, NetworkPoint, NetworkSegment
from .errors import (
    InvalidGeometryError,
    NetworkIntegrityError,
    SpatialReferenceError,
    UnknownRouteError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Route:
    """Absolute geometry and length of one route of the network."""

    route_id: int
    geometry: LineString
    length: float = field(default=-1.0)

    def __post_init__(self) -> None:
        if not isinstance(self.geometry, LineString) or self.geometry.is_empty:
            raise InvalidGeometryError(
                f"Route {self.route_id} geometry must be a non-empty LineString"
            )
        object.__setattr__(self, "route_id", int(self.route_id))
        length = float(self.length)
        if length < 0:
            length = float(self.geometry.length)
        object.__setattr__(self, "length", length)

    @cached_property
    def vertex_fractions(self) -> List[float]:
        return geom_ops.vertex_fractions(self.geometry)

    def point_at(self, fraction: float) -> Point:
        return self.geometry.interpolate(fraction, normalized=True)


class RouteCatalog:
    """Read-only lookup from route identifier to :class:`Route`.

    Besides the forward lookup the catalog keeps an ``STRtree`` over the route
    geometries so that absolute points can be mapped back onto the network.
    """

    def __init__(
        self,
        routes: Iterable[Route],
        *,
        srid: int = 0,
        epsilon: float = EPSILON,
        locate_tolerance: float = 1.0e-6,
    ) -> None:
        self._routes: Dict[int, Route] = {}
        for route in routes:
            if route.route_id in self._routes:
                raise NetworkIntegrityError(f"Duplicate route identifier {route.route_id}")
            self._routes[route.route_id] = route
        self.srid = int(srid)
        self.epsilon = float(epsilon)
        self.locate_tolerance = float(locate_tolerance)
        self._route_order: List[int] = sorted(self._routes)
        geometries = [self._routes[rid].geometry for rid in self._route_order]
        self._sindex = STRtree(geometries) if geometries else None

    # ------------------------------------------------------------------ builders
    @classmethod
    def from_dataframe(
        cls,
        frame: pd.DataFrame,
        *,
        route_id_field: str = "route_id",
        geometry_field: str = "geometry",
        length_field: Optional[str] = None,
        srid: int = 0,
        epsilon: float = EPSILON,
        locate_tolerance: float = 1.0e-6,
    ) -> "RouteCatalog":
        for column in (route_id_field, geometry_field):
            if column not in frame.columns:
                raise ValueError(f"Route table must have a '{column}' column")
        if length_field is not None and length_field not in frame.columns:
            raise ValueError(f"Route table must have a '{length_field}' column")

        routes: List[Route] = []
        for row in frame.to_dict("records"):
            geometry = row[geometry_field]
            if isinstance(geometry, str):
                geometry = wkt.loads(geometry)
            if geometry is None:
                logger.warning("Skipping route %s without geometry", row[route_id_field])
                continue
            length = row.get(length_field) if length_field else None
            if length is None or pd.isna(length):
                length = -1.0
            routes.append(Route(int(row[route_id_field]), geometry, float(length)))
        return cls(routes, srid=srid, epsilon=epsilon, locate_tolerance=locate_tolerance)

    @classmethod
    def from_geojson(cls, path: str | Path, **kwargs) -> "RouteCatalog":
        """Load routes from a GeoJSON feature collection of LineStrings."""
        catalog = cls.from_dataframe(_load_geojson_dataframe(path), **kwargs)
        logger.info("Loaded %d routes from %s", len(catalog), path)
        return catalog

    @classmethod
    def from_csv(cls, path: str | Path, **kwargs) -> "RouteCatalog":
        """Load routes from a CSV file whose geometry column holds WKT."""
        catalog = cls.from_dataframe(pd.read_csv(path), **kwargs)
        logger.info("Loaded %d routes from %s", len(catalog), path)
        return catalog

    @classmethod
    def from_config(cls, config: NetworkConfig) -> "RouteCatalog":
        if config.routes_format == "geojson":
            loader, geometry_field = cls.from_geojson, "geometry"
        else:
            loader, geometry_field = cls.from_csv, config.geometry_field
        return loader(
            config.routes_path,
            route_id_field=config.route_id_field,
            geometry_field=geometry_field,
            length_field=config.length_field,
            srid=config.srid,
            epsilon=config.epsilon,
            locate_tolerance=config.locate_tolerance,
        )

    # ------------------------------------------------------------------ lookup
    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, route_id: object) -> bool:
        return route_id in self._routes

    def __iter__(self) -> Iterator[Route]:
        for route_id in self._route_order:
            yield self._routes[route_id]

    def route(self, route_id: int) -> Route:
        try:
            return self._routes[int(route_id)]
        except (KeyError, TypeError, ValueError):
            raise UnknownRouteError(route_id) from None

    def resolve(self, route_id: int) -> Tuple[LineString, float]:
        route = self.route(route_id)
        return route.geometry, route.length

    def route_length(self, route_id: int) -> float:
        return self.route(route_id).length

    def resolve_point(self, position: NetworkPoint) -> Point:
        return self.route(position.route_id).point_at(position.fraction)

    def segment_geometry(self, segment: NetworkSegment, reverse: bool = False) -> BaseGeometry:
        """Sub-line covered by ``segment``; a point when the segment is degenerate."""
        line = self.route(segment.route_id).geometry
        if reverse:
            return geom_ops.line_substring(line, segment.fraction_hi, segment.fraction_lo)
        return geom_ops.line_substring(line, segment.fraction_lo, segment.fraction_hi)

    def same_position(self, first: NetworkPoint, second: NetworkPoint) -> bool:
        """Positions on different routes may still meet at an intersection."""
        if first.route_id == second.route_id:
            return abs(first.fraction - second.fraction) < self.epsilon
        return self.resolve_point(first).equals(self.resolve_point(second))

    # -------------------------------------------------------------- reverse map
    def locate(self, point: Point, route_id: Optional[int] = None) -> NetworkPoint:
        """Map an absolute point onto the nearest network position.

        When ``route_id`` is given and the point lies on that route within
        ``locate_tolerance`` the position is taken on that route.
        """
        if point.is_empty:
            raise InvalidGeometryError("Cannot locate an empty point on the network")
        if route_id is not None:
            line = self.route(route_id).geometry
            if line.distance(point) <= self.locate_tolerance:
                return NetworkPoint(int(route_id), geom_ops.locate_fraction(line, point))

        if self._sindex is None:
            raise NetworkIntegrityError("Cannot locate a point on an empty network")
        candidates = self._sindex.query_nearest(
            point, max_distance=self.locate_tolerance, all_matches=True
        )
        if len(candidates) == 0:
            raise NetworkIntegrityError(
                f"Point {point.wkt} is not on the route network"
            )
        nearest_id = min(self._route_order[int(idx)] for idx in candidates)
        line = self._routes[nearest_id].geometry
        return NetworkPoint(nearest_id, geom_ops.locate_fraction(line, point))

    def ensure_same_srid(self, geometry: BaseGeometry) -> None:
        srid = geom_ops.geometry_srid(geometry)
        if srid != 0 and self.srid != 0 and srid != self.srid:
            raise SpatialReferenceError(
                "The temporal network point and the geometry must be in the same SRID"
            )


def _load_geojson_dataframe(path: str | Path) -> pd.DataFrame:
    """Read a GeoJSON file into a pandas DataFrame with shapely geometries."""
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    features = payload.get("features") or []
    rows = []
    for feature in features:
        properties = feature.get("properties") or {}
        geometry = feature.get("geometry")
        geom = shape(geometry) if geometry else None
        rows.append({**properties, "geometry": geom})
    return pd.DataFrame(rows)


__all__ = ["Route", "RouteCatalog"]
