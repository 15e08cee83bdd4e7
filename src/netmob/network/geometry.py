"""Thin wrappers over the shapely primitives used by the network algorithms."""

from __future__ import annotations

import math
from typing import Iterator, List, Optional, Sequence

import shapely
from shapely.geometry import LineString, MultiPoint, Point
from shapely.geometry.base import BaseGeometry
from shapely.ops import substring

from .errors import InvalidGeometryError

SNAP_TOLERANCE = 1.0e-9


def line_substring(line: LineString, start: float, end: float) -> BaseGeometry:
    """Cut ``line`` between two normalized fractions.

    The cut is always taken from the lower to the higher fraction and
    reversed afterwards when ``start > end``, so the result follows the
    direction of travel.
    """
    lo, hi = (start, end) if start <= end else (end, start)
    if lo == hi:
        return line.interpolate(lo, normalized=True)
    if lo == 0.0 and hi == 1.0:
        cut = line
    else:
        cut = substring(line, lo, hi, normalized=True)
    if start > end:
        cut = shapely.reverse(cut)
    return cut


def vertex_fractions(line: LineString) -> List[float]:
    """Normalized position of every vertex along ``line``."""
    coords = list(line.coords)
    total = line.length
    if total == 0.0:
        return [0.0 for _ in coords]
    fractions = [0.0]
    travelled = 0.0
    for (x1, y1, *_), (x2, y2, *_) in zip(coords, coords[1:]):
        travelled += math.hypot(x2 - x1, y2 - y1)
        fractions.append(min(travelled / total, 1.0))
    fractions[-1] = 1.0
    return fractions


def locate_fraction(line: LineString, point: Point) -> float:
    """Fraction of ``line`` closest to ``point``, snapped onto 0 and 1."""
    if line.length == 0.0:
        return 0.0
    fraction = float(line.project(point, normalized=True))
    if fraction < SNAP_TOLERANCE:
        return 0.0
    if fraction > 1.0 - SNAP_TOLERANCE:
        return 1.0
    return fraction


def azimuth(start: Point, end: Point) -> Optional[float]:
    """Heading from ``start`` to ``end`` in radians, clockwise from north."""
    dx = end.x - start.x
    dy = end.y - start.y
    if dx == 0.0 and dy == 0.0:
        return None
    angle = math.atan2(dx, dy)
    if angle < 0.0:
        angle += 2.0 * math.pi
    return angle


def points_geometry(points: Sequence[Point]) -> BaseGeometry:
    """A single point stays a point, several become a multipoint."""
    if len(points) == 1:
        return points[0]
    return MultiPoint(list(points))


def explode(geometry: BaseGeometry) -> Iterator[BaseGeometry]:
    """Yield the non-empty simple parts of a possibly multi-part geometry."""
    if geometry is None or geometry.is_empty:
        return
    parts = getattr(geometry, "geoms", None)
    if parts is None:
        yield geometry
        return
    for part in parts:
        yield from explode(part)


def segment_between(start: Point, end: Point) -> BaseGeometry:
    if start.equals(end):
        return start
    return LineString([start, end])


def ensure_2d(geometry: BaseGeometry) -> None:
    if shapely.has_z(geometry):
        raise InvalidGeometryError("The geometry must not have Z dimension")


def geometry_srid(geometry: BaseGeometry) -> int:
    return int(shapely.get_srid(geometry))
