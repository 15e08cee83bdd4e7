"""Core value types for positions expressed against the route network."""

from __future__ import annotations

import math
from dataclasses import dataclass

EPSILON = 1.0e-6


def _check_fraction(value: float, label: str) -> float:
    fraction = float(value)
    if math.isnan(fraction) or fraction < 0.0 or fraction > 1.0:
        raise ValueError(f"{label} must lie in [0, 1], got {value!r}")
    return fraction


@dataclass(frozen=True)
class NetworkPoint:
    """A position on a route: route identifier plus a fraction of its length."""

    route_id: int
    fraction: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "route_id", int(self.route_id))
        object.__setattr__(self, "fraction", _check_fraction(self.fraction, "fraction"))

    def close_to(self, other: "NetworkPoint", epsilon: float = EPSILON) -> bool:
        """Same route and fractions within ``epsilon``."""
        return self.route_id == other.route_id and abs(self.fraction - other.fraction) < epsilon

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"NPoint({self.route_id},{self.fraction:g})"


@dataclass(frozen=True)
class NetworkSegment:
    """Contiguous sub-range ``[fraction_lo, fraction_hi]`` of a route."""

    route_id: int
    fraction_lo: float
    fraction_hi: float

    def __post_init__(self) -> None:
        lo = _check_fraction(self.fraction_lo, "fraction_lo")
        hi = _check_fraction(self.fraction_hi, "fraction_hi")
        if lo > hi:
            raise ValueError(
                f"Network segment bounds out of order: {lo!r} > {hi!r}"
            )
        object.__setattr__(self, "route_id", int(self.route_id))
        object.__setattr__(self, "fraction_lo", lo)
        object.__setattr__(self, "fraction_hi", hi)

    @classmethod
    def spanning(cls, points) -> "NetworkSegment":
        """Minimal segment covering every point; all points must share one route."""
        points = list(points)
        if not points:
            raise ValueError("Cannot build a network segment from no points")
        route_id = points[0].route_id
        if any(point.route_id != route_id for point in points):
            raise ValueError("All network points of a segment must share a route")
        fractions = [point.fraction for point in points]
        return cls(route_id, min(fractions), max(fractions))

    @property
    def is_point(self) -> bool:
        return self.fraction_lo == self.fraction_hi

    @property
    def is_full_route(self) -> bool:
        return self.fraction_lo == 0.0 and self.fraction_hi == 1.0

    def overlaps(self, other: "NetworkSegment") -> bool:
        return (
            self.route_id == other.route_id
            and self.fraction_lo <= other.fraction_hi
            and other.fraction_lo <= self.fraction_hi
        )

    def merge(self, other: "NetworkSegment") -> "NetworkSegment":
        if not self.overlaps(other):
            raise ValueError("Only overlapping network segments can be merged")
        return NetworkSegment(
            self.route_id,
            min(self.fraction_lo, other.fraction_lo),
            max(self.fraction_hi, other.fraction_hi),
        )
