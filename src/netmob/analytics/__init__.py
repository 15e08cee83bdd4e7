"""Analytics package exports."""

from .geometric import from_geometric, to_geometric
from .kinematics import azimuth, cumulative_length, length, speed, time_weighted_centroid
from .proximity import (
    distance,
    nearest_approach_distance,
    nearest_approach_distance_geometry,
    nearest_approach_distance_npoint,
    nearest_approach_instant,
    nearest_approach_instant_geometry,
    nearest_approach_instant_npoint,
    shortest_connecting_line,
    shortest_line,
    shortest_line_geometry,
    shortest_line_npoint,
)
from .restriction import RestrictionMode, at_geometry, minus_geometry, restrict, restrict_geometric
from .trajectory import (
    distinct_npoints,
    linear_positions,
    npoints,
    positions,
    segment_trajectory,
    trajectory,
)

__all__ = [
    "RestrictionMode",
    "at_geometry",
    "azimuth",
    "cumulative_length",
    "distance",
    "distinct_npoints",
    "from_geometric",
    "length",
    "linear_positions",
    "minus_geometry",
    "nearest_approach_distance",
    "nearest_approach_distance_geometry",
    "nearest_approach_distance_npoint",
    "nearest_approach_instant",
    "nearest_approach_instant_geometry",
    "nearest_approach_instant_npoint",
    "npoints",
    "positions",
    "restrict",
    "restrict_geometric",
    "segment_trajectory",
    "shortest_connecting_line",
    "shortest_line",
    "shortest_line_geometry",
    "shortest_line_npoint",
    "speed",
    "time_weighted_centroid",
    "to_geometric",
    "trajectory",
]
