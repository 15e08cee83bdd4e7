"""Distance, nearest approach and shortest line between moving network points."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional, Tuple

import numpy as np
import shapely
from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry

from netmob.network import geometry as geom_ops
from netmob.network.domain_types import NetworkPoint
from netmob.network.routes import RouteCatalog
from netmob.temporal.restrict import at_timestamp, min_instant, value_at_timestamp
from netmob.temporal.sync import synchronize
from netmob.temporal.temporal_types import (
    Interpolation,
    Temporal,
    TInstant,
    TInstantSet,
    TSequence,
    TSequenceSet,
    dispatch,
    sequences_of,
)

from .geometric import to_geometric
from .trajectory import trajectory

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------- temporal distance
def _coords(seq: TSequence) -> np.ndarray:
    return np.array([[inst.value.x, inst.value.y] for inst in seq.instants], dtype=float)


def _segment_ends(seq: TSequence, coords: np.ndarray) -> np.ndarray:
    """Position reached at the end of each segment, before any step change."""
    if seq.is_linear:
        return coords[1:]
    return coords[:-1]


def _distance_sequence(first: TSequence, second: TSequence) -> List[TSequence]:
    """Pointwise distance of two synchronized sequences of 2-D points.

    Linear segments get an extra instant at the interior time of closest
    approach, so the minimum of the result is exact. When only one operand
    is stepwise the distance jumps at every instant; each segment then
    becomes its own piece, open at its upper bound, ending at the limit
    reached just before the jump.
    """
    linear = first.is_linear or second.is_linear
    mixed = first.is_linear != second.is_linear
    interpolation = Interpolation.LINEAR if linear else Interpolation.STEP
    a, b = _coords(first), _coords(second)
    distances = np.hypot(*(a - b).T)
    if first.count == 1:
        inst = first.instants[0]
        return [TSequence((TInstant(float(distances[0]), inst.t),), True, True, interpolation)]

    start_gap = a[:-1] - b[:-1]
    drift = (_segment_ends(first, a) - _segment_ends(second, b)) - start_gap
    denom = np.einsum("ij,ij->i", drift, drift)
    with np.errstate(divide="ignore", invalid="ignore"):
        ratios = np.where(denom > 0, -np.einsum("ij,ij->i", start_gap, drift) / denom, -1.0)
    before_jump = np.hypot(*(start_gap + drift).T)

    pieces: List[TSequence] = []
    instants: List[TInstant] = []
    lower_inc = first.lower_inc
    for idx, (inst1, inst2) in enumerate(zip(first.instants, first.instants[1:])):
        instants.append(TInstant(float(distances[idx]), inst1.t))
        ratio = float(ratios[idx])
        if 0.0 < ratio < 1.0:
            t = inst1.t + (inst2.t - inst1.t) * ratio
            if inst1.t < t < inst2.t:
                gap = start_gap[idx] + ratio * drift[idx]
                instants.append(TInstant(float(np.hypot(gap[0], gap[1])), t))
        if mixed:
            instants.append(TInstant(float(before_jump[idx]), inst2.t))
            pieces.append(TSequence(tuple(instants), lower_inc, False, interpolation))
            instants, lower_inc = [], True

    last = TInstant(float(distances[-1]), first.instants[-1].t)
    if not mixed:
        instants.append(last)
        return [TSequence(tuple(instants), first.lower_inc, first.upper_inc, interpolation)]
    if first.upper_inc:
        pieces.append(TSequence((last,), True, True, interpolation))
    return pieces


def _distance_pieces(pieces: List[TSequence]) -> Temporal:
    merged = TSequenceSet.make(pieces)
    if len(merged.sequences) == 1:
        return merged.sequences[0]
    return merged


def _distance_synchronized(first: Temporal, second: Temporal) -> Temporal:
    def _instant(inst: TInstant) -> TInstant:
        return TInstant(inst.value.distance(second.value), inst.t)

    return dispatch(
        first,
        instant=_instant,
        instant_set=lambda ti: TInstantSet(
            tuple(
                TInstant(i1.value.distance(i2.value), i1.t)
                for i1, i2 in zip(ti.instants, second.instants)
            )
        ),
        sequence=lambda seq: _distance_pieces(_distance_sequence(seq, second)),
        sequence_set=lambda ss: TSequenceSet.make(
            [
                piece
                for s1, s2 in zip(ss.sequences, second.sequences)
                for piece in _distance_sequence(s1, s2)
            ]
        ),
    )


def _geometric_synchronized(
    first: Temporal, second: Temporal, catalog: RouteCatalog
) -> Optional[Tuple[Temporal, Temporal]]:
    return synchronize(to_geometric(first, catalog), to_geometric(second, catalog))


def distance(first: Temporal, second: Temporal, catalog: RouteCatalog) -> Optional[Temporal]:
    """Temporal Euclidean distance; ``None`` when the values never coexist."""
    synced = _geometric_synchronized(first, second, catalog)
    if synced is None:
        return None
    return _distance_synchronized(*synced)


# ---------------------------------------------------------------- nearest approach
def nearest_approach_distance(
    first: Temporal, second: Temporal, catalog: RouteCatalog
) -> float:
    """Smallest distance ever separating the two values.

    Values that do not overlap in time are compared by their full paths.
    """
    dist = distance(first, second, catalog)
    if dist is None:
        logger.debug("No common time; using the distance between trajectories")
        return float(trajectory(first, catalog).distance(trajectory(second, catalog)))
    return float(min_instant(dist).value)


def _value_near(temp: Temporal, t: datetime) -> TInstant:
    inst = at_timestamp(temp, t)
    if inst is None:
        inst = TInstant(value_at_timestamp(temp, t, strict=False), t)
    return inst


def _closest(dist: Temporal) -> Tuple[datetime, bool]:
    """Time of the smallest distance, and whether it is only reached as a left limit."""
    best: Optional[TInstant] = None
    open_end = False
    for seq in sequences_of(dist):
        for inst in seq.instants:
            if best is None or inst.value < best.value:
                best = inst
                open_end = inst is seq.instants[-1] and not seq.upper_inc
    return best.t, open_end


def _value_before(temp: Temporal, t: datetime) -> Any:
    """Value of ``temp`` just before ``t``; differs from the value at ``t`` at a step change."""
    for seq in sequences_of(temp):
        if seq.is_linear:
            continue
        for prev, inst in zip(seq.instants, seq.instants[1:]):
            if inst.t == t:
                return prev.value
    return value_at_timestamp(temp, t, strict=False)


def nearest_approach_instant(
    first: Temporal, second: Temporal, catalog: RouteCatalog
) -> Optional[TInstant]:
    """Instant of ``first`` at which it comes closest to ``second``."""
    dist = distance(first, second, catalog)
    if dist is None:
        return None
    t, open_end = _closest(dist)
    if open_end:
        return TInstant(_value_before(first, t), t)
    return _value_near(first, t)


def shortest_line(first: Temporal, second: Temporal, catalog: RouteCatalog) -> Optional[BaseGeometry]:
    """Line joining both values at their nearest approach; ``None`` without common time."""
    synced = _geometric_synchronized(first, second, catalog)
    if synced is None:
        return None
    geo_first, geo_second = synced
    t, open_end = _closest(_distance_synchronized(geo_first, geo_second))
    if open_end:
        return shapely.shortest_line(_value_before(geo_first, t), _value_before(geo_second, t))
    return shapely.shortest_line(
        value_at_timestamp(geo_first, t, strict=False),
        value_at_timestamp(geo_second, t, strict=False),
    )


shortest_connecting_line = shortest_line


# ---------------------------------------------------------------- static operands
def nearest_approach_distance_geometry(
    temp: Temporal, geometry: BaseGeometry, catalog: RouteCatalog
) -> Optional[float]:
    if geometry.is_empty:
        return None
    catalog.ensure_same_srid(geometry)
    return float(trajectory(temp, catalog).distance(geometry))


def nearest_approach_distance_npoint(
    temp: Temporal, position: NetworkPoint, catalog: RouteCatalog
) -> float:
    return float(trajectory(temp, catalog).distance(catalog.resolve_point(position)))


def shortest_line_geometry(
    temp: Temporal, geometry: BaseGeometry, catalog: RouteCatalog
) -> Optional[BaseGeometry]:
    if geometry.is_empty:
        return None
    catalog.ensure_same_srid(geometry)
    return shapely.shortest_line(trajectory(temp, catalog), geometry)


def shortest_line_npoint(
    temp: Temporal, position: NetworkPoint, catalog: RouteCatalog
) -> BaseGeometry:
    return shapely.shortest_line(trajectory(temp, catalog), catalog.resolve_point(position))


def _closest_time(geo: Temporal, geometry: BaseGeometry) -> datetime:
    best_distance = float("inf")
    best_time: Optional[datetime] = None
    for seq in sequences_of(geo):
        if seq.count == 1 or not seq.is_linear:
            for inst in seq.instants:
                d = inst.value.distance(geometry)
                if d < best_distance:
                    best_distance, best_time = d, inst.t
            continue
        for inst1, inst2 in zip(seq.instants, seq.instants[1:]):
            segment = geom_ops.segment_between(inst1.value, inst2.value)
            d = segment.distance(geometry)
            if d >= best_distance:
                continue
            best_distance = d
            if segment.geom_type == "Point":
                best_time = inst1.t
                continue
            closest = Point(shapely.shortest_line(segment, geometry).coords[0])
            ratio = geom_ops.locate_fraction(segment, closest)
            best_time = inst1.t + (inst2.t - inst1.t) * ratio
    return best_time


def nearest_approach_instant_geometry(
    temp: Temporal, geometry: BaseGeometry, catalog: RouteCatalog
) -> Optional[TInstant]:
    """First instant of ``temp`` at its smallest distance to a static geometry."""
    if geometry.is_empty:
        return None
    catalog.ensure_same_srid(geometry)
    t = _closest_time(to_geometric(temp, catalog), geometry)
    return _value_near(temp, t)


def nearest_approach_instant_npoint(
    temp: Temporal, position: NetworkPoint, catalog: RouteCatalog
) -> TInstant:
    return nearest_approach_instant_geometry(temp, catalog.resolve_point(position), catalog)


__all__ = [
    "distance",
    "nearest_approach_distance",
    "nearest_approach_distance_geometry",
    "nearest_approach_distance_npoint",
    "nearest_approach_instant",
    "nearest_approach_instant_geometry",
    "nearest_approach_instant_npoint",
    "shortest_connecting_line",
    "shortest_line",
    "shortest_line_geometry",
    "shortest_line_npoint",
]
