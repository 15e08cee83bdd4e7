"""Projection between temporal network points and temporal 2-D points."""

from __future__ import annotations

from typing import List, Optional

from shapely.geometry import Point

from netmob.network.routes import RouteCatalog
from netmob.temporal.restrict import value_at_timestamp
from netmob.temporal.temporal_types import (
    Temporal,
    TInstant,
    TInstantSet,
    TSequence,
    TSequenceSet,
    dispatch,
)


def _instant_to_geometric(inst: TInstant, catalog: RouteCatalog) -> TInstant:
    return TInstant(catalog.resolve_point(inst.value), inst.t)


def _linear_to_geometric(seq: TSequence, catalog: RouteCatalog) -> List[TInstant]:
    """Resolve every instant and add one instant per route vertex crossed."""
    route = catalog.route(seq.instants[0].value.route_id)
    vertices = list(zip(route.vertex_fractions, route.geometry.coords))
    result: List[TInstant] = []
    for inst1, inst2 in zip(seq.instants, seq.instants[1:]):
        result.append(_instant_to_geometric(inst1, catalog))
        f1, f2 = inst1.value.fraction, inst2.value.fraction
        if f1 == f2:
            continue
        lo, hi = min(f1, f2), max(f1, f2)
        crossed = [(f, xy) for f, xy in vertices if lo < f < hi]
        if f1 > f2:
            crossed.reverse()
        for fraction, xy in crossed:
            t = inst1.t + (inst2.t - inst1.t) * ((fraction - f1) / (f2 - f1))
            if result[-1].t < t < inst2.t:
                result.append(TInstant(Point(xy[0], xy[1]), t))
    result.append(_instant_to_geometric(seq.instants[-1], catalog))
    return result


def _sequence_to_geometric(seq: TSequence, catalog: RouteCatalog) -> TSequence:
    if seq.is_linear and seq.count > 1:
        instants = _linear_to_geometric(seq, catalog)
    else:
        instants = [_instant_to_geometric(inst, catalog) for inst in seq.instants]
    return TSequence(tuple(instants), seq.lower_inc, seq.upper_inc, seq.interpolation)


def to_geometric(temp: Temporal, catalog: RouteCatalog) -> Temporal:
    """Temporal 2-D point following exactly the same path as ``temp``."""
    return dispatch(
        temp,
        instant=lambda inst: _instant_to_geometric(inst, catalog),
        instant_set=lambda ti: TInstantSet(
            tuple(_instant_to_geometric(inst, catalog) for inst in ti.instants)
        ),
        sequence=lambda seq: _sequence_to_geometric(seq, catalog),
        sequence_set=lambda ss: TSequenceSet(
            tuple(_sequence_to_geometric(seq, catalog) for seq in ss.sequences)
        ),
    )


# ---------------------------------------------------------------- reverse
def _drop_collinear(instants: List[TInstant], epsilon: float) -> List[TInstant]:
    if len(instants) < 3:
        return instants
    kept = [instants[0]]
    for current, following in zip(instants[1:], instants[2:]):
        previous = kept[-1]
        ratio = (current.t - previous.t) / (following.t - previous.t)
        expected = previous.value.fraction + (
            following.value.fraction - previous.value.fraction
        ) * ratio
        if abs(current.value.fraction - expected) >= epsilon:
            kept.append(current)
    kept.append(instants[-1])
    return kept


def _route_hint(reference: Optional[Temporal], inst: TInstant) -> Optional[int]:
    if reference is None:
        return None
    value = value_at_timestamp(reference, inst.t, strict=False)
    return value.route_id if value is not None else None


def _instant_from_geometric(
    inst: TInstant, catalog: RouteCatalog, route_id: Optional[int]
) -> TInstant:
    return TInstant(catalog.locate(inst.value, route_id), inst.t)


def _sequence_from_geometric(
    seq: TSequence, catalog: RouteCatalog, reference: Optional[Temporal]
) -> TSequence:
    route_id = _route_hint(reference, seq.instants[0])
    if route_id is None:
        route_id = catalog.locate(seq.instants[0].value).route_id
    instants = [_instant_from_geometric(inst, catalog, route_id) for inst in seq.instants]
    if seq.is_linear:
        instants = _drop_collinear(instants, catalog.epsilon)
    return TSequence(tuple(instants), seq.lower_inc, seq.upper_inc, seq.interpolation)


def from_geometric(
    temp: Temporal, catalog: RouteCatalog, reference: Optional[Temporal] = None
) -> Temporal:
    """Re-project a temporal 2-D point onto the network.

    ``reference`` is the network value the points were derived from; its route
    at each instant is preferred over other routes passing through the point.
    """
    return dispatch(
        temp,
        instant=lambda inst: _instant_from_geometric(
            inst, catalog, _route_hint(reference, inst)
        ),
        instant_set=lambda ti: TInstantSet(
            tuple(
                _instant_from_geometric(inst, catalog, _route_hint(reference, inst))
                for inst in ti.instants
            )
        ),
        sequence=lambda seq: _sequence_from_geometric(seq, catalog, reference),
        sequence_set=lambda ss: TSequenceSet.make(
            _sequence_from_geometric(seq, catalog, reference) for seq in ss.sequences
        ),
    )


__all__ = ["from_geometric", "to_geometric"]
