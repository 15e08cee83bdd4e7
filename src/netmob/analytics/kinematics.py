"""Length, speed and heading derived from temporal network points."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

import numpy as np
from shapely.geometry import Point

from netmob.network import geometry as geom_ops
from netmob.network.routes import RouteCatalog
from netmob.temporal.temporal_types import (
    Interpolation,
    Temporal,
    TInstant,
    TInstantSet,
    TSequence,
    TSequenceSet,
    all_instants,
    dispatch,
    sequences_of,
)

from .geometric import to_geometric
from .trajectory import segment_trajectory

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------- length
def _sequence_length(seq: TSequence, catalog: RouteCatalog) -> float:
    if seq.count == 1 or not seq.is_linear:
        return 0.0
    route_length = catalog.route_length(seq.instants[0].value.route_id)
    travelled = sum(
        abs(b.value.fraction - a.value.fraction)
        for a, b in zip(seq.instants, seq.instants[1:])
    )
    return route_length * travelled


def length(temp: Temporal, catalog: RouteCatalog) -> float:
    """Distance travelled along the network; zero without a continuous path."""
    return dispatch(
        temp,
        instant=lambda inst: 0.0,
        instant_set=lambda ti: 0.0,
        sequence=lambda seq: _sequence_length(seq, catalog),
        sequence_set=lambda ss: sum(_sequence_length(seq, catalog) for seq in ss.sequences),
    )


def _sequence_cumulative_length(
    seq: TSequence, catalog: RouteCatalog, prior: float = 0.0
) -> TSequence:
    if seq.count == 1:
        inst = seq.instants[0]
        return TSequence((TInstant(prior, inst.t),), True, True, seq.interpolation)

    if not seq.is_linear:
        instants = [TInstant(prior, inst.t) for inst in seq.instants]
    else:
        route_length = catalog.route_length(seq.instants[0].value.route_id)
        total = prior
        instants = [TInstant(total, seq.instants[0].t)]
        for a, b in zip(seq.instants, seq.instants[1:]):
            total += abs(b.value.fraction - a.value.fraction) * route_length
            instants.append(TInstant(total, b.t))
    return TSequence(tuple(instants), seq.lower_inc, seq.upper_inc, seq.interpolation)


def _sequence_set_cumulative_length(ss: TSequenceSet, catalog: RouteCatalog) -> TSequenceSet:
    sequences: List[TSequence] = []
    total = 0.0
    for seq in ss.sequences:
        derived = _sequence_cumulative_length(seq, catalog, prior=total)
        total = derived.instants[-1].value
        sequences.append(derived)
    return TSequenceSet(tuple(sequences))


def cumulative_length(temp: Temporal, catalog: RouteCatalog) -> Temporal:
    """Running distance travelled, one value per instant of ``temp``.

    Gaps between the sequences of a set carry the total forward unchanged.
    """
    return dispatch(
        temp,
        instant=lambda inst: TInstant(0.0, inst.t),
        instant_set=lambda ti: TInstantSet(tuple(TInstant(0.0, inst.t) for inst in ti.instants)),
        sequence=lambda seq: _sequence_cumulative_length(seq, catalog),
        sequence_set=lambda ss: _sequence_set_cumulative_length(ss, catalog),
    )


# ---------------------------------------------------------------- speed
def _sequence_speed(seq: TSequence, catalog: RouteCatalog) -> Optional[TSequence]:
    if seq.count == 1 or not seq.is_linear:
        return None
    route_length = catalog.route_length(seq.instants[0].value.route_id)
    instants: List[TInstant] = []
    speed = 0.0
    for a, b in zip(seq.instants, seq.instants[1:]):
        distance = abs(b.value.fraction - a.value.fraction) * route_length
        speed = distance / (b.t - a.t).total_seconds()
        instants.append(TInstant(speed, a.t))
    # no forward interval at the last instant: repeat the last rate
    instants.append(TInstant(speed, seq.instants[-1].t))
    return TSequence(tuple(instants), seq.lower_inc, seq.upper_inc, Interpolation.STEP)


def _sequence_set_speed(ss: TSequenceSet, catalog: RouteCatalog) -> Optional[TSequenceSet]:
    pieces = [
        piece
        for piece in (_sequence_speed(seq, catalog) for seq in ss.sequences)
        if piece is not None
    ]
    if not pieces:
        return None
    return TSequenceSet.make(pieces)


def speed(temp: Temporal, catalog: RouteCatalog) -> Optional[Temporal]:
    """Stepwise speed in route units per second; ``None`` without movement data."""
    return dispatch(
        temp,
        instant=lambda inst: None,
        instant_set=lambda ti: None,
        sequence=lambda seq: _sequence_speed(seq, catalog),
        sequence_set=lambda ss: _sequence_set_speed(ss, catalog),
    )


# ---------------------------------------------------------------- azimuth
def _segment_azimuths(catalog: RouteCatalog, inst1: TInstant, inst2: TInstant) -> List[TInstant]:
    """One heading per edge of the path between two instants."""
    if inst1.value.fraction == inst2.value.fraction:
        return []
    path = segment_trajectory(catalog, inst1.value, inst2.value)
    coords = list(path.coords)
    fractions = geom_ops.vertex_fractions(path)
    result: List[TInstant] = []
    t = inst1.t
    vertex1 = Point(coords[0])
    for fraction, xy in zip(fractions[1:], coords[1:]):
        vertex2 = Point(xy)
        heading = geom_ops.azimuth(vertex1, vertex2)
        if heading is not None and (not result or t > result[-1].t):
            result.append(TInstant(heading, t))
        vertex1 = vertex2
        t = inst1.t + (inst2.t - inst1.t) * fraction
    return result


def _close_azimuth(
    pending: List[TInstant], t: datetime, lower_inc: bool, upper_inc: bool = True
) -> TSequence:
    instants = list(pending)
    if t > instants[-1].t:
        instants.append(TInstant(instants[-1].value, t))
    if len(instants) == 1:
        lower_inc = upper_inc = True
    return TSequence(tuple(instants), lower_inc, upper_inc, Interpolation.STEP)


def _sequence_azimuth(seq: TSequence, catalog: RouteCatalog) -> List[TSequence]:
    """Split ``seq`` at constant segments into sequences of headings."""
    if seq.count == 1 or not seq.is_linear:
        return []
    result: List[TSequence] = []
    pending: List[TInstant] = []
    pending_lower_inc = seq.lower_inc
    inst1 = seq.instants[0]
    for inst2 in seq.instants[1:]:
        produced = _segment_azimuths(catalog, inst1, inst2)
        if produced:
            pending.extend(produced)
        else:
            if pending:
                logger.debug("Azimuth split at constant segment starting %s", inst1.t)
                result.append(_close_azimuth(pending, inst1.t, pending_lower_inc))
                pending = []
            pending_lower_inc = True
        inst1 = inst2
    if pending:
        result.append(_close_azimuth(pending, inst1.t, pending_lower_inc, seq.upper_inc))
    return result


def azimuth(temp: Temporal, catalog: RouteCatalog) -> Optional[TSequenceSet]:
    """Stepwise heading (radians clockwise from north) along a linear value.

    Constant segments have no heading and split the result; ``None`` when
    the value never moves.
    """

    def _from_sequences(sequences) -> Optional[TSequenceSet]:
        if not all(seq.is_linear for seq in sequences):
            return None
        pieces = [piece for seq in sequences for piece in _sequence_azimuth(seq, catalog)]
        if not pieces:
            return None
        return TSequenceSet.make(pieces)

    return dispatch(
        temp,
        instant=lambda inst: None,
        instant_set=lambda ti: None,
        sequence=lambda seq: _from_sequences([seq]),
        sequence_set=lambda ss: _from_sequences(ss.sequences),
    )


# ---------------------------------------------------------------- centroid
def _segment_weights(seq: TSequence):
    points = np.array([[inst.value.x, inst.value.y] for inst in seq.instants])
    durations = np.array(
        [(b.t - a.t).total_seconds() for a, b in zip(seq.instants, seq.instants[1:])]
    )
    if seq.is_linear:
        anchors = (points[:-1] + points[1:]) / 2.0
    else:
        anchors = points[:-1]
    return anchors, durations


def time_weighted_centroid(temp: Temporal, catalog: RouteCatalog) -> Point:
    """Centroid of the positions weighted by the time spent at them."""
    geo = to_geometric(temp, catalog)
    anchors, weights = [], []
    for seq in sequences_of(geo):
        if seq.count > 1:
            seq_anchors, seq_weights = _segment_weights(seq)
            anchors.append(seq_anchors)
            weights.append(seq_weights)
    if anchors:
        all_anchors = np.vstack(anchors)
        all_weights = np.concatenate(weights)
        if all_weights.sum() > 0:
            x, y = np.average(all_anchors, axis=0, weights=all_weights)
            return Point(float(x), float(y))

    coords = np.array([[inst.value.x, inst.value.y] for inst in all_instants(geo)])
    x, y = coords.mean(axis=0)
    return Point(float(x), float(y))


__all__ = [
    "azimuth",
    "cumulative_length",
    "length",
    "speed",
    "time_weighted_centroid",
]
