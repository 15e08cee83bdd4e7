"""Evaluation and restriction of temporal values along the time axis."""

from __future__ import annotations

from bisect import bisect_right
from datetime import datetime
from typing import Any, List, Optional, Sequence

from .periods import Period, normalize_periods
from .temporal_types import (
    Interpolation,
    Temporal,
    TInstant,
    TInstantSet,
    TSequence,
    TSequenceSet,
    all_instants,
    dispatch,
    interpolate_value,
)


def _sequence_value_at(seq: TSequence, t: datetime) -> Any:
    """Value of ``seq`` at ``t`` within its closed bounds, ignoring inclusivity."""
    instants = seq.instants
    times = [inst.t for inst in instants]
    idx = bisect_right(times, t) - 1
    if idx < 0:
        return instants[0].value
    if times[idx] == t or idx == len(instants) - 1:
        return instants[idx].value
    if seq.interpolation is Interpolation.STEP:
        return instants[idx].value
    start, end = instants[idx], instants[idx + 1]
    ratio = (t - start.t) / (end.t - start.t)
    return interpolate_value(start.value, end.value, ratio)


def _sequence_value_at_timestamp(seq: TSequence, t: datetime, strict: bool) -> Optional[Any]:
    bounds = seq.period
    if strict:
        if not bounds.contains(t):
            return None
    elif t < bounds.lower or t > bounds.upper:
        return None
    if (
        not strict
        and t == bounds.upper
        and not seq.upper_inc
        and seq.interpolation is Interpolation.STEP
    ):
        return seq.instants[-2].value
    return _sequence_value_at(seq, t)


def _sequence_set_value_at_timestamp(ss: TSequenceSet, t: datetime, strict: bool) -> Optional[Any]:
    for seq in ss.sequences:
        if seq.period.contains(t):
            return _sequence_value_at(seq, t)
    if strict:
        return None
    for seq in ss.sequences:
        value = _sequence_value_at_timestamp(seq, t, strict=False)
        if value is not None:
            return value
    return None


def _instant_set_value_at(ti: TInstantSet, t: datetime) -> Optional[Any]:
    for inst in ti.instants:
        if inst.t == t:
            return inst.value
    return None


def value_at_timestamp(temp: Temporal, t: datetime, strict: bool = True) -> Optional[Any]:
    """Value of ``temp`` at ``t``, or ``None`` when undefined.

    With ``strict=False`` excluded period bounds are treated as included,
    which yields the limit value at an open bound.
    """
    return dispatch(
        temp,
        instant=lambda inst: inst.value if inst.t == t else None,
        instant_set=lambda ti: _instant_set_value_at(ti, t),
        sequence=lambda seq: _sequence_value_at_timestamp(seq, t, strict),
        sequence_set=lambda ss: _sequence_set_value_at_timestamp(ss, t, strict),
    )


def at_timestamp(temp: Temporal, t: datetime) -> Optional[TInstant]:
    value = value_at_timestamp(temp, t)
    if value is None:
        return None
    return TInstant(value, t)


# ------------------------------------------------------------------ periods
def _sequence_at_period(seq: TSequence, window: Period) -> Optional[TSequence]:
    common = seq.period.intersection(window)
    if common is None:
        return None
    if common.is_instantaneous:
        value = _sequence_value_at(seq, common.lower)
        return TSequence((TInstant(value, common.lower),), True, True, seq.interpolation)

    instants: List[TInstant] = [TInstant(_sequence_value_at(seq, common.lower), common.lower)]
    for inst in seq.instants:
        if common.lower < inst.t < common.upper:
            instants.append(inst)
    if seq.interpolation is Interpolation.STEP and not common.upper_inc:
        upper_value = instants[-1].value
    else:
        upper_value = _sequence_value_at(seq, common.upper)
    instants.append(TInstant(upper_value, common.upper))
    return TSequence(tuple(instants), common.lower_inc, common.upper_inc, seq.interpolation)


def _pieces_to_temporal(pieces: Sequence[TSequence], keep_sequence: bool) -> Optional[Temporal]:
    if not pieces:
        return None
    if keep_sequence and len(pieces) == 1:
        return pieces[0]
    return TSequenceSet.make(pieces)


def _discrete_at_periods(temp: Temporal, windows: Sequence[Period]) -> Optional[Temporal]:
    kept = [
        inst for inst in all_instants(temp) if any(w.contains(inst.t) for w in windows)
    ]
    if not kept:
        return None
    if isinstance(temp, TInstant):
        return kept[0]
    return TInstantSet(tuple(kept))


def at_periods(temp: Temporal, windows: Sequence[Period]) -> Optional[Temporal]:
    """Restrict ``temp`` to the union of ``windows``; ``None`` if nothing remains."""
    windows = normalize_periods(windows)
    if not windows:
        return None

    def _continuous(sequences: Sequence[TSequence], keep_sequence: bool) -> Optional[Temporal]:
        pieces = []
        for seq in sequences:
            for window in windows:
                piece = _sequence_at_period(seq, window)
                if piece is not None:
                    pieces.append(piece)
        return _pieces_to_temporal(pieces, keep_sequence)

    return dispatch(
        temp,
        instant=lambda inst: _discrete_at_periods(inst, windows),
        instant_set=lambda ti: _discrete_at_periods(ti, windows),
        sequence=lambda seq: _continuous([seq], keep_sequence=True),
        sequence_set=lambda ss: _continuous(ss.sequences, keep_sequence=False),
    )


def at_period(temp: Temporal, window: Period) -> Optional[Temporal]:
    return at_periods(temp, [window])


# ------------------------------------------------------------------ extrema
def min_instant(temp: Temporal) -> TInstant:
    """First instant holding the minimum value of a numeric temporal value."""
    return min(all_instants(temp), key=lambda inst: inst.value)


def min_value(temp: Temporal) -> float:
    return min_instant(temp).value


def max_value(temp: Temporal) -> float:
    return max(inst.value for inst in all_instants(temp))


__all__ = [
    "at_period",
    "at_periods",
    "at_timestamp",
    "max_value",
    "min_instant",
    "min_value",
    "value_at_timestamp",
]
