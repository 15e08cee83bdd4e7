"""Align two temporal values on their common time domain."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from .periods import Period, periods_intersection
from .restrict import _sequence_at_period, _sequence_value_at, value_at_timestamp
from .temporal_types import (
    Temporal,
    TInstant,
    TInstantSet,
    TSequence,
    TSequenceSet,
    is_discrete,
    sequences_of,
    time_domain,
)


def _component_covering(temp: Temporal, window: Period) -> TSequence:
    for seq in sequences_of(temp):
        if seq.period.covers(window):
            return seq
    raise LookupError(f"No component sequence covers {window}")


def _resample(seq: TSequence, times: Sequence[datetime]) -> TSequence:
    instants = tuple(TInstant(_sequence_value_at(seq, t), t) for t in times)
    return TSequence(instants, seq.lower_inc, seq.upper_inc, seq.interpolation)


def _synchronize_discrete(
    first: Temporal, second: Temporal, common: Sequence[Period]
) -> Tuple[Temporal, Temporal]:
    times = [window.lower for window in common]
    left = [TInstant(value_at_timestamp(first, t), t) for t in times]
    right = [TInstant(value_at_timestamp(second, t), t) for t in times]
    if isinstance(first, TInstant) or isinstance(second, TInstant):
        return left[0], right[0]
    return TInstantSet(tuple(left)), TInstantSet(tuple(right))


def synchronize(first: Temporal, second: Temporal) -> Optional[Tuple[Temporal, Temporal]]:
    """Restrict both values to their shared time and sample them at the same instants.

    Returns ``None`` when the values do not intersect in time.
    """
    common = periods_intersection(time_domain(first), time_domain(second), normalize=False)
    if not common:
        return None
    if is_discrete(first) or is_discrete(second):
        return _synchronize_discrete(first, second, common)

    left: List[TSequence] = []
    right: List[TSequence] = []
    for window in common:
        left_piece = _sequence_at_period(_component_covering(first, window), window)
        right_piece = _sequence_at_period(_component_covering(second, window), window)
        times = sorted(
            {inst.t for inst in left_piece.instants} | {inst.t for inst in right_piece.instants}
        )
        left.append(_resample(left_piece, times))
        right.append(_resample(right_piece, times))
    if len(left) == 1:
        return left[0], right[0]
    return TSequenceSet(tuple(left)), TSequenceSet(tuple(right))


__all__ = ["synchronize"]
