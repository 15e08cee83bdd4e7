"""The four duration variants of a temporal value and the dispatch over them.

A temporal value is one of

* :class:`TInstant` – a single ``(value, t)`` pair,
* :class:`TInstantSet` – distinct instants with no continuity between them,
* :class:`TSequence` – instants describing a value over a period, with
  stepwise or linear interpolation between them,
* :class:`TSequenceSet` – ordered, non-overlapping sequences sharing one
  interpolation.

All four are frozen dataclasses; derived values are always new objects.
:func:`dispatch` is the single place that branches on the variant.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, ClassVar, Iterable, List, Tuple, TypeVar, Union

from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry

from netmob.network.domain_types import NetworkPoint
from netmob.network.errors import (
    RouteMismatchError,
    TemporalConstructionError,
    UnknownSubtypeError,
)

from .periods import Period

R = TypeVar("R")


class Interpolation(str, Enum):
    STEP = "step"
    LINEAR = "linear"


class TemporalSubtype(Enum):
    INSTANT = "instant"
    INSTANT_SET = "instant_set"
    SEQUENCE = "sequence"
    SEQUENCE_SET = "sequence_set"


# ---------------------------------------------------------------- value helpers
def values_equal(first: Any, second: Any) -> bool:
    if isinstance(first, BaseGeometry):
        return isinstance(second, BaseGeometry) and first.equals(second)
    return first == second


def interpolate_value(start: Any, end: Any, ratio: float) -> Any:
    """Value a fraction ``ratio`` of the way from ``start`` to ``end``."""
    if ratio <= 0.0:
        return start
    if ratio >= 1.0:
        return end
    if isinstance(start, NetworkPoint):
        if start.route_id != end.route_id:
            raise RouteMismatchError("Cannot interpolate between network points on different routes")
        fraction = start.fraction + (end.fraction - start.fraction) * ratio
        return NetworkPoint(start.route_id, min(max(fraction, 0.0), 1.0))
    if isinstance(start, Point):
        return Point(
            start.x + (end.x - start.x) * ratio,
            start.y + (end.y - start.y) * ratio,
        )
    if isinstance(start, (int, float)):
        return float(start) + (float(end) - float(start)) * ratio
    raise TypeError(f"Cannot interpolate values of type {type(start).__name__}")


def _check_increasing(instants: Tuple["TInstant", ...]) -> None:
    for prev, curr in zip(instants, instants[1:]):
        if curr.t <= prev.t:
            raise TemporalConstructionError(
                f"Timestamps must be strictly increasing: {prev.t} >= {curr.t}"
            )


# ---------------------------------------------------------------- variants
@dataclass(frozen=True)
class TInstant:
    value: Any
    t: datetime

    subtype: ClassVar[TemporalSubtype] = TemporalSubtype.INSTANT

    @property
    def instants(self) -> Tuple["TInstant", ...]:
        return (self,)


@dataclass(frozen=True)
class TInstantSet:
    instants: Tuple[TInstant, ...]

    subtype: ClassVar[TemporalSubtype] = TemporalSubtype.INSTANT_SET

    def __post_init__(self) -> None:
        instants = tuple(self.instants)
        if not instants:
            raise TemporalConstructionError("An instant set needs at least one instant")
        _check_increasing(instants)
        object.__setattr__(self, "instants", instants)


@dataclass(frozen=True)
class TSequence:
    instants: Tuple[TInstant, ...]
    lower_inc: bool = True
    upper_inc: bool = True
    interpolation: Interpolation = Interpolation.LINEAR

    subtype: ClassVar[TemporalSubtype] = TemporalSubtype.SEQUENCE

    def __post_init__(self) -> None:
        instants = tuple(self.instants)
        if not instants:
            raise TemporalConstructionError("A sequence needs at least one instant")
        _check_increasing(instants)
        if len(instants) == 1 and not (self.lower_inc and self.upper_inc):
            raise TemporalConstructionError(
                "An instantaneous sequence must have inclusive bounds"
            )
        first = instants[0].value
        if isinstance(first, NetworkPoint):
            for inst in instants[1:]:
                if not isinstance(inst.value, NetworkPoint) or inst.value.route_id != first.route_id:
                    raise RouteMismatchError(
                        "All network points composing a temporal sequence must have same route identifier"
                    )
        object.__setattr__(self, "instants", instants)
        object.__setattr__(self, "lower_inc", bool(self.lower_inc))
        object.__setattr__(self, "upper_inc", bool(self.upper_inc))
        object.__setattr__(self, "interpolation", Interpolation(self.interpolation))

    @property
    def count(self) -> int:
        return len(self.instants)

    @property
    def period(self) -> Period:
        return Period(self.instants[0].t, self.instants[-1].t, self.lower_inc, self.upper_inc)

    @property
    def is_linear(self) -> bool:
        return self.interpolation is Interpolation.LINEAR


@dataclass(frozen=True)
class TSequenceSet:
    sequences: Tuple[TSequence, ...]

    subtype: ClassVar[TemporalSubtype] = TemporalSubtype.SEQUENCE_SET

    def __post_init__(self) -> None:
        sequences = tuple(self.sequences)
        if not sequences:
            raise TemporalConstructionError("A sequence set needs at least one sequence")
        interpolation = sequences[0].interpolation
        for seq in sequences[1:]:
            if seq.interpolation is not interpolation:
                raise TemporalConstructionError(
                    "All sequences of a sequence set must share one interpolation"
                )
        for prev, curr in zip(sequences, sequences[1:]):
            prev_end, curr_start = prev.period.upper, curr.period.lower
            if curr_start < prev_end or (
                curr_start == prev_end and prev.upper_inc and curr.lower_inc
            ):
                raise TemporalConstructionError(
                    f"Sequences of a sequence set overlap at {curr_start}"
                )
        object.__setattr__(self, "sequences", sequences)

    @classmethod
    def make(cls, sequences: Iterable[TSequence], normalize: bool = True) -> "TSequenceSet":
        """Build a set, merging adjacent sequences that meet at an equal value."""
        sequences = list(sequences)
        if not normalize:
            return cls(tuple(sequences))
        merged: List[TSequence] = []
        for seq in sequences:
            if merged and _can_join(merged[-1], seq):
                last = merged[-1]
                merged[-1] = TSequence(
                    last.instants + seq.instants[1:],
                    last.lower_inc,
                    seq.upper_inc,
                    last.interpolation,
                )
            else:
                merged.append(seq)
        return cls(tuple(merged))

    @property
    def interpolation(self) -> Interpolation:
        return self.sequences[0].interpolation

    @property
    def is_linear(self) -> bool:
        return self.interpolation is Interpolation.LINEAR

    @property
    def instants(self) -> Tuple[TInstant, ...]:
        return tuple(inst for seq in self.sequences for inst in seq.instants)


def _can_join(prev: TSequence, curr: TSequence) -> bool:
    if prev.interpolation is not curr.interpolation:
        return False
    if prev.period.upper != curr.period.lower:
        return False
    if prev.upper_inc == curr.lower_inc:
        return False
    return values_equal(prev.instants[-1].value, curr.instants[0].value)


Temporal = Union[TInstant, TInstantSet, TSequence, TSequenceSet]


# ---------------------------------------------------------------- dispatch
def dispatch(
    temp: Temporal,
    *,
    instant: Callable[[TInstant], R],
    instant_set: Callable[[TInstantSet], R],
    sequence: Callable[[TSequence], R],
    sequence_set: Callable[[TSequenceSet], R],
) -> R:
    """Call the handler matching the variant of ``temp``."""
    subtype = getattr(temp, "subtype", None)
    if subtype is TemporalSubtype.INSTANT:
        return instant(temp)
    if subtype is TemporalSubtype.INSTANT_SET:
        return instant_set(temp)
    if subtype is TemporalSubtype.SEQUENCE:
        return sequence(temp)
    if subtype is TemporalSubtype.SEQUENCE_SET:
        return sequence_set(temp)
    raise UnknownSubtypeError(f"Unknown temporal subtype: {type(temp).__name__}")


def instant_count(temp: Temporal) -> int:
    return dispatch(
        temp,
        instant=lambda inst: 1,
        instant_set=lambda ti: len(ti.instants),
        sequence=lambda seq: len(seq.instants),
        sequence_set=lambda ss: sum(len(seq.instants) for seq in ss.sequences),
    )


def nth_instant(temp: Temporal, n: int) -> TInstant:
    """Zero-based ``n``-th instant across all components."""
    instants = all_instants(temp)
    if n < 0 or n >= len(instants):
        raise IndexError(f"Instant index {n} out of range for {len(instants)} instants")
    return instants[n]


def all_instants(temp: Temporal) -> Tuple[TInstant, ...]:
    return dispatch(
        temp,
        instant=lambda inst: (inst,),
        instant_set=lambda ti: ti.instants,
        sequence=lambda seq: seq.instants,
        sequence_set=lambda ss: ss.instants,
    )


def timestamps(temp: Temporal) -> List[datetime]:
    return [inst.t for inst in all_instants(temp)]


def period(temp: Temporal) -> Period:
    """Bounding period of ``temp``."""
    return dispatch(
        temp,
        instant=lambda inst: Period(inst.t, inst.t),
        instant_set=lambda ti: Period(ti.instants[0].t, ti.instants[-1].t),
        sequence=lambda seq: seq.period,
        sequence_set=lambda ss: Period(
            ss.sequences[0].period.lower,
            ss.sequences[-1].period.upper,
            ss.sequences[0].lower_inc,
            ss.sequences[-1].upper_inc,
        ),
    )


def time_domain(temp: Temporal) -> List[Period]:
    """Exact set of times at which ``temp`` is defined."""
    return dispatch(
        temp,
        instant=lambda inst: [Period(inst.t, inst.t)],
        instant_set=lambda ti: [Period(inst.t, inst.t) for inst in ti.instants],
        sequence=lambda seq: [seq.period],
        sequence_set=lambda ss: [seq.period for seq in ss.sequences],
    )


def is_linear(temp: Temporal) -> bool:
    return dispatch(
        temp,
        instant=lambda inst: False,
        instant_set=lambda ti: False,
        sequence=lambda seq: seq.is_linear,
        sequence_set=lambda ss: ss.is_linear,
    )


def is_discrete(temp: Temporal) -> bool:
    return dispatch(
        temp,
        instant=lambda inst: True,
        instant_set=lambda ti: True,
        sequence=lambda seq: False,
        sequence_set=lambda ss: False,
    )


def sequences_of(temp: Temporal) -> Tuple[TSequence, ...]:
    """Component sequences of a continuous value."""
    return dispatch(
        temp,
        instant=lambda inst: (TSequence((inst,), True, True, Interpolation.STEP),),
        instant_set=lambda ti: tuple(
            TSequence((inst,), True, True, Interpolation.STEP) for inst in ti.instants
        ),
        sequence=lambda seq: (seq,),
        sequence_set=lambda ss: ss.sequences,
    )


def temporal_copy(temp: Temporal) -> Temporal:
    return dataclasses.replace(temp)


__all__ = [
    "Interpolation",
    "TInstant",
    "TInstantSet",
    "TSequence",
    "TSequenceSet",
    "Temporal",
    "TemporalSubtype",
    "all_instants",
    "dispatch",
    "instant_count",
    "interpolate_value",
    "is_discrete",
    "is_linear",
    "nth_instant",
    "period",
    "sequences_of",
    "temporal_copy",
    "time_domain",
    "timestamps",
    "values_equal",
]
