"""Time periods with inclusive/exclusive bounds and simple set algebra."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from netmob.network.errors import TemporalConstructionError


@dataclass(frozen=True)
class Period:
    """Contiguous time span ``lower..upper``; bounds may be open or closed."""

    lower: datetime
    upper: datetime
    lower_inc: bool = True
    upper_inc: bool = True

    def __post_init__(self) -> None:
        if self.lower > self.upper:
            raise TemporalConstructionError(
                f"Period lower bound {self.lower} is after upper bound {self.upper}"
            )
        if self.lower == self.upper and not (self.lower_inc and self.upper_inc):
            raise TemporalConstructionError(
                "An instantaneous period must include both bounds"
            )

    @property
    def is_instantaneous(self) -> bool:
        return self.lower == self.upper

    def contains(self, t: datetime) -> bool:
        if t < self.lower or t > self.upper:
            return False
        if t == self.lower and not self.lower_inc:
            return False
        if t == self.upper and not self.upper_inc:
            return False
        return True

    def covers(self, other: "Period") -> bool:
        return self.intersection(other) == other

    def intersection(self, other: "Period") -> Optional["Period"]:
        if self.lower > other.lower:
            lower, lower_inc = self.lower, self.lower_inc
        elif self.lower < other.lower:
            lower, lower_inc = other.lower, other.lower_inc
        else:
            lower, lower_inc = self.lower, self.lower_inc and other.lower_inc

        if self.upper < other.upper:
            upper, upper_inc = self.upper, self.upper_inc
        elif self.upper > other.upper:
            upper, upper_inc = other.upper, other.upper_inc
        else:
            upper, upper_inc = self.upper, self.upper_inc and other.upper_inc

        if lower > upper or (lower == upper and not (lower_inc and upper_inc)):
            return None
        return Period(lower, upper, lower_inc, upper_inc)

    def minus(self, other: "Period") -> List["Period"]:
        common = self.intersection(other)
        if common is None:
            return [self]
        pieces: List[Period] = []
        if self.lower < common.lower or (self.lower_inc and not common.lower_inc):
            pieces.append(Period(self.lower, common.lower, self.lower_inc, not common.lower_inc))
        if common.upper < self.upper or (self.upper_inc and not common.upper_inc):
            pieces.append(Period(common.upper, self.upper, not common.upper_inc, self.upper_inc))
        return pieces

    def adjacent_or_overlapping(self, other: "Period") -> bool:
        """True when ``other`` starts inside or right at the end of ``self``."""
        if other.lower < self.upper:
            return other.upper >= self.lower
        if other.lower == self.upper:
            return self.upper_inc or other.lower_inc
        return False


def normalize_periods(periods: Iterable[Period]) -> List[Period]:
    """Sort and merge overlapping or adjacent periods."""
    ordered = sorted(periods, key=lambda p: (p.lower, not p.lower_inc))
    merged: List[Period] = []
    for period in ordered:
        if merged and merged[-1].adjacent_or_overlapping(period):
            last = merged[-1]
            if period.upper > last.upper:
                upper, upper_inc = period.upper, period.upper_inc
            elif period.upper < last.upper:
                upper, upper_inc = last.upper, last.upper_inc
            else:
                upper, upper_inc = last.upper, last.upper_inc or period.upper_inc
            merged[-1] = Period(last.lower, upper, last.lower_inc, upper_inc)
        else:
            merged.append(period)
    return merged


def periods_intersection(
    first: Sequence[Period], second: Sequence[Period], normalize: bool = True
) -> List[Period]:
    """Pairwise intersections, merged unless ``normalize`` is false."""
    result: List[Period] = []
    for left in first:
        for right in second:
            common = left.intersection(right)
            if common is not None:
                result.append(common)
    if not normalize:
        return sorted(result, key=lambda p: (p.lower, not p.lower_inc))
    return normalize_periods(result)


def periods_minus(first: Sequence[Period], second: Sequence[Period]) -> List[Period]:
    pieces = list(first)
    for right in second:
        pieces = [piece for left in pieces for piece in left.minus(right)]
    return normalize_periods(pieces)


__all__ = ["Period", "normalize_periods", "periods_intersection", "periods_minus"]
