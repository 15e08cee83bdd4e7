"""Temporal value model exports."""

from .loaders import temporal_from_dataframe, temporal_to_dataframe
from .periods import Period, normalize_periods, periods_intersection, periods_minus
from .restrict import (
    at_period,
    at_periods,
    at_timestamp,
    max_value,
    min_instant,
    min_value,
    value_at_timestamp,
)
from .sync import synchronize
from .temporal_types import (
    Interpolation,
    Temporal,
    TemporalSubtype,
    TInstant,
    TInstantSet,
    TSequence,
    TSequenceSet,
    all_instants,
    dispatch,
    instant_count,
    is_discrete,
    is_linear,
    nth_instant,
    period,
    sequences_of,
    temporal_copy,
    time_domain,
    timestamps,
)

__all__ = [
    "Interpolation",
    "Period",
    "Temporal",
    "TemporalSubtype",
    "TInstant",
    "TInstantSet",
    "TSequence",
    "TSequenceSet",
    "all_instants",
    "at_period",
    "at_periods",
    "at_timestamp",
    "dispatch",
    "instant_count",
    "is_discrete",
    "is_linear",
    "max_value",
    "min_instant",
    "min_value",
    "normalize_periods",
    "nth_instant",
    "period",
    "periods_intersection",
    "periods_minus",
    "sequences_of",
    "synchronize",
    "temporal_copy",
    "temporal_from_dataframe",
    "temporal_to_dataframe",
    "time_domain",
    "timestamps",
    "value_at_timestamp",
]
