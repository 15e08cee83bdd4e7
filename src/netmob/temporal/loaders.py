"""Conversions between temporal network points and pandas tables."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import pandas as pd

from netmob.network.domain_types import NetworkPoint

from .temporal_types import (
    Interpolation,
    Temporal,
    TInstant,
    TInstantSet,
    TSequence,
    TSequenceSet,
    dispatch,
)

logger = logging.getLogger(__name__)


def _instants_from_rows(frame: pd.DataFrame, time_column: str, route_column: str, fraction_column: str) -> List[TInstant]:
    ordered = frame.sort_values(by=time_column, kind="mergesort")
    instants: List[TInstant] = []
    for row in ordered.to_dict("records"):
        t = pd.Timestamp(row[time_column]).to_pydatetime()
        instants.append(TInstant(NetworkPoint(int(row[route_column]), float(row[fraction_column])), t))
    return instants


def temporal_from_dataframe(
    frame: pd.DataFrame,
    *,
    interpolation: Interpolation | str = Interpolation.LINEAR,
    time_column: str = "t",
    route_column: str = "route_id",
    fraction_column: str = "fraction",
    sequence_column: Optional[str] = None,
    discrete: bool = False,
) -> Temporal:
    """Build a temporal network point from one row per instant.

    Rows sharing a value of ``sequence_column`` become one sequence; without
    that column the whole table is a single sequence, or an instant set when
    ``discrete`` is set.
    """
    required = [time_column, route_column, fraction_column]
    missing = [column for column in required if column not in frame.columns]
    if missing:
        raise ValueError(f"Trajectory table is missing columns: {', '.join(missing)}")
    if frame.empty:
        raise ValueError("Trajectory table is empty")
    interpolation = Interpolation(interpolation)

    if sequence_column is None:
        instants = _instants_from_rows(frame, time_column, route_column, fraction_column)
        if discrete:
            if len(instants) == 1:
                return instants[0]
            return TInstantSet(tuple(instants))
        return TSequence(tuple(instants), True, True, interpolation)

    if sequence_column not in frame.columns:
        raise ValueError(f"Trajectory table is missing column '{sequence_column}'")
    sequences: List[TSequence] = []
    for key, group in frame.groupby(sequence_column, sort=False):
        instants = _instants_from_rows(group, time_column, route_column, fraction_column)
        sequences.append(TSequence(tuple(instants), True, True, interpolation))
        logger.debug("Sequence %s has %d instants", key, len(instants))
    sequences.sort(key=lambda seq: seq.instants[0].t)
    if len(sequences) == 1:
        return sequences[0]
    return TSequenceSet(tuple(sequences))


def _value_columns(value: object) -> Dict[str, object]:
    if isinstance(value, NetworkPoint):
        return {"route_id": value.route_id, "fraction": value.fraction}
    return {"value": value}


def temporal_to_dataframe(temp: Temporal) -> pd.DataFrame:
    """One row per instant, with a ``sequence`` column for continuous values."""

    def _rows(sequences) -> List[Dict[str, object]]:
        return [
            {"sequence": idx, "t": inst.t, **_value_columns(inst.value)}
            for idx, seq in enumerate(sequences)
            for inst in seq.instants
        ]

    rows = dispatch(
        temp,
        instant=lambda inst: [{"t": inst.t, **_value_columns(inst.value)}],
        instant_set=lambda ti: [{"t": inst.t, **_value_columns(inst.value)} for inst in ti.instants],
        sequence=lambda seq: _rows([seq]),
        sequence_set=lambda ss: _rows(ss.sequences),
    )
    return pd.DataFrame(rows)


__all__ = ["temporal_from_dataframe", "temporal_to_dataframe"]
