from __future__ import annotations

from datetime import datetime

import pandas as pd
import pytest

from netmob.network.domain_types import NetworkPoint
from netmob.temporal.loaders import temporal_from_dataframe, temporal_to_dataframe
from netmob.temporal.temporal_types import (
    Interpolation,
    TInstant,
    TInstantSet,
    TSequence,
    TSequenceSet,
)


def _make_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "t": [
                "2024-01-01T08:00:10",
                "2024-01-01T08:00:00",
                "2024-01-01T08:01:00",
                "2024-01-01T08:01:20",
            ],
            "route_id": [1, 1, 2, 2],
            "fraction": [0.5, 0.0, 0.1, 0.3],
            "trip": ["a", "a", "b", "b"],
        }
    )


def test_temporal_from_dataframe_sorts_rows_into_sequence():
    frame = _make_frame().iloc[:2]
    seq = temporal_from_dataframe(frame)
    assert isinstance(seq, TSequence)
    assert seq.is_linear
    assert [inst.value for inst in seq.instants] == [NetworkPoint(1, 0.0), NetworkPoint(1, 0.5)]
    assert seq.instants[0].t == datetime(2024, 1, 1, 8, 0, 0)


def test_temporal_from_dataframe_groups_sequences():
    temp = temporal_from_dataframe(
        _make_frame(), sequence_column="trip", interpolation="step"
    )
    assert isinstance(temp, TSequenceSet)
    assert temp.interpolation is Interpolation.STEP
    assert [seq.instants[0].value.route_id for seq in temp.sequences] == [1, 2]


def test_temporal_from_dataframe_discrete():
    frame = _make_frame().iloc[:2]
    assert isinstance(temporal_from_dataframe(frame, discrete=True), TInstantSet)
    assert isinstance(temporal_from_dataframe(frame.iloc[:1], discrete=True), TInstant)


def test_temporal_from_dataframe_validates_columns():
    with pytest.raises(ValueError):
        temporal_from_dataframe(_make_frame().drop(columns=["fraction"]))
    with pytest.raises(ValueError):
        temporal_from_dataframe(_make_frame(), sequence_column="vehicle")
    with pytest.raises(ValueError):
        temporal_from_dataframe(_make_frame().iloc[:0])


def test_temporal_to_dataframe_roundtrip_columns():
    temp = temporal_from_dataframe(_make_frame(), sequence_column="trip")
    frame = temporal_to_dataframe(temp)
    assert list(frame.columns) == ["sequence", "t", "route_id", "fraction"]
    assert frame["sequence"].tolist() == [0, 0, 1, 1]
    assert frame["fraction"].tolist() == pytest.approx([0.0, 0.5, 0.1, 0.3])

    numeric = TSequence(
        (TInstant(1.0, datetime(2024, 1, 1)), TInstant(2.0, datetime(2024, 1, 2)))
    )
    assert list(temporal_to_dataframe(numeric).columns) == ["sequence", "t", "value"]
