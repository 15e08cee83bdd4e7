from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from netmob.network.domain_types import NetworkPoint
from netmob.temporal.periods import Period
from netmob.temporal.restrict import (
    at_period,
    at_periods,
    at_timestamp,
    max_value,
    min_instant,
    min_value,
    value_at_timestamp,
)
from netmob.temporal.temporal_types import (
    Interpolation,
    TInstant,
    TInstantSet,
    TSequence,
    TSequenceSet,
)

T0 = datetime(2024, 1, 1, 8, 0, 0)


def _t(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


def _make_sequence(*values, **kwargs) -> TSequence:
    return TSequence(tuple(TInstant(NetworkPoint(1, f), _t(s)) for f, s in values), **kwargs)


def test_value_at_timestamp_linear_and_step():
    linear = _make_sequence((0.0, 0), (0.5, 10))
    step = _make_sequence((0.0, 0), (0.5, 10), interpolation=Interpolation.STEP)
    assert value_at_timestamp(linear, _t(4)).fraction == pytest.approx(0.2)
    assert value_at_timestamp(step, _t(4)) == NetworkPoint(1, 0.0)
    assert value_at_timestamp(step, _t(10)) == NetworkPoint(1, 0.5)
    assert value_at_timestamp(linear, _t(11)) is None


def test_value_at_exclusive_bound_depends_on_strictness():
    step = _make_sequence((0.1, 0), (0.5, 10), upper_inc=False, interpolation=Interpolation.STEP)
    assert value_at_timestamp(step, _t(10)) is None
    assert value_at_timestamp(step, _t(10), strict=False) == NetworkPoint(1, 0.1)

    linear = _make_sequence((0.1, 0), (0.5, 10), lower_inc=False)
    assert value_at_timestamp(linear, _t(0)) is None
    assert value_at_timestamp(linear, _t(0), strict=False) == NetworkPoint(1, 0.1)


def test_value_at_timestamp_discrete_variants():
    instant = TInstant(NetworkPoint(1, 0.3), _t(5))
    instant_set = TInstantSet((TInstant(NetworkPoint(1, 0.1), _t(0)), instant))
    assert value_at_timestamp(instant, _t(5)) == NetworkPoint(1, 0.3)
    assert value_at_timestamp(instant, _t(6)) is None
    assert value_at_timestamp(instant_set, _t(0)) == NetworkPoint(1, 0.1)
    assert at_timestamp(instant_set, _t(3)) is None


def test_at_period_clips_sequence():
    seq = _make_sequence((0.0, 0), (0.5, 10))
    clipped = at_period(seq, Period(_t(2), _t(6), True, False))
    assert isinstance(clipped, TSequence)
    assert [inst.t for inst in clipped.instants] == [_t(2), _t(6)]
    assert clipped.instants[0].value.fraction == pytest.approx(0.1)
    assert clipped.instants[-1].value.fraction == pytest.approx(0.3)
    assert not clipped.upper_inc
    assert at_period(seq, Period(_t(20), _t(30))) is None


def test_at_periods_produces_sequence_set():
    seq = _make_sequence((0.0, 0), (0.5, 10))
    pieces = at_periods(seq, [Period(_t(0), _t(2)), Period(_t(8), _t(10))])
    assert isinstance(pieces, TSequenceSet)
    assert len(pieces.sequences) == 2
    assert at_periods(seq, []) is None

    instant_set = TInstantSet(
        (TInstant(NetworkPoint(1, 0.1), _t(0)), TInstant(NetworkPoint(1, 0.2), _t(5)))
    )
    kept = at_periods(instant_set, [Period(_t(4), _t(6))])
    assert isinstance(kept, TInstantSet)
    assert len(kept.instants) == 1


def test_step_restriction_holds_value_at_open_upper_bound():
    step = _make_sequence((0.1, 0), (0.5, 5), (0.9, 10), interpolation=Interpolation.STEP)
    clipped = at_period(step, Period(_t(2), _t(5), True, False))
    assert [inst.value.fraction for inst in clipped.instants] == [0.1, 0.1]


def test_numeric_extrema_pick_first_minimum():
    values = TSequence(
        (TInstant(3.0, _t(0)), TInstant(1.0, _t(5)), TInstant(1.0, _t(8)), TInstant(4.0, _t(10)))
    )
    assert min_instant(values).t == _t(5)
    assert min_value(values) == 1.0
    assert max_value(values) == 4.0
