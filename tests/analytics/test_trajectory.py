from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from shapely.geometry import LineString, MultiLineString, MultiPoint, Point

from netmob.analytics.trajectory import (
    npoints,
    positions,
    segment_trajectory,
    trajectory,
)
from netmob.network.domain_types import NetworkPoint, NetworkSegment
from netmob.network.errors import RouteMismatchError
from netmob.network.routes import Route, RouteCatalog
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


def _make_catalog() -> RouteCatalog:
    return RouteCatalog(
        [
            Route(1, LineString([(0, 0), (100, 0)])),
            Route(2, LineString([(0, 0), (0, 10), (10, 10)])),
            Route(3, LineString([(50, -50), (50, 50)])),
        ]
    )


def _make_sequence(*values, route_id: int = 1, **kwargs) -> TSequence:
    return TSequence(
        tuple(TInstant(NetworkPoint(route_id, f), _t(s)) for f, s in values), **kwargs
    )


def test_linear_sequence_trajectory():
    catalog = _make_catalog()
    seq = _make_sequence((0.0, 0), (0.5, 10))
    assert trajectory(seq, catalog).equals(LineString([(0, 0), (50, 0)]))


def test_linear_trajectory_follows_overall_direction():
    catalog = _make_catalog()
    seq = _make_sequence((0.5, 0), (0.2, 10))
    path = trajectory(seq, catalog)
    assert path.coords[0] == pytest.approx((50.0, 0.0))
    assert path.coords[-1] == pytest.approx((20.0, 0.0))



def test_trajectory_contains_every_instant_position():
    catalog = _make_catalog()
    for route_id in (1, 2):
        seq = _make_sequence((0.5, 0), (0.2, 5), (0.8, 10), route_id=route_id)
        path = trajectory(seq, catalog).buffer(1e-9)
        for inst in seq.instants:
            assert path.contains(catalog.resolve_point(inst.value))


def test_instantaneous_and_discrete_trajectories():
    catalog = _make_catalog()
    instant = TInstant(NetworkPoint(1, 0.25), _t(0))
    assert trajectory(instant, catalog).equals(Point(25, 0))

    repeated = TInstantSet(
        (
            TInstant(NetworkPoint(1, 0.5), _t(0)),
            TInstant(NetworkPoint(3, 0.5), _t(5)),
            TInstant(NetworkPoint(1, 0.7), _t(9)),
        )
    )
    path = trajectory(repeated, catalog)
    assert isinstance(path, MultiPoint)
    assert len(path.geoms) == 2

    single = _make_sequence((0.3, 0))
    assert trajectory(single, catalog).equals(Point(30, 0))


def test_step_trajectory_is_set_of_points():
    catalog = _make_catalog()
    seq = _make_sequence((0.1, 0), (0.3, 5), (0.1, 10), interpolation=Interpolation.STEP)
    assert len(npoints(seq, catalog)) == 2
    path = trajectory(seq, catalog)
    assert path.equals(MultiPoint([(10, 0), (30, 0)]))

    seq_set = TSequenceSet(
        (seq, _make_sequence((0.9, 20), (0.9, 30), interpolation=Interpolation.STEP))
    )
    assert len(trajectory(seq_set, catalog).geoms) == 3


def test_sequence_set_trajectory_merges_overlapping_segments():
    catalog = _make_catalog()
    seq_set = TSequenceSet(
        (
            _make_sequence((0.0, 0), (0.3, 3)),
            _make_sequence((0.6, 5), (0.2, 9)),
        )
    )
    assert positions(seq_set, catalog) == [NetworkSegment(1, 0.0, 0.6)]
    assert trajectory(seq_set, catalog).equals(LineString([(0, 0), (60, 0)]))


def test_sequence_set_trajectory_across_routes():
    catalog = _make_catalog()
    seq_set = TSequenceSet(
        (
            _make_sequence((0.0, 0), (0.3, 3)),
            _make_sequence((0.0, 5), (0.2, 9), route_id=3),
        )
    )
    assert positions(seq_set, catalog) == [
        NetworkSegment(1, 0.0, 0.3),
        NetworkSegment(3, 0.0, 0.2),
    ]
    path = trajectory(seq_set, catalog)
    assert isinstance(path, MultiLineString)
    assert path.length == pytest.approx(50.0)


def test_segment_trajectory_requires_same_route():
    catalog = _make_catalog()
    path = segment_trajectory(catalog, NetworkPoint(2, 1.0), NetworkPoint(2, 0.0))
    assert list(path.coords) == [(10.0, 10.0), (0.0, 10.0), (0.0, 0.0)]
    with pytest.raises(RouteMismatchError):
        segment_trajectory(catalog, NetworkPoint(1, 0.1), NetworkPoint(2, 0.1))
