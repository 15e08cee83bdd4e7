from __future__ import annotations

from datetime import datetime, timedelta

import pytest
import shapely
from shapely.geometry import LineString, Point

from netmob.analytics.proximity import (
    distance,
    nearest_approach_distance,
    nearest_approach_distance_geometry,
    nearest_approach_distance_npoint,
    nearest_approach_instant,
    nearest_approach_instant_geometry,
    nearest_approach_instant_npoint,
    shortest_connecting_line,
    shortest_line,
    shortest_line_geometry,
    shortest_line_npoint,
)
from netmob.network.domain_types import NetworkPoint
from netmob.network.errors import SpatialReferenceError
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


def test_distance_inserts_turning_point():
    catalog = _make_catalog()
    eastbound = _make_sequence((0.0, 0), (1.0, 10))
    westbound = _make_sequence((1.0, 0), (0.0, 10))
    dist = distance(eastbound, westbound, catalog)
    assert [inst.t for inst in dist.instants] == [_t(0), _t(5), _t(10)]
    assert [inst.value for inst in dist.instants] == pytest.approx([100.0, 0.0, 100.0])
    assert dist.interpolation is Interpolation.LINEAR


def test_nearest_approach_is_symmetric():
    catalog = _make_catalog()
    eastbound = _make_sequence((0.0, 0), (1.0, 10))
    parked = _make_sequence((0.7, 0), (0.7, 10), route_id=3)
    assert nearest_approach_distance(eastbound, parked, catalog) == pytest.approx(20.0)
    assert nearest_approach_distance(parked, eastbound, catalog) == pytest.approx(20.0)

    closest = nearest_approach_instant(eastbound, parked, catalog)
    assert closest.t == _t(5)
    assert closest.value.route_id == 1
    assert closest.value.fraction == pytest.approx(0.5)

    line = shortest_line(eastbound, parked, catalog)
    assert line.length == pytest.approx(20.0)
    assert line.coords[0] == pytest.approx((50.0, 0.0))
    assert line.coords[-1] == pytest.approx((50.0, 20.0))


def test_disjoint_values_fall_back_to_trajectory_distance():
    catalog = _make_catalog()
    early = _make_sequence((0.0, 0), (1.0, 10))
    late = _make_sequence((0.0, 20), (0.2, 30), route_id=3)
    assert distance(early, late, catalog) is None
    assert nearest_approach_distance(early, late, catalog) == pytest.approx(30.0)
    assert nearest_approach_instant(early, late, catalog) is None
    assert shortest_line(early, late, catalog) is None
    assert shortest_connecting_line(early, late, catalog) is None


def test_stepwise_distance_has_no_turning_points():
    catalog = _make_catalog()
    step = _make_sequence((0.0, 0), (1.0, 10), interpolation=Interpolation.STEP)
    parked = _make_sequence((0.5, 0), (0.5, 10), route_id=1, interpolation=Interpolation.STEP)
    dist = distance(step, parked, catalog)
    assert dist.interpolation is Interpolation.STEP
    assert [inst.value for inst in dist.instants] == pytest.approx([50.0, 50.0])


def test_discrete_distance():
    catalog = _make_catalog()
    visits = TInstantSet(
        (TInstant(NetworkPoint(1, 0.2), _t(2)), TInstant(NetworkPoint(1, 0.9), _t(8)))
    )
    eastbound = _make_sequence((0.0, 0), (1.0, 10))
    dist = distance(visits, eastbound, catalog)
    assert isinstance(dist, TInstantSet)
    assert [inst.value for inst in dist.instants] == pytest.approx([0.0, 10.0])


def test_static_geometry_operands():
    catalog = _make_catalog()
    eastbound = _make_sequence((0.0, 0), (1.0, 10))
    assert nearest_approach_distance_geometry(eastbound, Point(50, 20), catalog) == pytest.approx(20.0)
    line = shortest_line_geometry(eastbound, Point(50, 20), catalog)
    assert line.coords[0] == pytest.approx((50.0, 0.0))

    closest = nearest_approach_instant_geometry(eastbound, Point(30, 5), catalog)
    assert closest.t == _t(3)
    assert closest.value.fraction == pytest.approx(0.3)

    empty = LineString()
    assert nearest_approach_distance_geometry(eastbound, empty, catalog) is None
    assert nearest_approach_instant_geometry(eastbound, empty, catalog) is None
    assert shortest_line_geometry(eastbound, empty, catalog) is None


def test_static_network_point_operands():
    catalog = _make_catalog()
    eastbound = _make_sequence((0.0, 0), (1.0, 10))
    target = NetworkPoint(3, 0.7)
    assert nearest_approach_distance_npoint(eastbound, target, catalog) == pytest.approx(20.0)
    assert shortest_line_npoint(eastbound, target, catalog).length == pytest.approx(20.0)
    closest = nearest_approach_instant_npoint(eastbound, target, catalog)
    assert closest.t == _t(5)


def test_static_operand_srid_must_match():
    projected = RouteCatalog([], srid=3857)
    eastbound = _make_sequence((0.0, 0), (1.0, 10))
    with pytest.raises(SpatialReferenceError):
        nearest_approach_distance_geometry(
            eastbound, shapely.set_srid(Point(0, 0), 4326), projected
        )


def test_mixed_interpolation_distance_keeps_limit_before_step():
    catalog = _make_catalog()
    step = _make_sequence((0.0, 0), (1.0, 10), interpolation=Interpolation.STEP)
    westbound = _make_sequence((1.0, 0), (0.0, 10))
    dist = distance(step, westbound, catalog)
    assert isinstance(dist, TSequenceSet)
    closing, jumped = dist.sequences
    assert [inst.value for inst in closing.instants] == pytest.approx([100.0, 0.0])
    assert not closing.upper_inc
    assert [inst.value for inst in jumped.instants] == pytest.approx([100.0])
    assert jumped.instants[0].t == _t(10)

    assert nearest_approach_distance(step, westbound, catalog) == pytest.approx(0.0)
    assert nearest_approach_distance(westbound, step, catalog) == pytest.approx(0.0)

    closest = nearest_approach_instant(step, westbound, catalog)
    assert closest.t == _t(10)
    assert closest.value == NetworkPoint(1, 0.0)
    assert shortest_line(step, westbound, catalog).length == pytest.approx(0.0)


def test_mixed_interpolation_without_step_change_stays_continuous():
    catalog = _make_catalog()
    parked = _make_sequence((0.5, 0), (0.5, 10), interpolation=Interpolation.STEP)
    eastbound = _make_sequence((0.0, 0), (1.0, 10))
    dist = distance(parked, eastbound, catalog)
    assert isinstance(dist, TSequence)
    assert [inst.t for inst in dist.instants] == [_t(0), _t(5), _t(10)]
    assert [inst.value for inst in dist.instants] == pytest.approx([50.0, 0.0, 50.0])
