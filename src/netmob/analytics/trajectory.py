"""Reconstruct the geometric path traced by a temporal network point."""

from __future__ import annotations

from typing import Iterable, List

from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from netmob.network import geometry as geom_ops
from netmob.network.domain_types import NetworkPoint, NetworkSegment
from netmob.network.errors import RouteMismatchError
from netmob.network.routes import RouteCatalog
from netmob.temporal.temporal_types import (
    Temporal,
    TSequence,
    TSequenceSet,
    all_instants,
    dispatch,
)


def segment_trajectory(
    catalog: RouteCatalog, start: NetworkPoint, end: NetworkPoint
) -> BaseGeometry:
    """Path travelled between two positions of the same route, in travel order."""
    if start.route_id != end.route_id:
        raise RouteMismatchError("Consecutive network points must share a route")
    if start.fraction == end.fraction:
        return catalog.resolve_point(start)
    line = catalog.route(start.route_id).geometry
    return geom_ops.line_substring(line, start.fraction, end.fraction)


def distinct_npoints(catalog: RouteCatalog, points: Iterable[NetworkPoint]) -> List[NetworkPoint]:
    """Drop repeated positions, keeping first occurrences in order."""
    result: List[NetworkPoint] = []
    for point in points:
        if not any(catalog.same_position(point, kept) for kept in result):
            result.append(point)
    return result


def npoints(temp: Temporal, catalog: RouteCatalog) -> List[NetworkPoint]:
    """Distinct network positions taken by ``temp``."""
    return distinct_npoints(catalog, (inst.value for inst in all_instants(temp)))


def linear_positions(seq: TSequence) -> NetworkSegment:
    """Smallest network segment covering a sequence."""
    return NetworkSegment.spanning(inst.value for inst in seq.instants)


def _merge_segments(segments: Iterable[NetworkSegment]) -> List[NetworkSegment]:
    ordered = sorted(segments, key=lambda s: (s.route_id, s.fraction_lo))
    merged: List[NetworkSegment] = []
    for segment in ordered:
        if merged and merged[-1].overlaps(segment):
            merged[-1] = merged[-1].merge(segment)
        else:
            merged.append(segment)
    return merged


def _point_segments(temp: Temporal, catalog: RouteCatalog) -> List[NetworkSegment]:
    return [
        NetworkSegment(p.route_id, p.fraction, p.fraction) for p in npoints(temp, catalog)
    ]


def positions(temp: Temporal, catalog: RouteCatalog) -> List[NetworkSegment]:
    """Network segments covered by ``temp``, merged per route."""

    def _sequence(seq: TSequence) -> List[NetworkSegment]:
        if seq.is_linear:
            return [linear_positions(seq)]
        return _point_segments(seq, catalog)

    def _sequence_set(ss: TSequenceSet) -> List[NetworkSegment]:
        if ss.is_linear:
            return _merge_segments(linear_positions(seq) for seq in ss.sequences)
        return _point_segments(ss, catalog)

    return dispatch(
        temp,
        instant=lambda inst: _point_segments(inst, catalog),
        instant_set=lambda ti: _point_segments(ti, catalog),
        sequence=_sequence,
        sequence_set=_sequence_set,
    )


def _points_geometry(temp: Temporal, catalog: RouteCatalog) -> BaseGeometry:
    points = [catalog.resolve_point(p) for p in npoints(temp, catalog)]
    return geom_ops.points_geometry(points)


def _sequence_trajectory(seq: TSequence, catalog: RouteCatalog) -> BaseGeometry:
    if seq.count == 1:
        return catalog.resolve_point(seq.instants[0].value)
    if not seq.is_linear:
        return _points_geometry(seq, catalog)
    first, last = seq.instants[0].value, seq.instants[-1].value
    return catalog.segment_geometry(
        linear_positions(seq), reverse=last.fraction < first.fraction
    )


def _sequence_set_trajectory(ss: TSequenceSet, catalog: RouteCatalog) -> BaseGeometry:
    if len(ss.sequences) == 1:
        return _sequence_trajectory(ss.sequences[0], catalog)
    if not ss.is_linear:
        return _points_geometry(ss, catalog)
    geometries = [catalog.segment_geometry(segment) for segment in positions(ss, catalog)]
    if len(geometries) == 1:
        return geometries[0]
    return unary_union(geometries)


def trajectory(temp: Temporal, catalog: RouteCatalog) -> BaseGeometry:
    """Geometry traced by ``temp``: a point, a multipoint or (multi)lines."""
    return dispatch(
        temp,
        instant=lambda inst: catalog.resolve_point(inst.value),
        instant_set=lambda ti: _points_geometry(ti, catalog),
        sequence=lambda seq: _sequence_trajectory(seq, catalog),
        sequence_set=lambda ss: _sequence_set_trajectory(ss, catalog),
    )


__all__ = [
    "distinct_npoints",
    "linear_positions",
    "npoints",
    "positions",
    "segment_trajectory",
    "trajectory",
]
