"""Restrict temporal network points to the inside or outside of a geometry."""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from shapely.geometry import LineString, Point
from shapely.geometry.base import BaseGeometry

from netmob.network import geometry as geom_ops
from netmob.network.routes import RouteCatalog
from netmob.temporal.periods import Period, normalize_periods, periods_minus
from netmob.temporal.restrict import at_periods
from netmob.temporal.temporal_types import (
    Temporal,
    TInstant,
    TInstantSet,
    TSequence,
    dispatch,
    temporal_copy,
    time_domain,
)

from .geometric import from_geometric, to_geometric

logger = logging.getLogger(__name__)


class RestrictionMode(str, Enum):
    AT = "at"
    MINUS = "minus"


def _segment_periods(
    inst1: TInstant, inst2: TInstant, geometry: BaseGeometry
) -> List[Period]:
    """Time spans of a linear segment spent inside ``geometry``."""
    segment = geom_ops.segment_between(inst1.value, inst2.value)
    if isinstance(segment, Point):
        if geometry.intersects(segment):
            return [Period(inst1.t, inst2.t)]
        return []

    def _time(point: Point):
        return inst1.t + (inst2.t - inst1.t) * geom_ops.locate_fraction(segment, point)

    periods: List[Period] = []
    for part in geom_ops.explode(geometry.intersection(segment)):
        if isinstance(part, Point):
            t = _time(part)
            periods.append(Period(t, t))
        elif isinstance(part, LineString):
            ends = sorted((_time(Point(part.coords[0])), _time(Point(part.coords[-1]))))
            periods.append(Period(ends[0], ends[1]))
    return periods


def _periods_inside(seq: TSequence, geometry: BaseGeometry) -> List[Period]:
    instants = seq.instants
    candidates: List[Period] = []
    if seq.count == 1:
        if geometry.intersects(instants[0].value):
            candidates.append(Period(instants[0].t, instants[0].t))
    elif seq.is_linear:
        for inst1, inst2 in zip(instants, instants[1:]):
            candidates.extend(_segment_periods(inst1, inst2, geometry))
    else:
        for inst1, inst2 in zip(instants, instants[1:]):
            if geometry.intersects(inst1.value):
                candidates.append(Period(inst1.t, inst2.t, True, False))
        if geometry.intersects(instants[-1].value):
            candidates.append(Period(instants[-1].t, instants[-1].t))

    bounds = seq.period
    clipped = [p for p in (c.intersection(bounds) for c in candidates) if p is not None]
    return normalize_periods(clipped)


def _restrict_discrete(temp: Temporal, geometry: BaseGeometry, mode: RestrictionMode):
    keep_inside = mode is RestrictionMode.AT
    kept = [
        inst for inst in temp.instants if geometry.intersects(inst.value) == keep_inside
    ]
    if not kept:
        return None
    if isinstance(temp, TInstant):
        return kept[0]
    return TInstantSet(tuple(kept))


def restrict_geometric(
    temp: Temporal, geometry: BaseGeometry, mode: RestrictionMode
) -> Optional[Temporal]:
    """Restrict a temporal 2-D point; ``None`` when nothing is left."""

    def _continuous(sequences) -> Optional[Temporal]:
        inside = normalize_periods(
            period for seq in sequences for period in _periods_inside(seq, geometry)
        )
        if mode is RestrictionMode.MINUS:
            inside = periods_minus(time_domain(temp), inside)
        return at_periods(temp, inside)

    return dispatch(
        temp,
        instant=lambda inst: _restrict_discrete(inst, geometry, mode),
        instant_set=lambda ti: _restrict_discrete(ti, geometry, mode),
        sequence=lambda seq: _continuous([seq]),
        sequence_set=lambda ss: _continuous(ss.sequences),
    )


def restrict(
    temp: Temporal,
    geometry: BaseGeometry,
    mode: RestrictionMode,
    catalog: RouteCatalog,
) -> Optional[Temporal]:
    """Keep the part of ``temp`` inside (AT) or outside (MINUS) ``geometry``.

    An empty geometry restricts nothing: AT gives ``None`` and MINUS an
    unchanged copy. Geometries with a Z dimension are rejected.
    """
    mode = RestrictionMode(mode)
    catalog.ensure_same_srid(geometry)
    if geometry.is_empty:
        logger.debug("Empty restriction geometry with mode %s", mode.value)
        return None if mode is RestrictionMode.AT else temporal_copy(temp)
    geom_ops.ensure_2d(geometry)

    restricted = restrict_geometric(to_geometric(temp, catalog), geometry, mode)
    if restricted is None:
        return None
    return from_geometric(restricted, catalog, reference=temp)


def at_geometry(temp: Temporal, geometry: BaseGeometry, catalog: RouteCatalog) -> Optional[Temporal]:
    return restrict(temp, geometry, RestrictionMode.AT, catalog)


def minus_geometry(temp: Temporal, geometry: BaseGeometry, catalog: RouteCatalog) -> Optional[Temporal]:
    return restrict(temp, geometry, RestrictionMode.MINUS, catalog)


__all__ = [
    "RestrictionMode",
    "at_geometry",
    "minus_geometry",
    "restrict",
    "restrict_geometric",
]
