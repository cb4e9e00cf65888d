# backend/parcelstore/services/polygons/matcher.py
"""
頂点列によるポリゴン同一判定。

2つのリングは、一方の巡回シフトが他方と各頂点で許容誤差内に一致すれば同一とみなす。
逆回り（鏡像の巡回順）は既定では別物として扱う。include_reversed=True で逆順も試す。
O(n^2) だが地番ポリゴンの頂点数では問題にならない。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from parcelstore.errors import StorageFault
from parcelstore.services.coordinates.store import COORDINATE_TOLERANCE
from parcelstore.services.polygons import queries
from parcelstore.services.polygons.validation import MIN_VERTICES, Point, to_point

logger = logging.getLogger(__name__)


class MatchStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    SCAN_FAILED = "scan_failed"


@dataclass(frozen=True)
class MatchResult:
    status: MatchStatus
    polygon_id: Optional[int] = None
    error: Optional[BaseException] = None

    @property
    def found(self) -> bool:
        return self.status is MatchStatus.FOUND


def points_equal(a: Sequence[float], b: Sequence[float], tolerance: float = COORDINATE_TOLERANCE) -> bool:
    return abs(a[0] - b[0]) < tolerance and abs(a[1] - b[1]) < tolerance


def _equal_with_rotation(ring_a: Sequence[Point], ring_b: Sequence[Point], tolerance: float) -> bool:
    n = len(ring_a)
    for start in range(n):
        if all(points_equal(ring_a[i], ring_b[(start + i) % n], tolerance) for i in range(n)):
            return True
    return False


def rings_equal(
    ring_a: Sequence[Point],
    ring_b: Sequence[Point],
    tolerance: float = COORDINATE_TOLERANCE,
    include_reversed: bool = False,
) -> bool:
    if len(ring_a) != len(ring_b):
        return False
    if _equal_with_rotation(ring_a, ring_b, tolerance):
        return True
    if include_reversed:
        return _equal_with_rotation(ring_a, list(reversed(ring_b)), tolerance)
    return False


def match_polygon(vertices: Iterable[Sequence[float]], tolerance: float = COORDINATE_TOLERANCE) -> MatchResult:
    """
    頂点数が同じ保存済みポリゴンを id 順に走査し、最初に一致したものを返す。

    Returns:
        MatchResult: FOUND(polygon_id) / NOT_FOUND / SCAN_FAILED(error)
    """
    raw = list(vertices or [])
    if len(raw) < MIN_VERTICES:
        return MatchResult(MatchStatus.NOT_FOUND)
    ring: List[Point] = [to_point(v) for v in raw]

    try:
        for polygon_id in queries.polygon_ids_with_vertex_count(len(ring)):
            existing = queries.get_vertices(polygon_id)
            if rings_equal(ring, existing, tolerance):
                logger.debug("vertices match polygon %s", polygon_id)
                return MatchResult(MatchStatus.FOUND, polygon_id=polygon_id)
    except (StorageFault, SQLAlchemyError) as exc:
        logger.exception("failed to scan polygons for a vertex match")
        return MatchResult(MatchStatus.SCAN_FAILED, error=exc)

    return MatchResult(MatchStatus.NOT_FOUND)


def find_polygon_id_by_vertices(vertices: Iterable[Sequence[float]], tolerance: float = COORDINATE_TOLERANCE) -> Optional[int]:
    """
    一致するポリゴン id を返す。見つからない場合は None。
    走査中のストレージ障害も None になる（区別が必要なら match_polygon を使う）。
    """
    result = match_polygon(vertices, tolerance)
    return result.polygon_id if result.found else None
