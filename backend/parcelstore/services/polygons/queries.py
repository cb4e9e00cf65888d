# backend/parcelstore/services/polygons/queries.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from parcelstore.db import SessionLocal
from parcelstore.errors import StorageFault
from parcelstore.models.coordinate import Coordinate
from parcelstore.models.polygon import Polygon
from parcelstore.models.polygon_vertex import PolygonVertex
from parcelstore.schemas.polygon import PolygonSummary

logger = logging.getLogger(__name__)


def _summary_stmt():
    vertex_count = func.count(PolygonVertex.point_id).label("vertex_count")
    return (
        select(Polygon, vertex_count)
        .outerjoin(PolygonVertex, PolygonVertex.polygon_id == Polygon.polygon_id)
        .group_by(Polygon.polygon_id)
    )


def _to_summary(p: Polygon, vertex_count: int) -> PolygonSummary:
    return PolygonSummary(
        polygon_id=p.polygon_id,
        polygon_name=p.polygon_name,
        description=p.description,
        created_at=p.created_at,
        last_modified=p.last_modified,
        vertex_count=vertex_count,
    )


def _read_failed(message: str, exc: SQLAlchemyError) -> StorageFault:
    logger.exception(message)
    return StorageFault(message, cause=exc)


def list_polygons() -> List[PolygonSummary]:
    """全ポリゴンを頂点数付きで作成日時の新しい順に返す。"""
    session = SessionLocal()
    try:
        stmt = _summary_stmt().order_by(Polygon.created_at.desc(), Polygon.polygon_id.desc())
        return [_to_summary(p, n) for p, n in session.execute(stmt).all()]
    except SQLAlchemyError as exc:
        raise _read_failed("failed to list polygons", exc) from exc
    finally:
        session.close()


def get_polygon(polygon_id: int) -> Optional[PolygonSummary]:
    session = SessionLocal()
    try:
        row = session.execute(_summary_stmt().where(Polygon.polygon_id == polygon_id)).first()
        if row is None:
            return None
        return _to_summary(row[0], row[1])
    except SQLAlchemyError as exc:
        raise _read_failed(f"failed to load polygon {polygon_id}", exc) from exc
    finally:
        session.close()


def get_vertices(polygon_id: int) -> List[Tuple[float, float]]:
    """
    頂点を vertex_order 昇順で返す。
    ポリゴンが存在しない場合も頂点が無い場合も空リスト（区別しない）。
    """
    session = SessionLocal()
    try:
        stmt = (
            select(Coordinate.x, Coordinate.y)
            .join(PolygonVertex, PolygonVertex.point_id == Coordinate.id)
            .where(PolygonVertex.polygon_id == polygon_id)
            .order_by(PolygonVertex.vertex_order.asc())
        )
        return [(x, y) for x, y in session.execute(stmt).all()]
    except SQLAlchemyError as exc:
        raise _read_failed(f"failed to load vertices of polygon {polygon_id}", exc) from exc
    finally:
        session.close()


def polygon_ids_with_vertex_count(vertex_count: int) -> List[int]:
    session = SessionLocal()
    try:
        stmt = (
            select(PolygonVertex.polygon_id)
            .group_by(PolygonVertex.polygon_id)
            .having(func.count() == vertex_count)
            .order_by(PolygonVertex.polygon_id.asc())
        )
        return list(session.execute(stmt).scalars())
    except SQLAlchemyError as exc:
        raise _read_failed(f"failed to list polygons with {vertex_count} vertices", exc) from exc
    finally:
        session.close()
