# backend/parcelstore/services/polygons/repository.py
"""
ポリゴンの保存と名前変更。

insert_polygon は Polygon 行・各頂点の座標 find-or-insert・PolygonVertex 行を
1トランザクションで書き込む。途中で失敗した場合は全体をロールバックする
（同じトランザクション内で作成された Coordinate 行も含む）。
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from parcelstore.db import SessionLocal
from parcelstore.errors import PolygonNotFoundError, StorageFault
from parcelstore.models.base import utcnow
from parcelstore.models.polygon import Polygon
from parcelstore.models.polygon_vertex import PolygonVertex
from parcelstore.services.coordinates.store import find_or_insert
from parcelstore.services.guard.mutation import mutation_guard
from parcelstore.services.polygons.validation import normalize_ring, validate_polygon_name

logger = logging.getLogger(__name__)


def insert_polygon(name: str, description: Optional[str], vertices: Iterable[Sequence[float]]) -> int:
    # 入力検証は I/O 前に行う
    name = validate_polygon_name(name)
    ring = normalize_ring(vertices)

    with mutation_guard():
        session = SessionLocal()
        try:
            polygon = Polygon(polygon_name=name, description=description)
            session.add(polygon)
            session.flush()  # polygon_id 採番
            polygon_id = polygon.polygon_id

            for order, (x, y) in enumerate(ring):
                point_id = find_or_insert(session, x, y)
                session.add(PolygonVertex(polygon_id=polygon_id, point_id=point_id, vertex_order=order))
                # 同一点の重複参照などをこの頂点で検出させる
                session.flush()

            session.commit()
            logger.info("polygon '%s' saved as %s with %d vertices", name, polygon_id, len(ring))
            return polygon_id
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("failed to save polygon '%s'", name)
            raise StorageFault(f"failed to save polygon '{name}'", cause=exc) from exc
        finally:
            session.close()


def rename_polygon(polygon_id: int, new_name: str) -> None:
    new_name = validate_polygon_name(new_name)

    with mutation_guard():
        session = SessionLocal()
        try:
            polygon = session.get(Polygon, polygon_id)
            if polygon is None:
                raise PolygonNotFoundError(polygon_id)
            old_name = polygon.polygon_name
            polygon.polygon_name = new_name
            polygon.last_modified = utcnow()
            session.commit()
            logger.info("polygon %s renamed from '%s' to '%s'", polygon_id, old_name, new_name)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("failed to rename polygon %s", polygon_id)
            raise StorageFault(f"failed to rename polygon {polygon_id} to '{new_name}'", cause=exc) from exc
        finally:
            session.close()
