# backend/parcelstore/services/coordinates/store.py
"""
座標ストア。許容誤差内の既存点を探し、無ければ PT_#### 名で新規登録する。

一致判定は |dx| < tol かつ |dy| < tol（境界は一致しない）。候補が複数ある場合は
id 昇順で最初に見つかったものを返す（最も近い点ではない）。
"""
from __future__ import annotations

import logging
import math
import re
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from parcelstore.db import SessionLocal
from parcelstore.errors import StorageFault, ValidationError
from parcelstore.models.coordinate import Coordinate
from parcelstore.services.guard.mutation import serialized

logger = logging.getLogger(__name__)

COORDINATE_TOLERANCE = 1e-4
POINT_NAME_PREFIX = "PT_"
_POINT_NAME_RE = re.compile(r"^PT_(\d+)$")


def format_point_name(number: int) -> str:
    return f"{POINT_NAME_PREFIX}{number:04d}"


def find_point(session: Session, x: float, y: float, tolerance: float = COORDINATE_TOLERANCE) -> Optional[int]:
    stmt = (
        select(Coordinate.id)
        .where(func.abs(Coordinate.x - x) < tolerance)
        .where(func.abs(Coordinate.y - y) < tolerance)
        .order_by(Coordinate.id.asc())
        .limit(1)
    )
    return session.execute(stmt).scalar_one_or_none()


def next_point_name(session: Session) -> str:
    # 欠番は詰めない。PT_<数字> 以外の名前は無視
    names = session.execute(
        select(Coordinate.point_name).where(Coordinate.point_name.like(f"{POINT_NAME_PREFIX}%"))
    ).scalars()
    highest = 0
    for name in names:
        m = _POINT_NAME_RE.match(name)
        if m:
            highest = max(highest, int(m.group(1)))
    return format_point_name(highest + 1)


def find_or_insert(session: Session, x: float, y: float, tolerance: float = COORDINATE_TOLERANCE) -> int:
    """
    呼び出し側のトランザクション内で点を検索・登録する。commit はしない。
    1回の呼び出しで作成される Coordinate は高々1行。
    """
    point_id = find_point(session, x, y, tolerance)
    if point_id is not None:
        logger.debug("reusing point %s for (%r, %r)", point_id, x, y)
        return point_id

    point = Coordinate(point_name=next_point_name(session), x=x, y=y)
    session.add(point)
    session.flush()  # id 採番
    logger.info("created point %s (%s) at (%r, %r)", point.id, point.point_name, x, y)
    return point.id


@serialized
def ensure_point(x: float, y: float) -> int:
    """単独で find-or-insert を行う（自前のセッション・トランザクション）。"""
    try:
        x, y = float(x), float(y)
    except (TypeError, ValueError) as exc:
        raise ValidationError("coordinates must be numeric") from exc
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValidationError("coordinates must be finite")

    session = SessionLocal()
    try:
        point_id = find_or_insert(session, x, y)
        session.commit()
        return point_id
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("failed to store point (%r, %r)", x, y)
        raise StorageFault(f"failed to store point ({x!r}, {y!r})", cause=exc) from exc
    finally:
        session.close()
