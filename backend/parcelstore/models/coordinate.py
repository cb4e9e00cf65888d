# backend/parcelstore/models/coordinate.py
from sqlalchemy import Integer, String, Float, DateTime, Column, Index, UniqueConstraint
from .base import Base, utcnow


class Coordinate(Base):
    __tablename__ = "coordinates"
    id = Column(Integer, primary_key=True)
    point_name = Column(String, nullable=False, unique=True)  # PT_0001 形式
    x = Column(Float, nullable=False)
    y = Column(Float, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # 完全一致 (x, y) の重複はDB側でも拒否（許容誤差での重複はアプリ側で検索）
    __table_args__ = (
        UniqueConstraint("x", "y", name="uq_coordinates_xy"),
        Index("idx_coordinates_xy", "x", "y"),
    )
