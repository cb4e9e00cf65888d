# backend/parcelstore/models/polygon_vertex.py
from sqlalchemy import Integer, Column, ForeignKey, UniqueConstraint
from .base import Base


class PolygonVertex(Base):
    __tablename__ = "polygon_vertices"
    polygon_id = Column(Integer, ForeignKey("polygons.polygon_id", ondelete="CASCADE"), primary_key=True)
    point_id = Column(Integer, ForeignKey("coordinates.id", ondelete="CASCADE"), primary_key=True)
    vertex_order = Column(Integer, nullable=False)  # 0 始まり、ポリゴン内で連番

    __table_args__ = (
        UniqueConstraint("polygon_id", "vertex_order", name="uq_polygon_vertices_order"),
    )
