# backend/parcelstore/models/polygon.py
from sqlalchemy import Integer, String, Text, DateTime, Column
from .base import Base, utcnow

POLYGON_NAME_MAX_LENGTH = 50


class Polygon(Base):
    __tablename__ = "polygons"
    polygon_id = Column(Integer, primary_key=True)
    polygon_name = Column(String(POLYGON_NAME_MAX_LENGTH), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    last_modified = Column(DateTime, nullable=False, default=utcnow)
