# backend/parcelstore/schemas/polygon.py
from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Tuple
import datetime as dt

Vertex = Tuple[float, float]
MatchStatus = Literal["found", "not_found", "scan_failed"]


class PolygonSummary(BaseModel):
    polygon_id: int
    polygon_name: str
    description: Optional[str] = None
    created_at: dt.datetime
    last_modified: dt.datetime
    vertex_count: int


class PolygonIn(BaseModel):
    name: str
    description: Optional[str] = None
    # 名前・頂点数の検証はサービス側（ValidationError）で行う
    vertices: List[Vertex] = Field(default_factory=list)


class PolygonCreated(BaseModel):
    polygon_id: int


class PolygonRename(BaseModel):
    name: str


class VerticesOut(BaseModel):
    polygon_id: int
    vertices: List[Vertex]


class MatchIn(BaseModel):
    vertices: List[Vertex]
    tolerance: Optional[float] = Field(default=None, gt=0)


class MatchOut(BaseModel):
    status: MatchStatus
    polygon_id: Optional[int] = None
    detail: Optional[str] = None
