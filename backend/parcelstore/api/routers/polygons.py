from fastapi import APIRouter, HTTPException

from parcelstore.errors import PolygonNotFoundError, StorageFault, ValidationError
from parcelstore.schemas.polygon import (
    MatchIn,
    MatchOut,
    PolygonCreated,
    PolygonIn,
    PolygonRename,
    PolygonSummary,
    VerticesOut,
)
from parcelstore.services.coordinates.store import COORDINATE_TOLERANCE
from parcelstore.services.polygons import matcher, queries, repository

router = APIRouter()


def _storage_error(exc: StorageFault) -> HTTPException:
    # 一意制約違反（名前重複など）は 409、それ以外は 500
    if exc.is_conflict:
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


@router.get("")
@router.get("/")
def list_polygons() -> list[PolygonSummary]:
    try:
        return queries.list_polygons()
    except StorageFault as exc:
        raise _storage_error(exc)


@router.post("")
@router.post("/")
def create_polygon(payload: PolygonIn) -> PolygonCreated:
    try:
        polygon_id = repository.insert_polygon(payload.name, payload.description, payload.vertices)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except StorageFault as exc:
        raise _storage_error(exc)
    return PolygonCreated(polygon_id=polygon_id)


@router.post("/match")
def match_polygon(payload: MatchIn) -> MatchOut:
    tolerance = payload.tolerance or COORDINATE_TOLERANCE
    try:
        result = matcher.match_polygon(payload.vertices, tolerance)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return MatchOut(
        status=result.status.value,
        polygon_id=result.polygon_id,
        detail=str(result.error) if result.error else None,
    )


@router.get("/{polygon_id}")
def get_polygon(polygon_id: int) -> PolygonSummary:
    try:
        p = queries.get_polygon(polygon_id)
    except StorageFault as exc:
        raise _storage_error(exc)
    if p is None:
        raise HTTPException(status_code=404, detail="polygon not found")
    return p


@router.patch("/{polygon_id}")
def rename_polygon(polygon_id: int, payload: PolygonRename) -> PolygonSummary:
    try:
        repository.rename_polygon(polygon_id, payload.name)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except PolygonNotFoundError:
        raise HTTPException(status_code=404, detail="polygon not found")
    except StorageFault as exc:
        raise _storage_error(exc)
    try:
        return queries.get_polygon(polygon_id)
    except StorageFault as exc:
        raise _storage_error(exc)


@router.get("/{polygon_id}/vertices")
def get_vertices(polygon_id: int) -> VerticesOut:
    try:
        vertices = queries.get_vertices(polygon_id)
    except StorageFault as exc:
        raise _storage_error(exc)
    return VerticesOut(polygon_id=polygon_id, vertices=vertices)
