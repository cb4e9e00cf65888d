# backend/parcelstore/services/polygons/validation.py
from __future__ import annotations

import math
import re
from typing import Iterable, List, Sequence, Tuple

from parcelstore.errors import ValidationError
from parcelstore.models.polygon import POLYGON_NAME_MAX_LENGTH

Point = Tuple[float, float]

MIN_VERTICES = 3
_VALID_NAME_RE = re.compile(r"^[a-zA-Z0-9\-_\s]+$")


def validate_polygon_name(name) -> str:
    """前後の空白を除いた名前を返す。空・50文字超・許可外の文字は ValidationError。"""
    if name is not None and not isinstance(name, str):
        raise ValidationError(f"Polygon name must be a string, got {type(name).__name__}")
    if name is None or not name.strip():
        raise ValidationError("Polygon name cannot be empty")
    name = name.strip()
    if len(name) > POLYGON_NAME_MAX_LENGTH:
        raise ValidationError(f"Polygon name is too long (maximum {POLYGON_NAME_MAX_LENGTH} characters)")
    if not _VALID_NAME_RE.match(name):
        raise ValidationError("Polygon name can only contain letters, numbers, spaces, hyphens, and underscores")
    return name


def to_point(vertex: Sequence[float]) -> Point:
    try:
        x, y = vertex
        x, y = float(x), float(y)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"vertex must be an (x, y) pair of numbers, got {vertex!r}") from exc
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValidationError(f"vertex coordinates must be finite, got {vertex!r}")
    return (x, y)


def normalize_ring(vertices: Iterable[Sequence[float]]) -> List[Point]:
    if vertices is None:
        raise ValidationError("A polygon must have at least 3 vertices")
    ring = [to_point(v) for v in vertices]
    if len(ring) < MIN_VERTICES:
        raise ValidationError("A polygon must have at least 3 vertices")
    return ring
