# backend/parcelstore/errors.py
from typing import Optional

from sqlalchemy.exc import IntegrityError


class ParcelStoreError(Exception):
    pass


class ValidationError(ParcelStoreError, ValueError):
    """入力不正（名前・頂点列）。I/O の前に送出し、リトライしない。"""


class StorageFault(ParcelStoreError):
    """ストレージ層の失敗。ロールバック後に元例外を cause として保持して送出。"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    @property
    def is_conflict(self) -> bool:
        # 一意制約・外部キー制約違反
        return isinstance(self.cause, IntegrityError)


class PolygonNotFoundError(ParcelStoreError, LookupError):
    def __init__(self, polygon_id: int):
        super().__init__(f"polygon {polygon_id} not found")
        self.polygon_id = polygon_id
