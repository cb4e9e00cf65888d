# backend/parcelstore/services/guard/mutation.py
"""
書き込み操作の直列化。

プロセス全体で1本のロックを持ち、insert_polygon / rename_polygon / ensure_point を
同時に1つだけ実行させる。座標ストアの「検索してから挿入」が他の書き込みと
競合しないことをこのロックで保証する。読み取りはロック対象外。
"""
from __future__ import annotations

import functools
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

F = TypeVar("F", bound=Callable)

_mutation_lock = threading.Lock()


@contextmanager
def mutation_guard() -> Iterator[None]:
    with _mutation_lock:
        yield


def serialized(func: F) -> F:
    """関数全体を mutation_guard 下で実行するデコレータ。"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with _mutation_lock:
            return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]

