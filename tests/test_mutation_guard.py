import threading
from concurrent.futures import ThreadPoolExecutor

from parcelstore.models.coordinate import Coordinate
from parcelstore.models.polygon import Polygon
from parcelstore.services.coordinates import store
from parcelstore.services.guard.mutation import mutation_guard, serialized
from parcelstore.services.polygons import queries, repository
from parcelstore.services.polygons.repository import insert_polygon, rename_polygon

from tests.conftest import SQUARE


def _guard_is_free(timeout=2.0) -> bool:
    # 別スレッドから取得できればロックは解放済み
    done = threading.Event()

    def enter():
        with mutation_guard():
            done.set()

    t = threading.Thread(target=enter, daemon=True)
    t.start()
    return done.wait(timeout)


def test_serialized_functions_never_overlap():
    active = 0
    peak = 0
    counter_lock = threading.Lock()

    @serialized
    def work():
        nonlocal active, peak
        with counter_lock:
            active += 1
            peak = max(peak, active)
        threading.Event().wait(0.005)
        with counter_lock:
            active -= 1

    with ThreadPoolExecutor(max_workers=8) as pool:
        for _ in range(32):
            pool.submit(work)

    assert peak == 1
    assert _guard_is_free()


def test_guard_is_released_after_error():
    try:
        with mutation_guard():
            assert not _guard_is_free(timeout=0.05)
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert _guard_is_free()


def test_concurrent_inserts_do_not_duplicate_shared_points(count_rows):
    shared = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]

    def save(i):
        # 全ポリゴンが 3 点を共有し、固有の 1 点を持つ
        return insert_polygon(f"Parcel-{i}", None, shared + [(-1.0 - i, 5.0)])

    with ThreadPoolExecutor(max_workers=6) as pool:
        ids = list(pool.map(save, range(12)))

    assert len(set(ids)) == 12
    assert count_rows(Polygon) == 12
    assert count_rows(Coordinate) == 3 + 12


def test_concurrent_point_registration_yields_unique_names():
    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(lambda i: store.ensure_point(float(i % 5), 0.0), range(40)))

    assert len(set(ids)) == 5


def test_rename_and_insert_interleave_safely():
    polygon_id = insert_polygon("Parcel-0", None, [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)])

    def work(i):
        if i % 2:
            rename_polygon(polygon_id, f"Renamed-{i}")
        else:
            insert_polygon(f"Other-{i}", None, [(i, 0.0), (i + 0.5, 0.0), (i, 0.5)])

    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(work, range(2, 12)))

    assert queries.get_polygon(polygon_id).polygon_name.startswith("Renamed-")
    assert len(queries.list_polygons()) == 6


def test_reads_during_a_write_see_no_partial_polygon(monkeypatch):
    reached = threading.Event()
    release = threading.Event()
    calls = []
    real_find_or_insert = repository.find_or_insert

    def slow_find_or_insert(session, x, y, *args, **kwargs):
        calls.append((x, y))
        if len(calls) == 3:
            # 頂点 2 つを書き込んだ状態で停止
            reached.set()
            release.wait(5)
        return real_find_or_insert(session, x, y, *args, **kwargs)

    monkeypatch.setattr(repository, "find_or_insert", slow_find_or_insert)

    saved = {}
    writer = threading.Thread(target=lambda: saved.setdefault("id", insert_polygon("Parcel-A", None, SQUARE)))
    writer.start()
    try:
        assert reached.wait(5)
        assert queries.list_polygons() == []
        assert queries.polygon_ids_with_vertex_count(4) == []
        assert queries.polygon_ids_with_vertex_count(2) == []
    finally:
        release.set()
        writer.join(5)

    assert not writer.is_alive()
    rows = queries.list_polygons()
    assert [r.polygon_id for r in rows] == [saved["id"]]
    assert rows[0].vertex_count == 4
    assert queries.polygon_ids_with_vertex_count(4) == [saved["id"]]
    assert queries.get_vertices(saved["id"]) == SQUARE
