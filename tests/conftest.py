import pytest
from sqlalchemy import func, select

from parcelstore import db


@pytest.fixture(autouse=True)
def database(tmp_path):
    """テストごとに一時ディレクトリへ新しい SQLite ファイルを作成する。"""
    db.configure_engine(f"sqlite:///{tmp_path / 'parcels.db'}")
    db.init_db()
    yield db
    db.engine.dispose()


@pytest.fixture
def count_rows():
    def _count(model) -> int:
        session = db.SessionLocal()
        try:
            return session.execute(select(func.count()).select_from(model)).scalar_one()
        finally:
            session.close()

    return _count


SQUARE = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]
