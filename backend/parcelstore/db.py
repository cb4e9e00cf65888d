from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from pathlib import Path
import os

# モデル定義側の Base（parcelstore.models.base）を利用してメタデータを統一
from parcelstore.models.base import Base
from parcelstore.errors import StorageFault


def _default_database_url() -> str:
    # 1) DATABASE_URL が指定されていれば優先（例: postgresql+psycopg://...）
    # 2) それ以外は SQLite ファイルを使用
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    _container_data = Path("/app/data")
    if _container_data.exists():
        db_path = _container_data / "parcels.db"
    else:
        # backend/parcelstore/db.py → ../../.. = <repo root>
        repo_root = Path(__file__).resolve().parents[2]
        db_path = repo_root / "data" / "parcels.db"
    # ディレクトリ作成（存在しない場合）
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite は接続ごとに外部キー制約を有効化しないと CASCADE が効かない
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _build_engine(url: str):
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    eng = create_engine(url, connect_args=connect_args)
    if is_sqlite:
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    return eng


SQLALCHEMY_DATABASE_URL = _default_database_url()
engine = _build_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def configure_engine(url: str):
    """接続先を差し替える（テストや組み込み利用向け）。SessionLocal は同一オブジェクトのまま再バインドする。"""
    global engine, SQLALCHEMY_DATABASE_URL
    old = engine
    SQLALCHEMY_DATABASE_URL = url
    engine = _build_engine(url)
    SessionLocal.configure(bind=engine)
    old.dispose()
    return engine


def init_db() -> None:
    # パッケージ配下の各モデルモジュールを明示 import してメタデータ登録を確実化
    import parcelstore.models.coordinate  # noqa: F401
    import parcelstore.models.polygon  # noqa: F401
    import parcelstore.models.polygon_vertex  # noqa: F401
    Base.metadata.create_all(bind=engine)


def check_connection() -> None:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise StorageFault("database connection test failed", cause=exc) from exc

