# backend/parcelstore/log.py
import logging
import os

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_configured = False


def resolve_level(name):
    """ログレベル名を数値に変換。不正な値なら None。"""
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else None


def configure_logging() -> None:
    """
    PARCELSTORE_LOG_LEVEL（既定 INFO、不正値も INFO）でパッケージのログレベルを設定。
    PARCELSTORE_LOG_FILE が指定されていれば ERROR 以上を追記する。
    ハンドラの追加は初回呼び出し時のみ。
    """
    global _configured
    raw_level = os.getenv("PARCELSTORE_LOG_LEVEL", "INFO")
    level = resolve_level(raw_level)
    logger = logging.getLogger("parcelstore")
    logger.setLevel(level if level is not None else logging.INFO)

    if not _configured:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(stream)

        log_file = os.getenv("PARCELSTORE_LOG_FILE")
        if log_file:
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setLevel(logging.ERROR)
            fh.setFormatter(logging.Formatter(_FORMAT))
            logger.addHandler(fh)
        _configured = True

    if level is None:
        logger.warning("unknown PARCELSTORE_LOG_LEVEL %r, using INFO", raw_level)
