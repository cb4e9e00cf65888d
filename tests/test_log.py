import logging

import pytest

from parcelstore.log import configure_logging, resolve_level


@pytest.fixture
def restore_level():
    logger = logging.getLogger("parcelstore")
    before = logger.level
    yield logger
    logger.setLevel(before)


def test_resolve_level():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" WARNING ") == logging.WARNING
    assert resolve_level("verbose") is None


def test_unknown_level_falls_back_to_info(monkeypatch, restore_level):
    monkeypatch.setenv("PARCELSTORE_LOG_LEVEL", "verbose")
    configure_logging()
    assert restore_level.level == logging.INFO


def test_level_from_environment(monkeypatch, restore_level):
    monkeypatch.setenv("PARCELSTORE_LOG_LEVEL", "debug")
    configure_logging()
    assert restore_level.level == logging.DEBUG


def test_handlers_are_added_once(monkeypatch, restore_level):
    monkeypatch.delenv("PARCELSTORE_LOG_LEVEL", raising=False)
    configure_logging()
    count = len(restore_level.handlers)
    configure_logging()
    assert len(restore_level.handlers) == count
