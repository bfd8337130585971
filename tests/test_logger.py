import logging

import pytest

from chordshift.config import Config
from chordshift.logger import logger, setup_logger


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


def test_setup_logger_uses_config_level(monkeypatch):
    monkeypatch.setattr(Config, "LOG_LEVEL", "ERROR")
    assert setup_logger() is logger
    assert logger.level == logging.ERROR


def test_setup_logger_explicit_level_wins():
    setup_logger("debug")
    assert logger.level == logging.DEBUG


def test_setup_logger_replaces_its_own_handler():
    setup_logger()
    setup_logger()
    assert len(logger.handlers) == 1
    assert type(logger.handlers[0]) is logging.StreamHandler


def test_setup_logger_keeps_foreign_handlers():
    other = logging.NullHandler()
    logger.addHandler(other)
    setup_logger()
    setup_logger()
    assert other in logger.handlers
    assert len(logger.handlers) == 2
