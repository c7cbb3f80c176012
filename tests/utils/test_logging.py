"""Tests for gridbase logging helpers."""

from __future__ import annotations

import logging
import sys

import pytest

import gridbase  # noqa: F401  (installs the NullHandler)
from gridbase.utils.logging import LOG_LEVEL_ENV, configure_logging, get_logger


@pytest.fixture
def restore_gridbase_logger():
    logger = logging.getLogger("gridbase")
    handlers = logger.handlers[:]
    level = logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_package_logger_has_null_handler() -> None:
    logger = logging.getLogger("gridbase")
    assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)


def test_get_logger_defaults_to_package_logger() -> None:
    assert get_logger().name == "gridbase"
    assert get_logger("gridbase.grid.row_cache").name == "gridbase.grid.row_cache"


def test_configure_logging_adds_one_stderr_handler(restore_gridbase_logger: logging.Logger) -> None:
    root_handlers = logging.getLogger().handlers[:]
    configure_logging(level="DEBUG")
    configure_logging(level="DEBUG")

    stderr_handlers = [
        h
        for h in restore_gridbase_logger.handlers
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
    ]
    assert len(stderr_handlers) == 1
    assert restore_gridbase_logger.level == logging.DEBUG
    assert logging.getLogger().handlers == root_handlers


def test_configure_logging_reads_env_level(
    restore_gridbase_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV, "warning")
    configure_logging(force=True)
    assert restore_gridbase_logger.level == logging.WARNING


def test_force_replaces_handlers(restore_gridbase_logger: logging.Logger) -> None:
    configure_logging(level="INFO")
    before = list(restore_gridbase_logger.handlers)

    configure_logging(level="ERROR", force=True)

    assert len(restore_gridbase_logger.handlers) == 1
    assert restore_gridbase_logger.handlers[0] not in before
    assert restore_gridbase_logger.level == logging.ERROR
