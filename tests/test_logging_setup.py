"""Tests for CLI logging configuration."""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from kcap.logging_setup import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_debug_flag_enables_debug(restore_root_logger: logging.Logger) -> None:
    setup_logging(debug=True, level="ERROR")
    assert restore_root_logger.level == logging.DEBUG
    assert any(isinstance(h, RichHandler) for h in restore_root_logger.handlers)
    assert logging.getLogger("httpx").level == logging.WARNING


def test_configured_level(restore_root_logger: logging.Logger) -> None:
    setup_logging(level="INFO")
    assert restore_root_logger.level == logging.INFO


def test_unknown_level_falls_back_to_warning(
    restore_root_logger: logging.Logger,
) -> None:
    setup_logging(level="CHATTY")
    assert restore_root_logger.level == logging.WARNING


def test_non_level_attribute_falls_back_to_warning(
    restore_root_logger: logging.Logger,
) -> None:
    setup_logging(level="BASIC_FORMAT")
    assert restore_root_logger.level == logging.WARNING
