from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency of
configuration and the daily crawl/error log split.
"""

import logging
from datetime import date
from logging.handlers import QueueHandler
from pathlib import Path

import pytest

from pyqcrawler.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_dated_log_paths,
    shutdown_logging,
)
from pyqcrawler.infra.logging.core import _CONFIGURED_FLAG_ATTR, _QUEUE_LISTENER_ATTR

DAY = date(2024, 3, 7)


@pytest.fixture(autouse=True)
def reset_logging():
    """Remove the crawler's handlers before and after each test."""
    root = logging.getLogger()
    level = root.level
    shutdown_logging()
    yield
    shutdown_logging()
    root.setLevel(level)


def _our_handlers(root: logging.Logger):
    return [h for h in root.handlers if getattr(h, "_pyqcrawler_handler", False)]


def test_logging_idempotency() -> None:
    """TC-01: Verify that multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    root = logging.getLogger()
    initial_handler_count = len(root.handlers)

    configure_logging(cfg)
    assert len(root.handlers) == initial_handler_count, "Handlers were duplicated."


def test_queue_listener_architecture() -> None:
    configure_logging(LoggingConfig(level="DEBUG", console=True))

    root = logging.getLogger()
    ours = _our_handlers(root)
    assert len(ours) == 1 and isinstance(ours[0], QueueHandler)
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not None
    assert root.level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.INFO


def test_dated_log_paths(tmp_path: Path) -> None:
    crawl_log, error_log = get_dated_log_paths(str(tmp_path), DAY)

    assert crawl_log == str(tmp_path / "crawler-2024-03-07.log")
    assert error_log == str(tmp_path / "crawler-errors-2024-03-07.log")


def test_for_run_modes(tmp_path: Path) -> None:
    """TC-02: Only debug runs with a log directory get log files."""
    plain = LoggingConfig.for_run(verbose=True)
    assert plain.level == "DEBUG"
    assert plain.log_file is None and plain.error_log_file is None

    assert LoggingConfig.for_run(debug=True).log_file is None

    debug = LoggingConfig.for_run(debug=True, log_dir=str(tmp_path), day=DAY)
    assert debug.level == "INFO"
    assert (debug.log_file, debug.error_log_file) == get_dated_log_paths(str(tmp_path), DAY)


def test_error_log_receives_errors_only(tmp_path: Path) -> None:
    """TC-03: The error log only ever holds ERROR and above."""
    cfg = LoggingConfig.for_run(debug=True, log_dir=str(tmp_path / "logs"), day=DAY)
    configure_logging(cfg, force=True)

    log = logging.getLogger("pyqcrawler.test")
    log.info("listing fetched")
    log.error("listing failed")

    # Shutdown drains the queue into the files
    shutdown_logging()

    full = Path(cfg.log_file).read_text(encoding="utf-8")
    errors = Path(cfg.error_log_file).read_text(encoding="utf-8")
    assert "listing fetched" in full and "listing failed" in full
    assert "listing failed" in errors
    assert "listing fetched" not in errors


def test_force_reconfigures() -> None:
    configure_logging(LoggingConfig(level="INFO", console=True))
    first = getattr(logging.getLogger(), _QUEUE_LISTENER_ATTR)

    configure_logging(LoggingConfig(level="WARNING", console=True), force=True)

    root = logging.getLogger()
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not first
    assert root.level == logging.WARNING
    assert len(_our_handlers(root)) == 1


def test_shutdown_is_repeatable() -> None:
    configure_logging(LoggingConfig(level="INFO", console=True))

    shutdown_logging()
    shutdown_logging()

    root = logging.getLogger()
    assert _our_handlers(root) == []
    assert not hasattr(root, _CONFIGURED_FLAG_ATTR)
