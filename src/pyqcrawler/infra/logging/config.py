from __future__ import annotations

"""
Logging Configuration Models.

Defines the settings consumed by the logging subsystem and the naming
scheme of the daily crawl and error logs written in debug mode.
"""

import logging
import os
from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Tuple

# Mapping of string identifiers to native logging constants
_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

CRAWL_LOG_PREFIX = "crawler"
ERROR_LOG_PREFIX = "crawler-errors"


def parse_level(level: Optional[str]) -> int:
    """Convert a level name to its numeric constant, defaulting to INFO."""
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def get_dated_log_paths(log_dir: str, day: Optional[date] = None) -> Tuple[str, str]:
    """
    Resolve the daily crawl log and error log paths inside a log directory.

    Args:
        log_dir: Directory receiving the log files.
        day: Date stamp to use, defaults to today.

    Returns:
        Tuple[str, str]: (crawl log path, error log path).
    """
    stamp = (day or date.today()).isoformat()
    return (
        os.path.join(log_dir, f"{CRAWL_LOG_PREFIX}-{stamp}.log"),
        os.path.join(log_dir, f"{ERROR_LOG_PREFIX}-{stamp}.log"),
    )


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable settings for the logging subsystem initialization.

    Attributes:
        level: Minimum severity level to capture.
        console: Flag to enable stderr stream output.
        log_file: Optional path for the full crawl log.
        error_log_file: Optional path receiving ERROR records only.
        max_bytes: Maximum size per log segment before rotation.
        backup_count: Number of historical log segments to preserve.
        console_fmt: Structural format for terminal output.
        file_fmt: Structural format for file entries.
        datefmt: Chronological format for timestamp generation.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None
    error_log_file: Optional[str] = None

    max_bytes: int = 5 * 1024 * 1024  # Default: 5MB
    backup_count: int = 3

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def for_run(
            cls,
            *,
            verbose: bool = False,
            debug: bool = False,
            log_dir: Optional[str] = None,
            day: Optional[date] = None,
    ) -> "LoggingConfig":
        """
        Derive the logging setup of a tool run from its mode flags.

        Verbose runs log at DEBUG. Debug runs additionally write the dated
        crawl and error logs into log_dir.

        Args:
            verbose: Emit per-decision trace records.
            debug: Enable the dated log files.
            log_dir: Directory for the log files (required when debug is set).
            day: Date stamp for the file names, defaults to today.

        Returns:
            LoggingConfig: Console-only or console-plus-files settings.
        """
        level = "DEBUG" if verbose else "INFO"
        if not (debug and log_dir):
            return cls(level=level, console=True)

        log_file, error_log_file = get_dated_log_paths(log_dir, day)
        return cls(level=level, console=True, log_file=log_file, error_log_file=error_log_file)
