from __future__ import annotations

from .config import LoggingConfig, get_dated_log_paths
from .core import (
    configure_logging,
    get_logger,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "configure_logging",
    "shutdown_logging",
    "get_logger",
    "get_dated_log_paths",
]
