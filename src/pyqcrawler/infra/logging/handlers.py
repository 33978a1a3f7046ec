from __future__ import annotations

"""
Logging Handler Factories.

Builds the terminal and file sinks behind the logging queue and tags every
handler it creates, so reconfiguration only ever tears down the crawler's
own handlers and leaves those installed by libraries or test runners alone.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from pyqcrawler.infra.logging.config import LoggingConfig

_HANDLER_TAG_ATTR: str = "_pyqcrawler_handler"


def _tag_handler(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG_ATTR, True)
    return handler


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def build_handlers(cfg: LoggingConfig, level_int: int) -> List[logging.Handler]:
    """
    Create the sink handlers requested by a configuration.

    The console and crawl log honour the configured level. The error log is
    pinned to ERROR so it stays a short list of what needs attention after
    a long unattended crawl. A log file that cannot be opened is reported
    on stderr and left out.

    Args:
        cfg: Logging settings.
        level_int: Numeric level resolved from cfg.level.

    Returns:
        List[logging.Handler]: Tagged handlers, possibly empty.
    """
    handlers: List[logging.Handler] = []

    if cfg.console:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(level_int)
        console.setFormatter(logging.Formatter(cfg.console_fmt))
        handlers.append(_tag_handler(console))

    file_formatter = logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt)
    for path, level in ((cfg.log_file, level_int), (cfg.error_log_file, logging.ERROR)):
        if not path:
            continue
        fh = _open_rotating_file(path, cfg.max_bytes, cfg.backup_count)
        if fh is None:
            continue
        fh.setLevel(level)
        fh.setFormatter(file_formatter)
        handlers.append(_tag_handler(fh))

    return handlers


def _open_rotating_file(path: str, max_bytes: int, backup_count: int) -> Optional[RotatingFileHandler]:
    try:
        parent = os.path.dirname(os.path.abspath(path))
        os.makedirs(parent, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: Cannot open log file '{path}': {e}\n")
        return None
