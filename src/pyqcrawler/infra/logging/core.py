from __future__ import annotations

"""
Logging Lifecycle.

The root logger only ever holds one QueueHandler; the actual sinks hang off
a QueueListener thread so that a slow disk never stalls the crawl thread
between listing requests. Configuration is idempotent unless forced, and
shutdown drains the queue before the process exits.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import Optional, Tuple

from pyqcrawler.infra.logging.config import LoggingConfig, parse_level
from pyqcrawler.infra.logging.handlers import _is_our_handler, _tag_handler, build_handlers

_CONFIGURED_FLAG_ATTR: str = "_pyqcrawler_configured"
_QUEUE_LISTENER_ATTR: str = "_pyqcrawler_queue_listener"

# Connection pool chatter from these drowns the per-listing DEBUG trace
_NOISY_LOGGERS: Tuple[str, ...] = ("urllib3", "requests")

_atexit_registered = False

# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Configure the root logger once per process.

    Args:
        cfg: Logging settings.
        force: Tear down the current handlers and rebuild them from cfg.

    Returns:
        logging.Logger: The root logger.
    """
    global _atexit_registered
    root = logging.getLogger()

    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    try:
        level_int = parse_level(cfg.level)
        root.setLevel(level_int)
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(level_int, logging.INFO))

        shutdown_logging()

        sinks = build_handlers(cfg, level_int)
        if not sinks:
            return root

        log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
        listener = QueueListener(log_queue, *sinks, respect_handler_level=True)
        listener.start()

        root.addHandler(_tag_handler(QueueHandler(log_queue)))
        setattr(root, _QUEUE_LISTENER_ATTR, listener)
        setattr(root, _CONFIGURED_FLAG_ATTR, True)

        if not _atexit_registered:
            atexit.register(shutdown_logging)
            _atexit_registered = True
        return root

    # Logging must never be the reason a crawl cannot start
    except Exception:
        shutdown_logging()
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter("CRITICAL FALLBACK | %(levelname)s | %(message)s"))
        root.addHandler(_tag_handler(sh))
        root.warning("Logging infrastructure failed. Switched to emergency console.")
        return root


def shutdown_logging() -> None:
    """
    Drain the queue, close the file sinks and detach the crawler's handlers.

    Safe to call repeatedly. Handlers not created by this package are left
    in place.
    """
    root = logging.getLogger()

    listener: Optional[QueueListener] = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener is not None:
        # A stopped listener has no thread; stopping it twice fails on some versions
        if getattr(listener, "_thread", None) is not None:
            listener.stop()
        for h in listener.handlers:
            h.close()
        setattr(root, _QUEUE_LISTENER_ATTR, None)

    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()

    if hasattr(root, _CONFIGURED_FLAG_ATTR):
        delattr(root, _CONFIGURED_FLAG_ATTR)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
