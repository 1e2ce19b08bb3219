from __future__ import annotations

"""
Logging Lifecycle.

Configures the root logger once per process. Records are pushed onto a
queue by a single `QueueHandler` and written to the real sinks by a
`QueueListener` thread, so file I/O never runs on the caller's thread.
Only handlers tagged by this package are ever removed on reconfiguration.
"""

import atexit
import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from taxabars.infra.fs import get_user_data_dir
from taxabars.infra.logging.config import _LEVEL_MAP, LoggingConfig
from taxabars.infra.logging.handlers import (
    _create_console_handler,
    _create_rotating_file_handler,
    _is_our_handler,
    _tag_handler,
)

_CONFIGURED_FLAG_ATTR: str = "_taxabars_configured"
_QUEUE_LISTENER_ATTR: str = "_taxabars_queue_listener"

DEFAULT_LOG_FILE_NAME = "taxabars.log"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_default_log_path(file_name: str = DEFAULT_LOG_FILE_NAME) -> str:
    """Path of the persistent log file inside the user data directory."""
    return os.path.join(get_user_data_dir(), "logs", file_name)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Attach the taxabars sinks to the root logger.

    Repeated calls are no-ops unless `force` is set, in which case the
    previous sinks and listener are torn down first. If setup itself fails
    the root logger falls back to a plain stderr handler.

    Args:
        cfg: Sink and format settings.
        force: Re-initialize even if already configured.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()

    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    try:
        level_int = _parse_level(cfg.level)
        root.setLevel(level_int)
        _reset(root)

        sinks: List[logging.Handler] = []
        if cfg.console:
            sinks.append(_create_console_handler(level_int, logging.Formatter(cfg.console_fmt)))
        if cfg.log_file:
            fh = _create_rotating_file_handler(
                cfg.log_file,
                level_int,
                logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
                cfg.max_bytes,
                cfg.backup_count,
            )
            if fh is not None:
                sinks.append(fh)

        if not sinks:
            return root

        log_queue: queue.Queue = queue.Queue(-1)
        queue_handler = QueueHandler(log_queue)
        _tag_handler(queue_handler)

        listener = QueueListener(log_queue, *sinks, respect_handler_level=True)
        listener.start()
        atexit.register(_stop_listener, listener)

        root.addHandler(queue_handler)
        setattr(root, _QUEUE_LISTENER_ATTR, listener)
        setattr(root, _CONFIGURED_FLAG_ATTR, True)
        return root

    except Exception as e:
        _reset(root)
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter("FALLBACK | %(levelname)s | %(message)s"))
        _tag_handler(sh)
        root.addHandler(sh)
        root.warning(f"Logging setup failed ({e}); using plain console output.")
        return root


def shutdown_logging() -> None:
    """Flush pending records and detach every taxabars handler."""
    root = logging.getLogger()
    _reset(root)
    setattr(root, _CONFIGURED_FLAG_ATTR, False)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_recent_logs(n_lines: int = 100, log_path: Optional[str] = None) -> str:
    """
    Return the last `n_lines` of the log file.

    Args:
        n_lines: Number of trailing lines.
        log_path: Log file to read; defaults to `get_default_log_path()`.

    Returns:
        str: The tail, or a short notice if the file is missing or unreadable.
    """
    path = log_path or get_default_log_path()
    if not os.path.exists(path):
        return "Log file not found."

    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return "".join(f.readlines()[-n_lines:])
    except OSError as e:
        return f"Error retrieving logs: {e}"


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def _reset(root: logging.Logger) -> None:
    """Stop the current listener and close every tagged handler on `root`."""
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener is not None:
        _stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)

    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()


def _stop_listener(listener: QueueListener) -> None:
    # stop() on an already stopped listener fails on older interpreters
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
    for h in listener.handlers:
        h.close()
