"""
Process-wide default logger.
"""

from __future__ import annotations

import threading
from typing import Optional

from .pipeline import Logger, discard_logger

_lock = threading.Lock()
_global_logger: Optional[Logger] = None


def set_global_logger(logger: Logger) -> Logger:
    """Install ``logger`` as the process default; the last call wins.

    Returns the previously installed logger (a discard logger if none was).
    """
    global _global_logger
    with _lock:
        previous = _global_logger
        _global_logger = logger
    return previous if previous is not None else discard_logger()


def get_global_logger() -> Logger:
    """The process default logger, or a logger that discards everything."""
    with _lock:
        logger = _global_logger
    return logger if logger is not None else discard_logger()


def reset_global_logger() -> None:
    global _global_logger
    with _lock:
        _global_logger = None
