"""
Bridge from the standard library ``logging`` module into a logforge logger.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .enums import Severity
from .pipeline import Logger


class RedirectStdLibHandler(logging.Handler):
    """
    Redirect standard library logging events to a logforge logger.
    Third-party libraries that log through ``logging`` end up in the same
    sink, with the stdlib logger name kept in the ``logger`` field.
    """

    def __init__(self, target: Logger, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.target = target

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # Records produced by our own machinery would loop back in.
            if record.name == "logforge" or record.name.startswith("logforge."):
                return

            fields = {"logger": record.name or "root"}
            if record.exc_info and record.exc_info[0] is not None:
                fields["exc_info"] = record.exc_info
            self.target.log(
                Severity.from_stdlib_level(record.levelno),
                record.getMessage(),
                **fields,
            )
        except Exception:
            self.handleError(record)


_lock = threading.Lock()
_installed: Optional[RedirectStdLibHandler] = None
_previous_level: Optional[int] = None


def set_stdlib_logger(logger: Logger, level: int = logging.NOTSET) -> RedirectStdLibHandler:
    """Forward records of the stdlib root logger into ``logger``.

    A handler installed by an earlier call is replaced; the last call wins.
    The root logger's level is lowered to ``level`` so that filtering is left
    to ``logger``'s own filter, and restored by :func:`unset_stdlib_logger`.
    """
    global _installed, _previous_level
    handler = RedirectStdLibHandler(logger)
    root = logging.getLogger()
    with _lock:
        if _installed is None:
            _previous_level = root.level
        else:
            root.removeHandler(_installed)
        root.addHandler(handler)
        root.setLevel(level)
        _installed = handler
    return handler


def unset_stdlib_logger() -> None:
    """Remove the handler installed by :func:`set_stdlib_logger`, if any."""
    global _installed, _previous_level
    with _lock:
        if _installed is not None:
            root = logging.getLogger()
            root.removeHandler(_installed)
            if _previous_level is not None:
                root.setLevel(_previous_level)
            _installed = None
            _previous_level = None
