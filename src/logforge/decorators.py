"""
Terminal decorators: where a rendered record goes and how it is styled.

A decorator is resolved from a :class:`~logforge.enums.Destination` by
running an ordered chain of probes; the first probe that returns a
decorator wins. The default chain tries an ANSI-colored terminal decorator
first and falls back to a plain one bound to the same stream.
"""

from __future__ import annotations

import os
import sys
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Sequence, TextIO

from .drains import Record
from .enums import Destination

_RESET = "\x1b[0m"

STYLES: Dict[str, str] = {
    "timestamp": "\x1b[90m",
    "module": "\x1b[35m",
    "key": "\x1b[34m",
    "value": "\x1b[2m",
    "message": "\x1b[1m",
    "trace": "\x1b[2;36m",
    "debug": "\x1b[36m",
    "info": "\x1b[32m",
    "warning": "\x1b[33m",
    "error": "\x1b[31m",
    "critical": "\x1b[1;31m",
}


class DecoratorUnavailable(Exception):
    """Raised by a probe that cannot provide a decorator for a stream."""


class RecordDecorator:
    """Per-record rendering buffer handed to formatters.

    Each styled span is closed as soon as it is written, so the buffer never
    holds an unterminated color sequence.
    """

    def __init__(self, styles: Optional[Dict[str, str]] = None) -> None:
        self._styles = styles or {}
        self._parts: List[str] = []

    def write(self, text: str, style: Optional[str] = None) -> None:
        if not text:
            return
        color = self._styles.get(style) if style else None
        if color:
            self._parts.append(f"{color}{text}{_RESET}")
        else:
            self._parts.append(text)

    def getvalue(self) -> str:
        return "".join(self._parts)

    def release(self) -> None:
        self._parts.clear()


class Decorator(ABC):
    """A stream plus the styling applied to records written to it."""

    def __init__(self, destination: Destination, stream: TextIO) -> None:
        self.destination = destination
        self.stream = stream
        self._lock = threading.Lock()

    @property
    @abstractmethod
    def colored(self) -> bool:
        ...

    @abstractmethod
    def _new_record_decorator(self) -> RecordDecorator:
        ...

    def with_record(self, record: Record, callback: Callable[[RecordDecorator], None]) -> None:
        """Render ``record`` through ``callback`` and write it as one line.

        Nothing reaches the stream unless the callback completes; the record
        buffer is released either way.
        """
        decorator = self._new_record_decorator()
        try:
            callback(decorator)
            line = decorator.getvalue()
            with self._lock:
                self.stream.write(line + "\n")
                self.stream.flush()
        finally:
            decorator.release()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(destination={self.destination.value})"


class TermDecorator(Decorator):
    """Colors records with ANSI escape sequences."""

    @property
    def colored(self) -> bool:
        return True

    def _new_record_decorator(self) -> RecordDecorator:
        return RecordDecorator(STYLES)


class PlainDecorator(Decorator):
    """Writes records without any styling."""

    @property
    def colored(self) -> bool:
        return False

    def _new_record_decorator(self) -> RecordDecorator:
        return RecordDecorator()


# =============================================================================
# Resolution
# =============================================================================

Probe = Callable[[Destination, TextIO], Decorator]


def stream_for(destination: Destination) -> TextIO:
    if destination is Destination.STDERR:
        return sys.stderr
    return sys.stdout


def terminal_probe(destination: Destination, stream: TextIO) -> Decorator:
    if os.environ.get("NO_COLOR"):
        raise DecoratorUnavailable("NO_COLOR is set")
    if os.environ.get("TERM") == "dumb":
        raise DecoratorUnavailable("TERM is dumb")
    if not bool(getattr(stream, "isatty", lambda: False)()):
        raise DecoratorUnavailable(f"{destination.value} is not a terminal")
    return TermDecorator(destination, stream)


def plain_probe(destination: Destination, stream: TextIO) -> Decorator:
    return PlainDecorator(destination, stream)


DEFAULT_PROBES: Sequence[Probe] = (terminal_probe, plain_probe)


def resolve_decorator(
    destination: Destination,
    probes: Optional[Sequence[Probe]] = None,
    stream: Optional[TextIO] = None,
) -> Decorator:
    """Return the first decorator the probe chain can provide for ``destination``.

    Every probe is offered the same stream; if none succeeds, a plain
    decorator on that stream is returned.
    """
    target = stream if stream is not None else stream_for(destination)
    for probe in DEFAULT_PROBES if probes is None else probes:
        try:
            return probe(destination, target)
        except DecoratorUnavailable:
            continue
    return PlainDecorator(destination, target)
