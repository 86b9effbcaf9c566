"""
Closed vocabularies used by logger configuration documents.

Every enum is a ``str`` enum so that its canonical encoding is simply its
value, and every enum offers ``parse`` which fails with
:class:`~logforge.errors.InvalidConfigError` quoting the unknown literal.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Type, TypeVar

from .errors import undefined_literal

E = TypeVar("E", bound=Enum)


def _parse_literal(enum_cls: Type[E], what: str, literal: str) -> E:
    try:
        return enum_cls(literal)
    except ValueError:
        raise undefined_literal(what, literal) from None


class Severity(str, Enum):
    """The severity of a log record, totally ordered from TRACE to CRITICAL."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @classmethod
    def default(cls) -> "Severity":
        return cls.INFO

    @classmethod
    def parse(cls, literal: str) -> "Severity":
        return _parse_literal(cls, "severity", literal)

    @classmethod
    def from_stdlib_level(cls, level: int) -> "Severity":
        """Map a stdlib ``logging`` level number onto the closest severity at or below it."""
        for threshold, severity in _STDLIB_LEVELS:
            if level >= threshold:
                return severity
        return cls.TRACE

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @property
    def abbreviation(self) -> str:
        return _ABBREVIATIONS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank

    def __str__(self) -> str:
        return self.value


_RANKS = {severity: rank for rank, severity in enumerate(Severity)}

_ABBREVIATIONS = {
    Severity.TRACE: "TRCE",
    Severity.DEBUG: "DEBG",
    Severity.INFO: "INFO",
    Severity.WARNING: "WARN",
    Severity.ERROR: "ERRO",
    Severity.CRITICAL: "CRIT",
}

_STDLIB_LEVELS = (
    (logging.CRITICAL, Severity.CRITICAL),
    (logging.ERROR, Severity.ERROR),
    (logging.WARNING, Severity.WARNING),
    (logging.INFO, Severity.INFO),
    (logging.DEBUG, Severity.DEBUG),
)


class Format(str, Enum):
    """The layout of terminal and file records."""

    FULL = "full"
    COMPACT = "compact"
    JSON = "json"

    @classmethod
    def default(cls) -> "Format":
        return cls.FULL

    @classmethod
    def parse(cls, literal: str) -> "Format":
        return _parse_literal(cls, "log format", literal)


class TimeZone(str, Enum):
    UTC = "utc"
    LOCAL = "local"

    @classmethod
    def default(cls) -> "TimeZone":
        return cls.LOCAL

    @classmethod
    def parse(cls, literal: str) -> "TimeZone":
        return _parse_literal(cls, "time zone", literal)


class SourceLocation(str, Enum):
    """Whether records carry a ``module`` field naming their call site."""

    NONE = "none"
    MODULE_AND_LINE = "module_and_line"

    @classmethod
    def default(cls) -> "SourceLocation":
        return cls.MODULE_AND_LINE

    @classmethod
    def parse(cls, literal: str) -> "SourceLocation":
        return _parse_literal(cls, "source code location", literal)


class Destination(str, Enum):
    """The terminal stream records are written to."""

    STDOUT = "stdout"
    STDERR = "stderr"

    @classmethod
    def default(cls) -> "Destination":
        return cls.STDOUT

    @classmethod
    def parse(cls, literal: str) -> "Destination":
        return _parse_literal(cls, "destination", literal)


class EvaluationOrder(str, Enum):
    """Which key-value scopes a filter sees, and which one wins on conflict.

    - ``LoggerOnly``: only fields bound to the logger.
    - ``MessageOnly``: only fields passed with the individual call.
    - ``LoggerAndMessage``: both; the bound value wins when a key is in both.
    - ``MessageAndLogger``: both; the call's value wins when a key is in both.
    """

    LOGGER_ONLY = "LoggerOnly"
    MESSAGE_ONLY = "MessageOnly"
    LOGGER_AND_MESSAGE = "LoggerAndMessage"
    MESSAGE_AND_LOGGER = "MessageAndLogger"

    @classmethod
    def default(cls) -> "EvaluationOrder":
        return cls.LOGGER_AND_MESSAGE

    @classmethod
    def parse(cls, literal: str) -> "EvaluationOrder":
        return _parse_literal(cls, "evaluation order", literal)


class OverflowStrategy(str, Enum):
    """What enqueueing does when the asynchronous channel is full."""

    BLOCK = "block"
    DROP_NEWEST = "drop_newest"
    DROP_OLDEST = "drop_oldest"

    @classmethod
    def default(cls) -> "OverflowStrategy":
        return cls.BLOCK

    @classmethod
    def parse(cls, literal: str) -> "OverflowStrategy":
        return _parse_literal(cls, "overflow strategy", literal)
