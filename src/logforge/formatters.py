"""
Record formatters: aligned console lines and JSON lines.
"""

from __future__ import annotations

import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, Union

import orjson

from .decorators import RecordDecorator
from .drains import Record
from .enums import Format, TimeZone

EXCLUDED_KEYS = {"event", "level", "timestamp", "module", "exception", "stack"}


def record_time(record: Record, tz: TimeZone) -> datetime:
    """The record's capture time, expressed in ``tz``."""
    raw = record.fields.get("timestamp")
    epoch = raw if isinstance(raw, (int, float)) else time.time()
    if tz is TimeZone.UTC:
        return datetime.fromtimestamp(epoch, tz=timezone.utc)
    return datetime.fromtimestamp(epoch).astimezone()


def orjson_dumps(v: Any, *, default: Any = str) -> bytes:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default, option=orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC)


_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})|\\U([0-9a-fA-F]{8})")


def _replace_escape(match: "re.Match[str]") -> str:
    code_point = int(match.group(1) or match.group(2), 16)
    # Lone surrogates and out-of-range values are not printable; keep them escaped.
    if 0xD800 <= code_point <= 0xDFFF or code_point > 0x10FFFF:
        return match.group(0)
    return chr(code_point)


def _decode_unicode_escapes(text: str) -> str:
    """Turn literal ``\\uXXXX`` / ``\\UXXXXXXXX`` escapes into characters; nothing else changes."""
    if "\\u" not in text and "\\U" not in text:
        return text
    return _UNICODE_ESCAPE.sub(_replace_escape, text)


# =============================================================================
# Console Formatter (Aligned Columns)
# =============================================================================


class ConsoleFormatter:
    """Human-readable record rendering.

    The full layout is fixed-width and right-aligned::

        2026-10-18 13:09:00.123 |     INFO |           app.jobs:42 | started job=7

    The compact layout drops the date and the column padding::

        13:09:00.123 INFO started job=7 @ app.jobs:42
    """

    TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
    COMPACT_TIMESTAMP_FORMAT = "%H:%M:%S"
    LEVEL_WIDTH = 8
    MODULE_WIDTH = 32
    SEPARATOR = " | "

    def __init__(self, tz: TimeZone = TimeZone.LOCAL, *, compact: bool = False) -> None:
        self.tz = tz
        self.compact = compact

    @staticmethod
    def _fit_right(text: str, width: int) -> str:
        if width <= 0:
            return text
        if len(text) > width:
            if width <= 3:
                text = text[-width:]
            else:
                text = "..." + text[-(width - 3) :]
        return f"{text:>{width}}"

    def _timestamp(self, record: Record) -> str:
        moment = record_time(record, self.tz)
        pattern = self.COMPACT_TIMESTAMP_FORMAT if self.compact else self.TIMESTAMP_FORMAT
        return f"{moment.strftime(pattern)}.{moment.microsecond // 1000:03d}"

    @staticmethod
    def _write_extras(record: Record, out: RecordDecorator) -> None:
        for key, value in record.fields.items():
            if key in EXCLUDED_KEYS:
                continue
            out.write(" ")
            out.write(key, "key")
            out.write("=")
            out.write(_decode_unicode_escapes(str(value)), "value")

    def render(self, record: Record, out: RecordDecorator) -> None:
        level_style = record.severity.value
        module = record.fields.get("module")
        message = _decode_unicode_escapes(record.message)

        if self.compact:
            out.write(self._timestamp(record), "timestamp")
            out.write(" ")
            out.write(record.severity.abbreviation, level_style)
            out.write(" ")
            out.write(message, "message")
            self._write_extras(record, out)
            if module is not None:
                out.write(" @ ")
                out.write(str(module), "module")
        else:
            out.write(self._timestamp(record), "timestamp")
            out.write(self.SEPARATOR)
            out.write(self._fit_right(record.severity.name, self.LEVEL_WIDTH), level_style)
            out.write(self.SEPARATOR)
            if module is not None:
                out.write(self._fit_right(str(module), self.MODULE_WIDTH), "module")
                out.write(self.SEPARATOR)
            out.write(message, "message")
            self._write_extras(record, out)

        for key in ("stack", "exception"):
            if record.fields.get(key):
                out.write("\n")
                out.write(str(record.fields[key]).rstrip("\n"), record.severity.value)


# =============================================================================
# JSON Formatter
# =============================================================================


class JsonFormatter:
    """One JSON object per record; the timestamp is ISO 8601 in ``tz``."""

    def __init__(self, tz: TimeZone = TimeZone.UTC) -> None:
        self.tz = tz

    def payload(self, record: Record) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "timestamp": record_time(record, self.tz),
            "level": record.severity.value,
            "message": record.message,
        }
        for key, value in record.fields.items():
            if key not in ("event", "level", "timestamp"):
                payload[key] = value
        return payload

    def dumps(self, record: Record) -> bytes:
        return orjson_dumps(self.payload(record))

    def render(self, record: Record, out: RecordDecorator) -> None:
        out.write(self.dumps(record).decode())


RecordFormatter = Union[ConsoleFormatter, JsonFormatter]


def make_formatter(fmt: Format, tz: TimeZone) -> RecordFormatter:
    if fmt is Format.JSON:
        return JsonFormatter(tz)
    return ConsoleFormatter(tz, compact=fmt is Format.COMPACT)
