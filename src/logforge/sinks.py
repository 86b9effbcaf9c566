"""
Raw sinks: the innermost drains, where records are rendered and written.
"""

from __future__ import annotations

from .decorators import Decorator, RecordDecorator
from .drains import Drain, Record
from .formatters import RecordFormatter
from .rotation import RotatingFileWriter


class TerminalSink(Drain):
    """Renders records through a decorator onto stdout or stderr."""

    def __init__(self, decorator: Decorator, formatter: RecordFormatter) -> None:
        self.decorator = decorator
        self.formatter = formatter

    def log(self, record: Record) -> None:
        self.decorator.with_record(record, lambda out: self.formatter.render(record, out))

    def flush(self) -> None:
        self.decorator.stream.flush()


class FileSink(Drain):
    """Renders records as plain lines into a rotating file."""

    def __init__(self, writer: RotatingFileWriter, formatter: RecordFormatter) -> None:
        self.writer = writer
        self.formatter = formatter

    def log(self, record: Record) -> None:
        out = RecordDecorator()
        try:
            self.formatter.render(record, out)
            line = out.getvalue() + "\n"
        finally:
            out.release()
        self.writer.write(line.encode("utf-8"))
        self.writer.flush()

    def flush(self) -> None:
        self.writer.flush()

    def close(self) -> None:
        self.writer.close()
