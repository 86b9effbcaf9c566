"""
File logger.

Records are rendered without colors and appended to ``path``, which is
rotated once it grows past ``rotate_size`` bytes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Union

from pydantic import Field

from .build import DEFAULT_CHANNEL_SIZE, Build, Config, checked_channel_size
from .enums import EvaluationOrder, Format, OverflowStrategy, SourceLocation, TimeZone
from .errors import InvalidConfigError
from .formatters import make_formatter
from .pipeline import BuildResult, compose
from .rotation import (
    DEFAULT_ROTATE_KEEP,
    DEFAULT_ROTATE_SIZE,
    DEFAULT_TIMESTAMP_TEMPLATE,
    RotatingFileWriter,
)
from .sinks import FileSink
from .types import FilterConfig, default_filter_config


def _checked_count(what: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidConfigError(f"Invalid {what}: {value!r}", literal=value)
    return value


class FileLoggerBuilder(Build):
    """Builds loggers writing to a rotating file."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path) if str(path) else None
        self._format = Format.default()
        self._source_location = SourceLocation.default()
        self._timezone = TimeZone.default()
        self._timestamp_template = DEFAULT_TIMESTAMP_TEMPLATE
        self._channel_size = DEFAULT_CHANNEL_SIZE
        self._truncate = False
        self._rotate_size = DEFAULT_ROTATE_SIZE
        self._rotate_keep = DEFAULT_ROTATE_KEEP
        self._rotate_compress = False
        self._evaluation_order = EvaluationOrder.default()
        self._overflow_strategy = OverflowStrategy.default()
        self._filter_config: FilterConfig = default_filter_config()

    def format(self, format: Format) -> "FileLoggerBuilder":
        self._format = Format.parse(format)
        return self

    def source_location(self, source_location: SourceLocation) -> "FileLoggerBuilder":
        self._source_location = SourceLocation.parse(source_location)
        return self

    def timezone(self, timezone: TimeZone) -> "FileLoggerBuilder":
        self._timezone = TimeZone.parse(timezone)
        return self

    def timestamp_template(self, template: str) -> "FileLoggerBuilder":
        """Sets the ``strftime`` template naming rotated files."""
        self._timestamp_template = template
        return self

    def channel_size(self, channel_size: int) -> "FileLoggerBuilder":
        self._channel_size = checked_channel_size(channel_size)
        return self

    def truncate(self) -> "FileLoggerBuilder":
        """Empty the file on open instead of appending to it."""
        self._truncate = True
        return self

    def rotate_size(self, size: int) -> "FileLoggerBuilder":
        self._rotate_size = _checked_count("rotate size", size)
        return self

    def rotate_keep(self, count: int) -> "FileLoggerBuilder":
        self._rotate_keep = _checked_count("rotate keep count", count)
        return self

    def rotate_compress(self, compress: bool) -> "FileLoggerBuilder":
        self._rotate_compress = compress
        return self

    def evaluation_order(self, evaluation_order: EvaluationOrder) -> "FileLoggerBuilder":
        self._evaluation_order = EvaluationOrder.parse(evaluation_order)
        return self

    def overflow_strategy(self, overflow_strategy: OverflowStrategy) -> "FileLoggerBuilder":
        self._overflow_strategy = OverflowStrategy.parse(overflow_strategy)
        return self

    def filter_config(self, config: FilterConfig) -> "FileLoggerBuilder":
        self._filter_config = config
        return self

    def build(self) -> BuildResult:
        if self._path is None:
            raise InvalidConfigError("File logger requires a non-empty path", literal="")
        writer = RotatingFileWriter(
            self._path,
            truncate=self._truncate,
            rotate_size=self._rotate_size,
            rotate_keep=self._rotate_keep,
            rotate_compress=self._rotate_compress,
            timestamp_template=self._timestamp_template,
        )
        sink = FileSink(writer, make_formatter(self._format, self._timezone))
        return compose(
            sink,
            self._channel_size,
            self._filter_config,
            self._evaluation_order,
            self._source_location,
            self._overflow_strategy,
        )

    def __repr__(self) -> str:
        return f"FileLoggerBuilder(path={self._path!s}, format={self._format.value})"


class FileLoggerConfig(Config):
    """The configuration of :class:`FileLoggerBuilder`."""

    type: Literal["file"] = "file"
    format: Format = Field(default_factory=Format.default)
    source_location: SourceLocation = Field(default_factory=SourceLocation.default)
    timezone: TimeZone = Field(default_factory=TimeZone.default)
    timestamp_template: str = DEFAULT_TIMESTAMP_TEMPLATE
    path: str = ""
    channel_size: int = Field(default=DEFAULT_CHANNEL_SIZE, ge=0)
    truncate: bool = False
    rotate_size: int = Field(default=DEFAULT_ROTATE_SIZE, ge=0)
    rotate_keep: int = Field(default=DEFAULT_ROTATE_KEEP, ge=0)
    rotate_compress: bool = False
    evaluation_order: EvaluationOrder = Field(default_factory=EvaluationOrder.default)
    overflow_strategy: OverflowStrategy = Field(default_factory=OverflowStrategy.default)
    filter_config: FilterConfig = Field(default_factory=default_filter_config)

    def try_to_builder(self) -> FileLoggerBuilder:
        builder = (
            FileLoggerBuilder(self.path)
            .format(self.format)
            .source_location(self.source_location)
            .timezone(self.timezone)
            .timestamp_template(self.timestamp_template)
            .channel_size(self.channel_size)
            .rotate_size(self.rotate_size)
            .rotate_keep(self.rotate_keep)
            .rotate_compress(self.rotate_compress)
            .evaluation_order(self.evaluation_order)
            .overflow_strategy(self.overflow_strategy)
            .filter_config(self.filter_config)
        )
        if self.truncate:
            builder.truncate()
        return builder
