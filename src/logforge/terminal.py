"""
Terminal logger.

Example::

    from logforge.terminal import TerminalLoggerBuilder
    from logforge.types import Destination, Severity, always_pass_on_severity_at_least

    logger, guard = (
        TerminalLoggerBuilder()
        .filter_config(always_pass_on_severity_at_least(Severity.DEBUG))
        .destination(Destination.STDERR)
        .build()
    )
    with guard:
        logger.info("Hello World!")
"""

from __future__ import annotations

from typing import Literal, Optional, Sequence

from pydantic import Field

from .build import DEFAULT_CHANNEL_SIZE, Build, Config, checked_channel_size
from .decorators import Probe, resolve_decorator
from .enums import Destination, EvaluationOrder, Format, OverflowStrategy, SourceLocation, TimeZone
from .formatters import make_formatter
from .pipeline import BuildResult, compose
from .sinks import TerminalSink
from .types import FilterConfig, default_filter_config


class TerminalLoggerBuilder(Build):
    """Builds loggers writing to stdout or stderr.

    The resulting logger is asynchronous unless ``channel_size(0)`` is set.
    """

    def __init__(self) -> None:
        self._format = Format.default()
        self._source_location = SourceLocation.default()
        self._timezone = TimeZone.default()
        self._destination = Destination.default()
        self._channel_size = DEFAULT_CHANNEL_SIZE
        self._evaluation_order = EvaluationOrder.default()
        self._overflow_strategy = OverflowStrategy.default()
        self._filter_config: FilterConfig = default_filter_config()
        self._probes: Optional[Sequence[Probe]] = None

    def format(self, format: Format) -> "TerminalLoggerBuilder":
        self._format = Format.parse(format)
        return self

    def source_location(self, source_location: SourceLocation) -> "TerminalLoggerBuilder":
        self._source_location = SourceLocation.parse(source_location)
        return self

    def timezone(self, timezone: TimeZone) -> "TerminalLoggerBuilder":
        self._timezone = TimeZone.parse(timezone)
        return self

    def destination(self, destination: Destination) -> "TerminalLoggerBuilder":
        self._destination = Destination.parse(destination)
        return self

    def channel_size(self, channel_size: int) -> "TerminalLoggerBuilder":
        self._channel_size = checked_channel_size(channel_size)
        return self

    def evaluation_order(self, evaluation_order: EvaluationOrder) -> "TerminalLoggerBuilder":
        self._evaluation_order = EvaluationOrder.parse(evaluation_order)
        return self

    def overflow_strategy(self, overflow_strategy: OverflowStrategy) -> "TerminalLoggerBuilder":
        self._overflow_strategy = OverflowStrategy.parse(overflow_strategy)
        return self

    def filter_config(self, config: FilterConfig) -> "TerminalLoggerBuilder":
        self._filter_config = config
        return self

    def decorator_probes(self, probes: Sequence[Probe]) -> "TerminalLoggerBuilder":
        """Replace the terminal capability probe chain (see ``resolve_decorator``)."""
        self._probes = tuple(probes)
        return self

    def build(self) -> BuildResult:
        decorator = resolve_decorator(self._destination, self._probes)
        sink = TerminalSink(decorator, make_formatter(self._format, self._timezone))
        return compose(
            sink,
            self._channel_size,
            self._filter_config,
            self._evaluation_order,
            self._source_location,
            self._overflow_strategy,
        )

    def __repr__(self) -> str:
        return (
            f"TerminalLoggerBuilder(format={self._format.value}, destination={self._destination.value}, "
            f"channel_size={self._channel_size})"
        )


class TerminalLoggerConfig(Config):
    """The configuration of :class:`TerminalLoggerBuilder`."""

    type: Literal["terminal"] = "terminal"
    format: Format = Field(default_factory=Format.default)
    source_location: SourceLocation = Field(default_factory=SourceLocation.default)
    timezone: TimeZone = Field(default_factory=TimeZone.default)
    destination: Destination = Field(default_factory=Destination.default)
    channel_size: int = Field(default=DEFAULT_CHANNEL_SIZE, ge=0)
    evaluation_order: EvaluationOrder = Field(default_factory=EvaluationOrder.default)
    overflow_strategy: OverflowStrategy = Field(default_factory=OverflowStrategy.default)
    filter_config: FilterConfig = Field(default_factory=default_filter_config)

    def try_to_builder(self) -> TerminalLoggerBuilder:
        return (
            TerminalLoggerBuilder()
            .format(self.format)
            .source_location(self.source_location)
            .timezone(self.timezone)
            .destination(self.destination)
            .channel_size(self.channel_size)
            .evaluation_order(self.evaluation_order)
            .overflow_strategy(self.overflow_strategy)
            .filter_config(self.filter_config)
        )
