"""
Drain composition: turn a raw sink into a ready-to-use structured logger.

Layering, from the sink outwards::

    sink  <-  async buffer (or locked sync drain)  <-  kv filter  <-  source location

IO and rendering stay inside, next to the sink, where a worker thread can
absorb their cost. Filtering and call-site capture run outside, on the
calling thread, so rejected records are never queued and the captured
location is the caller's own frame.
"""

from __future__ import annotations

import sys
from typing import Any, NamedTuple, Optional, Union

import structlog
from structlog import BoundLoggerBase
from structlog.typing import EventDict, Processor, WrappedLogger

from .drains import AsyncDrain, Discard, Drain, LockedDrain, Record, WorkerGuard
from .enums import EvaluationOrder, OverflowStrategy, Severity, SourceLocation
from .errors import InvalidConfigError
from .filters import KVFilter, Reject
from .types import FilterConfig

_SEVERITY_BY_METHOD = {severity.value: severity for severity in Severity}

# Frames from these packages are never reported as a call site.
_INTERNAL_PACKAGES = ("logforge", "structlog", "logging")


def find_call_site() -> str:
    """``"<module>:<line>"`` of the nearest frame outside the logging machinery."""
    frame = sys._getframe(1)
    while frame is not None:
        module = frame.f_globals.get("__name__", "")
        if not any(module == pkg or module.startswith(pkg + ".") for pkg in _INTERNAL_PACKAGES):
            return f"{module}:{frame.f_lineno}"
        frame = frame.f_back
    return "<unknown>:0"


# =============================================================================
# Structlog Processors
# =============================================================================


def to_record(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> Any:
    """Final processor: hand the event to the pipeline as a :class:`Record`."""
    return (Record(severity=_SEVERITY_BY_METHOD[method_name], fields=event_dict),), {}


def default_processors() -> list[Processor]:
    # Capture-time facts (clock, level, exception) are taken on the calling thread.
    return [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt=None, key="timestamp"),
        structlog.processors.StackInfoRenderer(additional_ignores=["logforge"]),
        structlog.processors.format_exc_info,
        to_record,
    ]


# =============================================================================
# Pipeline & Logger
# =============================================================================


class Pipeline:
    """The object structlog wraps: filter policy plus the drain chain behind it."""

    def __init__(self, drain: Drain, kv_filter: KVFilter, source_location: SourceLocation) -> None:
        self.drain = drain
        self.kv_filter = kv_filter
        self.source_location = source_location

    def _deliver(self, record: Record) -> None:
        self.drain.log(record)

    trace = debug = info = warning = error = critical = _deliver

    def __repr__(self) -> str:
        return (
            f"Pipeline(drain={type(self.drain).__name__}, filter={self.kv_filter!r}, "
            f"source_location={self.source_location.value})"
        )


def _coerce_severity(level: Union[Severity, str, int]) -> Severity:
    if isinstance(level, Severity):
        return level
    if isinstance(level, int):
        return Severity.from_stdlib_level(level)
    return Severity.parse(level)


class Logger(BoundLoggerBase):
    """A structured logger whose records flow through a composed pipeline.

    Fields given to :meth:`bind` are *bound* and appear on every record;
    keyword arguments of a single call are *ad-hoc*. Safe to share between
    threads.
    """

    _logger: Pipeline

    @property
    def pipeline(self) -> Pipeline:
        return self._logger

    def _proxy_to_logger(self, method_name: str, event: Optional[str] = None, **event_kw: Any) -> Any:
        pipeline = self._logger
        kv_filter = pipeline.kv_filter
        capture = pipeline.source_location is SourceLocation.MODULE_AND_LINE
        target = self
        # The call site is only resolved up front when the filter reads it.
        if capture and "module" in kv_filter.referenced_keys:
            target = self.bind(module=find_call_site())
            capture = False
        if not kv_filter.accepts(_SEVERITY_BY_METHOD[method_name], target._context, event_kw):
            return None
        if capture:
            target = self.bind(module=find_call_site())
        return BoundLoggerBase._proxy_to_logger(target, method_name, event, **event_kw)

    def trace(self, event: Optional[str] = None, **kw: Any) -> Any:
        return self._proxy_to_logger("trace", event, **kw)

    def debug(self, event: Optional[str] = None, **kw: Any) -> Any:
        return self._proxy_to_logger("debug", event, **kw)

    def info(self, event: Optional[str] = None, **kw: Any) -> Any:
        return self._proxy_to_logger("info", event, **kw)

    def warning(self, event: Optional[str] = None, **kw: Any) -> Any:
        return self._proxy_to_logger("warning", event, **kw)

    warn = warning

    def error(self, event: Optional[str] = None, **kw: Any) -> Any:
        return self._proxy_to_logger("error", event, **kw)

    def critical(self, event: Optional[str] = None, **kw: Any) -> Any:
        return self._proxy_to_logger("critical", event, **kw)

    def exception(self, event: Optional[str] = None, **kw: Any) -> Any:
        kw.setdefault("exc_info", True)
        return self._proxy_to_logger("error", event, **kw)

    def log(self, level: Union[Severity, str, int], event: Optional[str] = None, **kw: Any) -> Any:
        return self._proxy_to_logger(_coerce_severity(level).value, event, **kw)


class BuildResult(NamedTuple):
    """A built logger and, for asynchronous loggers, its worker guard."""

    logger: Logger
    guard: Optional[WorkerGuard]


def compose(
    sink: Drain,
    channel_size: int,
    filter_config: FilterConfig,
    evaluation_order: EvaluationOrder = EvaluationOrder.LOGGER_AND_MESSAGE,
    source_location: SourceLocation = SourceLocation.MODULE_AND_LINE,
    overflow_strategy: OverflowStrategy = OverflowStrategy.BLOCK,
) -> BuildResult:
    """Wrap ``sink`` into a logger.

    With ``channel_size > 0`` records are written by a background worker and
    a :class:`WorkerGuard` is returned; with ``channel_size == 0`` the caller
    writes synchronously and no guard exists.
    """
    if channel_size < 0:
        raise InvalidConfigError(f"Invalid channel size: {channel_size!r}", literal=channel_size)

    guard: Optional[WorkerGuard] = None
    drain: Drain
    if channel_size > 0:
        async_drain = AsyncDrain(sink, channel_size, overflow_strategy)
        guard = WorkerGuard(async_drain)
        drain = async_drain
    else:
        drain = LockedDrain(sink)

    kv_filter = KVFilter(filter_config.to_filter_spec(), evaluation_order)
    pipeline = Pipeline(drain, kv_filter, source_location)
    return BuildResult(Logger(pipeline, default_processors(), {}), guard)


def discard_logger() -> Logger:
    """A logger that rejects every record before any processing."""
    pipeline = Pipeline(Discard(), KVFilter(Reject()), SourceLocation.NONE)
    return Logger(pipeline, default_processors(), {})
