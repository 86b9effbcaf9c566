"""
Drains: the stages a record passes through on its way to a sink.

``AsyncDrain`` moves the sink onto a single worker thread fed by a bounded
queue; ``LockedDrain`` keeps IO on the calling thread and serializes it.
Both own the drain they wrap and are the only writers to it.
"""

from __future__ import annotations

import atexit
import queue
import sys
import threading
import traceback
import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .enums import OverflowStrategy, Severity


@dataclass(frozen=True)
class Record:
    """A processed log event: its severity and its merged fields."""

    severity: Severity
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        event = self.fields.get("event")
        return "" if event is None else str(event)


def report_internal_error(message: str, *, with_traceback: bool = False) -> None:
    """Write a failure of the logging machinery itself to ``sys.stderr``."""
    stream = sys.stderr
    if stream is None:
        return
    try:
        stream.write(f"--- logforge: {message} ---\n")
        if with_traceback:
            traceback.print_exc(file=stream)
        stream.flush()
    except (OSError, ValueError):
        pass


# =============================================================================
# Drain Abstraction
# =============================================================================


class Drain(ABC):
    """Consumes records and forwards them towards a sink."""

    @abstractmethod
    def log(self, record: Record) -> None:
        """Consume one record."""
        ...

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


class Discard(Drain):
    """Drops every record."""

    def log(self, record: Record) -> None:
        pass


class LockedDrain(Drain):
    """Synchronous delivery: the calling thread writes, one caller at a time."""

    def __init__(self, inner: Drain) -> None:
        self._inner = inner
        self._lock = threading.RLock()

    def log(self, record: Record) -> None:
        with self._lock:
            self._inner.log(record)

    def flush(self) -> None:
        with self._lock:
            self._inner.flush()

    def close(self) -> None:
        with self._lock:
            self._inner.close()


# =============================================================================
# Asynchronous Delivery
# =============================================================================

_STOP = object()

# Drains whose worker may still hold queued records; closed at interpreter exit.
_live_drains: "weakref.WeakSet[AsyncDrain]" = weakref.WeakSet()


def _close_live_drains() -> None:
    for drain in list(_live_drains):
        drain.close()


atexit.register(_close_live_drains)


class AsyncDrain(Drain):
    """Queues records onto a bounded channel served by one worker thread.

    When the channel is full, ``OverflowStrategy.BLOCK`` makes the caller wait
    for room, ``DROP_NEWEST`` discards the incoming record and ``DROP_OLDEST``
    evicts the longest-queued one. Dropped records are counted in
    :attr:`dropped`. A record that fails to reach the sink is counted in
    :attr:`failures` and reported on ``sys.stderr``; later records are
    unaffected.

    The worker is a daemon thread; drains still open when the interpreter
    exits are closed by an ``atexit`` hook so that queued records are written.
    """

    def __init__(
        self,
        inner: Drain,
        channel_size: int,
        overflow_strategy: OverflowStrategy = OverflowStrategy.BLOCK,
        *,
        thread_name: str = "logforge-worker",
    ) -> None:
        if channel_size <= 0:
            raise ValueError(f"channel_size must be positive, got {channel_size}")
        self._inner = inner
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=channel_size)
        self._overflow_strategy = overflow_strategy
        self._enqueue_lock = threading.Lock()
        self._closed = False
        self._stop_pending = False
        self.dropped = 0
        self.failures = 0
        self._worker = threading.Thread(target=self._run, name=thread_name, daemon=True)
        self._worker.start()
        _live_drains.add(self)

    @property
    def channel_size(self) -> int:
        return self._queue.maxsize

    @property
    def closed(self) -> bool:
        return self._closed

    def log(self, record: Record) -> None:
        with self._enqueue_lock:
            if self._closed:
                self.dropped += 1
                report_internal_error("record logged after its worker guard was closed; dropped")
                return
            self._enqueue(record)

    def _enqueue(self, record: Record) -> None:
        strategy = self._overflow_strategy
        if strategy is OverflowStrategy.BLOCK:
            self._queue.put(record)
            return
        if strategy is OverflowStrategy.DROP_NEWEST:
            try:
                self._queue.put_nowait(record)
            except queue.Full:
                self.dropped += 1
            return
        while True:
            try:
                self._queue.put_nowait(record)
                return
            except queue.Full:
                pass
            try:
                self._queue.get_nowait()
            except queue.Empty:
                continue
            self._queue.task_done()
            self.dropped += 1

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    self._shutdown_sink()
                    return
                self._deliver(item)
            finally:
                self._queue.task_done()
            if self._stop_pending and self._queue.empty():
                self._shutdown_sink()
                return

    def _deliver(self, record: Record) -> None:
        try:
            self._inner.log(record)
        except Exception:
            self.failures += 1
            report_internal_error("failed to write a record to the sink", with_traceback=True)

    def _shutdown_sink(self) -> None:
        _live_drains.discard(self)
        try:
            self._inner.flush()
            self._inner.close()
        except Exception:
            self.failures += 1
            report_internal_error("failed to close the sink", with_traceback=True)

    def flush(self) -> None:
        """Block until every record queued so far has been written."""
        if threading.current_thread() is self._worker:
            return
        self._queue.join()

    def close(self) -> None:
        """Write out everything queued, then stop the worker. Idempotent."""
        with self._enqueue_lock:
            if self._closed:
                return
            self._closed = True
        if threading.current_thread() is self._worker:
            # Closed from the worker itself (e.g. a finalizer run by the GC
            # there): it cannot wait for itself, so it stops once drained.
            try:
                self._queue.put_nowait(_STOP)
            except queue.Full:
                self._stop_pending = True
            return
        self._queue.put(_STOP)
        self._worker.join()


class WorkerGuard:
    """Lifetime handle of an asynchronous logger's worker thread.

    Keep it alive for as long as the logger is used. Closing it (directly, by
    leaving a ``with`` block, or by letting it be garbage collected) blocks
    until all buffered records have reached the sink; records logged
    afterwards are dropped.
    """

    def __init__(self, drain: AsyncDrain) -> None:
        self._drain = drain
        self._finalizer = weakref.finalize(self, drain.close)

    @property
    def closed(self) -> bool:
        return self._drain.closed

    @property
    def dropped(self) -> int:
        return self._drain.dropped

    @property
    def failures(self) -> int:
        return self._drain.failures

    def flush(self) -> None:
        self._drain.flush()

    def close(self) -> None:
        self._finalizer()

    def __enter__(self) -> "WorkerGuard":
        return self

    def __exit__(self, exc_type, exc_value, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<WorkerGuard {state} channel_size={self._drain.channel_size}>"
