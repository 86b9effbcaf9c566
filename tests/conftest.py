import threading
import typing as t

import pytest

from logforge.drains import Drain, Record
from logforge.interceptors import unset_stdlib_logger
from logforge.registry import reset_global_logger


class CollectingSink(Drain):
    """Keeps every record it receives, in arrival order."""

    def __init__(self) -> None:
        self.records: t.List[Record] = []
        self.flushed = 0
        self.closed = False

    def log(self, record: Record) -> None:
        self.records.append(record)

    def flush(self) -> None:
        self.flushed += 1

    def close(self) -> None:
        self.closed = True

    @property
    def messages(self) -> t.List[str]:
        return [record.message for record in self.records]


class GatedSink(CollectingSink):
    """Blocks the writing thread on every record until ``gate`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.gate = threading.Event()
        self.entered = threading.Event()

    def log(self, record: Record) -> None:
        self.entered.set()
        self.gate.wait(timeout=5)
        super().log(record)


@pytest.fixture
def sink() -> CollectingSink:
    return CollectingSink()


@pytest.fixture
def gated_sink() -> t.Iterator[GatedSink]:
    gated = GatedSink()
    yield gated
    gated.gate.set()


@pytest.fixture(autouse=True)
def reset_process_state():
    """
    Global logger and stdlib bridge are process-wide; every test starts clean.
    """
    yield
    reset_global_logger()
    unset_stdlib_logger()
