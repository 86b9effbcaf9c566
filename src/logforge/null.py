"""
Null logger: discards every record.
"""

from __future__ import annotations

from typing import Literal

from .build import Build, Config
from .pipeline import BuildResult, discard_logger


class NullLoggerBuilder(Build):
    """Builds a logger which discards all log records. Never fails."""

    def build(self) -> BuildResult:
        return BuildResult(discard_logger(), None)

    def __repr__(self) -> str:
        return "NullLoggerBuilder()"


class NullLoggerConfig(Config):
    """The configuration of :class:`NullLoggerBuilder`."""

    type: Literal["null"] = "null"

    def try_to_builder(self) -> NullLoggerBuilder:
        return NullLoggerBuilder()
