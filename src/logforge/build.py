"""
Builder and configuration protocols shared by every logger variant.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from .errors import InvalidConfigError
from .pipeline import BuildResult

DEFAULT_CHANNEL_SIZE = 1024


def checked_channel_size(channel_size: int) -> int:
    if isinstance(channel_size, bool) or not isinstance(channel_size, int) or channel_size < 0:
        raise InvalidConfigError(f"Invalid channel size: {channel_size!r}", literal=channel_size)
    return channel_size


class Build(ABC):
    """Something that can construct a logger."""

    @abstractmethod
    def build(self) -> BuildResult:
        """Build a logger, touching the outside world (terminals, files) as needed."""
        ...


class Config(BaseModel):
    """Configuration of a logger builder.

    ``try_to_builder`` is pure and fails only on a structurally invalid
    configuration; all IO happens in the builder's ``build``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    @abstractmethod
    def try_to_builder(self) -> Build:
        ...

    def build_logger(self) -> BuildResult:
        return self.try_to_builder().build()
