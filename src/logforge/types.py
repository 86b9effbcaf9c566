"""
Commonly used configuration types.
"""

from __future__ import annotations

from typing import Annotated, Iterable, List, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import (
    Destination,
    EvaluationOrder,
    Format,
    OverflowStrategy,
    Severity,
    SourceLocation,
    TimeZone,
)
from .filters import FilterSpec, all_of, any_of, level_at_least, match_kv


class PassIfMatch(BaseModel):
    """Pass a record whose fields contain every pair in ``keys_and_values``
    and whose severity is at least ``severity_at_least``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    keys_and_values: Tuple[Tuple[str, str], ...] = ()
    severity_at_least: Severity = Field(default_factory=Severity.default)

    @classmethod
    def new(cls, keys_and_values: Iterable[Tuple[object, object]], severity: Severity) -> "PassIfMatch":
        return cls(
            keys_and_values=tuple((str(key), str(value)) for key, value in keys_and_values),
            severity_at_least=severity,
        )

    def to_filter_spec(self) -> FilterSpec:
        matches = [match_kv(key, value) for key, value in self.keys_and_values]
        return level_at_least(self.severity_at_least) & all_of(matches)


class PassOnAnyOf(BaseModel):
    """Pass every record at or above ``always_pass_on_severity_at_least``,
    plus any record accepted by one of ``passes``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["PassOnAnyOf"] = "PassOnAnyOf"
    always_pass_on_severity_at_least: Severity = Field(default_factory=Severity.default)
    passes: Tuple[PassIfMatch, ...] = ()

    def to_filter_spec(self) -> FilterSpec:
        exceptions: List[FilterSpec] = [entry.to_filter_spec() for entry in self.passes]
        return level_at_least(self.always_pass_on_severity_at_least) | any_of(exceptions)


class Custom(BaseModel):
    """An arbitrary filter expression, used verbatim.

    Deeply nested specs serialize more readably to JSON than to TOML.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["Custom"] = "Custom"
    filter_spec: FilterSpec

    def to_filter_spec(self) -> FilterSpec:
        return self.filter_spec


FilterConfig = Annotated[Union[PassOnAnyOf, Custom], Field(discriminator="type")]


def default_filter_config() -> PassOnAnyOf:
    return PassOnAnyOf()


def always_pass_on_severity_at_least(severity: Severity) -> PassOnAnyOf:
    """A filter config passing records by severity alone, without exceptions."""
    return PassOnAnyOf(always_pass_on_severity_at_least=severity)


__all__ = [
    "Custom",
    "Destination",
    "EvaluationOrder",
    "FilterConfig",
    "Format",
    "OverflowStrategy",
    "PassIfMatch",
    "PassOnAnyOf",
    "Severity",
    "SourceLocation",
    "TimeZone",
    "always_pass_on_severity_at_least",
    "default_filter_config",
]
