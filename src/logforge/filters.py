"""
Boolean filter expressions over a record's severity and key-value fields.

A filter spec is an immutable tree. Leaves test the severity
(``LevelAtLeast``) or a key-value attribute (``MatchKeyValue``,
``MatchAnyValue``); inner nodes combine them (``And``, ``Or``, ``Not``,
``AllOf``, ``AnyOf``). Every node serializes to a mapping tagged with
``type`` so that arbitrary expressions can be written into configuration
documents::

    {"type": "Or",
     "left": {"type": "LevelAtLeast", "severity": "warning"},
     "right": {"type": "MatchKeyValue", "key": "system", "value": "db"}}

Evaluation is pure and never raises. An unknown ``type`` or a missing
field is rejected by validation when the document is loaded.
"""

from __future__ import annotations

from abc import abstractmethod
from collections import ChainMap
from typing import AbstractSet, Annotated, Any, Iterable, Literal, Mapping, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import EvaluationOrder, Severity


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    @abstractmethod
    def evaluate(self, severity: Severity, key_values: Mapping[str, Any]) -> bool:
        ...

    def referenced_keys(self) -> AbstractSet[str]:
        """Keys whose values can change the outcome of :meth:`evaluate`."""
        return frozenset()

    def __and__(self, other: "FilterSpec") -> "And":
        return And(left=self, right=other)

    def __or__(self, other: "FilterSpec") -> "Or":
        return Or(left=self, right=other)

    def __invert__(self) -> "Not":
        return Not(spec=self)


class Accept(_Node):
    type: Literal["Accept"] = "Accept"

    def evaluate(self, severity: Severity, key_values: Mapping[str, Any]) -> bool:
        return True


class Reject(_Node):
    type: Literal["Reject"] = "Reject"

    def evaluate(self, severity: Severity, key_values: Mapping[str, Any]) -> bool:
        return False


class LevelAtLeast(_Node):
    type: Literal["LevelAtLeast"] = "LevelAtLeast"
    severity: Severity

    def evaluate(self, severity: Severity, key_values: Mapping[str, Any]) -> bool:
        return severity >= self.severity


class MatchKeyValue(_Node):
    """True when ``key`` is present and its value renders as ``value``."""

    type: Literal["MatchKeyValue"] = "MatchKeyValue"
    key: str
    value: str

    def evaluate(self, severity: Severity, key_values: Mapping[str, Any]) -> bool:
        if self.key not in key_values:
            return False
        return str(key_values[self.key]) == self.value

    def referenced_keys(self) -> AbstractSet[str]:
        return frozenset((self.key,))


class MatchAnyValue(_Node):
    type: Literal["MatchAnyValue"] = "MatchAnyValue"
    key: str
    values: Tuple[str, ...]

    def evaluate(self, severity: Severity, key_values: Mapping[str, Any]) -> bool:
        if self.key not in key_values:
            return False
        return str(key_values[self.key]) in self.values

    def referenced_keys(self) -> AbstractSet[str]:
        return frozenset((self.key,))


class And(_Node):
    type: Literal["And"] = "And"
    left: FilterSpec
    right: FilterSpec

    def evaluate(self, severity: Severity, key_values: Mapping[str, Any]) -> bool:
        return self.left.evaluate(severity, key_values) and self.right.evaluate(severity, key_values)

    def referenced_keys(self) -> AbstractSet[str]:
        return self.left.referenced_keys() | self.right.referenced_keys()


class Or(_Node):
    type: Literal["Or"] = "Or"
    left: FilterSpec
    right: FilterSpec

    def evaluate(self, severity: Severity, key_values: Mapping[str, Any]) -> bool:
        return self.left.evaluate(severity, key_values) or self.right.evaluate(severity, key_values)

    def referenced_keys(self) -> AbstractSet[str]:
        return self.left.referenced_keys() | self.right.referenced_keys()


class Not(_Node):
    type: Literal["Not"] = "Not"
    spec: FilterSpec

    def evaluate(self, severity: Severity, key_values: Mapping[str, Any]) -> bool:
        return not self.spec.evaluate(severity, key_values)

    def referenced_keys(self) -> AbstractSet[str]:
        return self.spec.referenced_keys()


class AllOf(_Node):
    """Vacuously true when ``specs`` is empty."""

    type: Literal["AllOf"] = "AllOf"
    specs: Tuple[FilterSpec, ...] = ()

    def evaluate(self, severity: Severity, key_values: Mapping[str, Any]) -> bool:
        return all(spec.evaluate(severity, key_values) for spec in self.specs)

    def referenced_keys(self) -> AbstractSet[str]:
        return frozenset().union(*(spec.referenced_keys() for spec in self.specs))


class AnyOf(_Node):
    """Vacuously false when ``specs`` is empty."""

    type: Literal["AnyOf"] = "AnyOf"
    specs: Tuple[FilterSpec, ...] = ()

    def evaluate(self, severity: Severity, key_values: Mapping[str, Any]) -> bool:
        return any(spec.evaluate(severity, key_values) for spec in self.specs)

    def referenced_keys(self) -> AbstractSet[str]:
        return frozenset().union(*(spec.referenced_keys() for spec in self.specs))


FilterSpec = Annotated[
    Union[Accept, Reject, LevelAtLeast, MatchKeyValue, MatchAnyValue, And, Or, Not, AllOf, AnyOf],
    Field(discriminator="type"),
]

for _model in (And, Or, Not, AllOf, AnyOf):
    _model.model_rebuild()


# =============================================================================
# Constructors
# =============================================================================


def level_at_least(severity: Severity) -> LevelAtLeast:
    return LevelAtLeast(severity=severity)


def match_kv(key: str, value: str) -> MatchKeyValue:
    return MatchKeyValue(key=key, value=value)


def match_any_value(key: str, values: Iterable[str]) -> MatchAnyValue:
    return MatchAnyValue(key=key, values=tuple(values))


def all_of(specs: Iterable[FilterSpec]) -> AllOf:
    return AllOf(specs=tuple(specs))


def any_of(specs: Iterable[FilterSpec]) -> AnyOf:
    return AnyOf(specs=tuple(specs))


def evaluate(spec: FilterSpec, severity: Severity, key_values: Mapping[str, Any]) -> bool:
    return spec.evaluate(severity, key_values)


# =============================================================================
# Key-Value Filter
# =============================================================================


class KVFilter:
    """Decides whether a record passes, given its bound and ad-hoc fields.

    The evaluation order picks the scopes visible to the filter expression.
    When a key is present in both scopes, the scope evaluated first supplies
    its value.
    """

    def __init__(
        self,
        spec: FilterSpec,
        evaluation_order: EvaluationOrder = EvaluationOrder.LOGGER_AND_MESSAGE,
    ) -> None:
        self.spec = spec
        self.evaluation_order = evaluation_order
        self.referenced_keys = spec.referenced_keys()

    def visible_fields(self, bound: Mapping[str, Any], adhoc: Mapping[str, Any]) -> Mapping[str, Any]:
        order = self.evaluation_order
        if order is EvaluationOrder.LOGGER_ONLY:
            return bound
        if order is EvaluationOrder.MESSAGE_ONLY:
            return adhoc
        if order is EvaluationOrder.LOGGER_AND_MESSAGE:
            return ChainMap(bound, adhoc)  # type: ignore[arg-type]
        return ChainMap(adhoc, bound)  # type: ignore[arg-type]

    def accepts(self, severity: Severity, bound: Mapping[str, Any], adhoc: Mapping[str, Any]) -> bool:
        return self.spec.evaluate(severity, self.visible_fields(bound, adhoc))

    def __repr__(self) -> str:
        return f"KVFilter(spec={self.spec!r}, evaluation_order={self.evaluation_order.value})"
