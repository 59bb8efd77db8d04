"""Filter predicates over stored documents.

A Predicate is an immutable conjunction of Conditions.  It is built from
a Mongo-style mapping so call sites read like the queries they express:

    Predicate.of({"code": "SPRING10"})
    Predicate.of({"usageLimit": {"$gt": 0}, "isActive": True})
    Predicate.of({"deletedAt": {"$exists": False}})

Field names are the stored (camelCase) names.  Values are normalised to
their JSON form at construction (enums → values) so predicates compare
against documents in the same representation the stores hold.  Datetimes
are the exception: they stay typed (converted to UTC) and are compared as
instants against the stored ISO strings.  canonical() renders them in the
stored timestamp format so it stays stable for hashing.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic_core import to_jsonable_python

from marketstore.domain.errors import InvalidArgument

from .base import as_utc, format_timestamp


class Operator(str, Enum):
    EQ = "$eq"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"
    EXISTS = "$exists"


_ORDERING = {
    Operator.GT: lambda actual, bound: actual > bound,
    Operator.GTE: lambda actual, bound: actual >= bound,
    Operator.LT: lambda actual, bound: actual < bound,
    Operator.LTE: lambda actual, bound: actual <= bound,
}


@dataclass(frozen=True)
class Condition:
    """A single field test.  EXISTS tests key presence, not value."""

    field: str
    operator: Operator
    value: Any

    def matches(self, document: Mapping[str, Any]) -> bool:
        present = self.field in document
        if self.operator is Operator.EXISTS:
            return present is self.value
        if not present:
            # A test for null also matches a missing field.
            if self.operator is Operator.EQ:
                return self.value is None
            if self.operator is Operator.IN:
                return None in self.value
            return False
        actual = document[self.field]
        if actual is not None and self._on_timestamps():
            actual = _timestamp(actual)
            if actual is None:
                return False
        if self.operator is Operator.EQ:
            return actual == self.value
        if self.operator is Operator.IN:
            return actual in self.value
        try:
            return _ORDERING[self.operator](actual, self.value)
        except TypeError:
            # Mixed types never order against each other.
            return False

    def _on_timestamps(self) -> bool:
        values = self.value if self.operator is Operator.IN else (self.value,)
        return any(isinstance(value, datetime) for value in values)

    def canonical(self) -> list[Any]:
        return [self.field, self.operator.value, _canonical_value(self.value)]


def _timestamp(value: Any) -> datetime | None:
    """Read a stored timestamp; None when the value is not one."""
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str):
        return None
    try:
        return as_utc(datetime.fromisoformat(value))
    except ValueError:
        return None


def _canonical_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, tuple):
        return [_canonical_value(item) for item in value]
    return value


def _normalise(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value)
    return to_jsonable_python(value)


def _condition(field: str, operator: Operator, value: Any) -> Condition:
    if operator is Operator.IN:
        if not isinstance(value, (list, tuple)):
            raise InvalidArgument(f"$in on {field!r} takes a list, got {value!r}")
        return Condition(field, operator, tuple(_normalise(item) for item in value))
    value = _normalise(value)
    if operator is Operator.EXISTS and not isinstance(value, bool):
        raise InvalidArgument(f"$exists on {field!r} takes a boolean, got {value!r}")
    return Condition(field, operator, value)


def _is_operator_map(query: Any) -> bool:
    return isinstance(query, Mapping) and bool(query) and all(
        isinstance(key, str) and key.startswith("$") for key in query
    )


@dataclass(frozen=True)
class Predicate:
    conditions: tuple[Condition, ...] = ()

    @classmethod
    def of(cls, query: Predicate | Mapping[str, Any] | None = None) -> Predicate:
        """Build from a mapping; an existing Predicate is returned unchanged."""
        if query is None:
            return cls()
        if isinstance(query, Predicate):
            return query
        conditions: list[Condition] = []
        for field, field_query in query.items():
            if _is_operator_map(field_query):
                for op, value in field_query.items():
                    try:
                        operator = Operator(op)
                    except ValueError:
                        raise InvalidArgument(f"unsupported operator {op!r} on {field!r}") from None
                    conditions.append(_condition(field, operator, value))
            else:
                conditions.append(_condition(field, Operator.EQ, field_query))
        return cls(tuple(conditions))

    def __and__(self, other: Predicate | Mapping[str, Any]) -> Predicate:
        return Predicate(self.conditions + Predicate.of(other).conditions)

    def matches(self, document: Mapping[str, Any]) -> bool:
        return all(condition.matches(document) for condition in self.conditions)

    def canonical(self) -> list[list[Any]]:
        """Order-independent, duplicate-free form of the conjunction."""
        unique = {
            json.dumps(c.canonical(), sort_keys=True, separators=(",", ":")): c.canonical()
            for c in self.conditions
        }
        return [unique[key] for key in sorted(unique)]


NOT_DELETED = Predicate((Condition("deletedAt", Operator.EXISTS, False),))
