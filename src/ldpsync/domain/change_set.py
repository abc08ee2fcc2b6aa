"""Minimal attribute diffs between a persisted baseline and local state.

Only keys reported as locally modified are inspected, so the cost of a diff is
bounded by the touched fields rather than the size of the resource. Values are
compared by a normalized scalar representation (``normalize_value``) and keep
their encounter order; nothing is sorted.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable, Sequence

type AttributeValue = object
type AttributeMap = Mapping[str, Sequence[AttributeValue]]


def normalize_value(value: AttributeValue) -> Hashable:
    """Return the comparison key for one attribute value.

    The type tag keeps ``True`` apart from ``1`` and ``"1"``; timestamps compare in
    UTC; nested mappings compare independent of key order.
    """

    match value:
        case bool():
            return ("bool", value)
        case int():
            return ("int", value)
        case float():
            return ("float", value)
        case Decimal():
            return ("decimal", str(value.normalize()))
        case str():
            return ("str", value)
        case datetime():
            normalized = value.astimezone(UTC) if value.tzinfo is not None else value
            return ("datetime", normalized.isoformat())
        case date():
            return ("date", value.isoformat())
        case UUID():
            return ("uuid", str(value))
        case bytes():
            return ("bytes", value)
        case Mapping():
            pairs = ((str(k), normalize_value(v)) for k, v in value.items())
            return ("map", tuple(sorted(pairs, key=lambda kv: kv[0])))
        case list() | tuple():
            return ("seq", tuple(normalize_value(item) for item in value))
        case None:
            return ("none", None)
        case _:
            return ("repr", repr(value))


def unique_values(values: Iterable[AttributeValue]) -> list[AttributeValue]:
    """Drop repeated values (by normalized form), keeping the first occurrence."""

    seen: set[Hashable] = set()
    result: list[AttributeValue] = []
    for value in values:
        key = normalize_value(value)
        if key in seen:
            continue
        seen.add(key)
        result.append(value)
    return result


@dataclass(slots=True)
class ChangeSet:
    """Per-predicate values to insert and delete; built fresh for each update."""

    insertions: dict[str, list[AttributeValue]] = field(default_factory=dict)
    deletions: dict[str, list[AttributeValue]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not any(self.insertions.values()) and not any(self.deletions.values())

    def __bool__(self) -> bool:
        return not self.is_empty

    @property
    def predicates(self) -> tuple[str, ...]:
        keys = dict.fromkeys(k for k, v in self.insertions.items() if v)
        keys.update(dict.fromkeys(k for k, v in self.deletions.items() if v))
        return tuple(keys)

    def insert(self, predicate: str, value: AttributeValue) -> None:
        self.insertions.setdefault(predicate, []).append(value)

    def delete(self, predicate: str, value: AttributeValue) -> None:
        self.deletions.setdefault(predicate, []).append(value)

    def apply_to(self, baseline: AttributeMap) -> dict[str, list[AttributeValue]]:
        """Apply insertions, then deletions, to a copy of ``baseline``."""

        result = {key: unique_values(values) for key, values in baseline.items()}
        for predicate, values in self.insertions.items():
            result[predicate] = unique_values([*result.get(predicate, []), *values])
        for predicate, values in self.deletions.items():
            removed = {normalize_value(v) for v in values}
            remaining = [v for v in result.get(predicate, []) if normalize_value(v) not in removed]
            if remaining:
                result[predicate] = remaining
            else:
                result.pop(predicate, None)
        return result


def compute_change_set(
    baseline: AttributeMap,
    current: AttributeMap,
    changed_keys: Iterable[str],
) -> ChangeSet:
    """Diff ``current`` against ``baseline`` for the keys in ``changed_keys`` only."""

    change_set = ChangeSet()
    for key in dict.fromkeys(changed_keys):
        before = unique_values(baseline.get(key, ()))
        after = unique_values(current.get(key, ()))
        before_keys = {normalize_value(v) for v in before}
        after_keys = {normalize_value(v) for v in after}
        for value in after:
            if normalize_value(value) not in before_keys:
                change_set.insert(key, value)
        for value in before:
            if normalize_value(value) not in after_keys:
                change_set.delete(key, value)
    return change_set
