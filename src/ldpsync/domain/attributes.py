"""Dirty tracking of attribute values against a persisted baseline."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from ldpsync.domain.change_set import compute_change_set, unique_values

if TYPE_CHECKING:
    from ldpsync.domain.change_set import AttributeValue, ChangeSet

type Values = tuple[AttributeValue, ...]


def as_values(value: object) -> Values:
    """Coerce an assignment into the one-or-many tuple form stored per key."""

    match value:
        case None:
            return ()
        case str() | bytes() | Mapping():
            return (value,)
        case Iterable():
            return tuple(unique_values(value))  # pyright: ignore[reportUnknownArgumentType]
        case _:
            return (value,)


def to_plain(value: AttributeValue) -> object:
    """JSON-friendly rendering used for search index documents."""

    match value:
        case bool() | int() | float() | str() | None:
            return value
        case datetime() | date():
            return value.isoformat()
        case Decimal() | UUID():
            return str(value)
        case bytes():
            return value.decode("utf-8", errors="replace")
        case Mapping():
            return {str(k): to_plain(v) for k, v in value.items()}
        case list() | tuple():
            return [to_plain(item) for item in value]
        case _:
            return str(value)


class TrackedAttributes:
    """Current values, last persisted values, and the keys touched in between."""

    __slots__ = ("_baseline", "_changed", "_values")

    def __init__(self, initial: Mapping[str, object] | None = None) -> None:
        self._values: dict[str, Values] = {}
        self._baseline: dict[str, Values] = {}
        self._changed: dict[str, None] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def get(self, key: str) -> Values:
        return self._values.get(key, ())

    def first(self, key: str) -> AttributeValue | None:
        values = self._values.get(key, ())
        return values[0] if values else None

    def set(self, key: str, value: object) -> None:
        values = as_values(value)
        if values:
            self._values[key] = values
        else:
            self._values.pop(key, None)
        self._changed[key] = None

    def as_dict(self) -> dict[str, Values]:
        return dict(self._values)

    @property
    def baseline(self) -> dict[str, Values]:
        return dict(self._baseline)

    @property
    def changed_keys(self) -> tuple[str, ...]:
        return tuple(self._changed)

    def change_set(self) -> ChangeSet:
        return compute_change_set(self._baseline, self._values, self._changed)

    def commit(self) -> None:
        """Adopt the current values as the baseline after a confirmed write."""

        self._baseline = dict(self._values)
        self._changed.clear()

    def load(self, remote: Mapping[str, Iterable[AttributeValue]]) -> None:
        """Replace values and baseline with what the repository returned."""

        loaded = ((key, as_values(list(values))) for key, values in remote.items())
        self._values = {key: values for key, values in loaded if values}
        self.commit()
