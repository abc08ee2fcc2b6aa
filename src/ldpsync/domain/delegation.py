"""Field delegation from a resource to one of its structured children.

A resource type lists delegated fields in ``DELEGATES``::

    class Book(Resource):
        CONTAINS = (contains("descMetadata", kind=ContainedSource, policy="eager"),)
        DELEGATES = {
            "title": Delegation("descMetadata", Cardinality.ONE),
            "subject": Delegation("descMetadata"),
        }

and reads/writes them through ``read_delegated`` / ``write_delegated``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from ldpsync.domain.contained import ContainedSource, registry_for
from ldpsync.domain.errors import DeclarationError

if TYPE_CHECKING:
    from ldpsync.domain.change_set import AttributeValue
    from ldpsync.domain.resource import Resource


class Cardinality(StrEnum):
    ONE = "one"
    MANY = "many"


@dataclass(frozen=True, slots=True)
class Delegation:
    to: str
    cardinality: Cardinality = Cardinality.MANY
    predicate: str | None = None

    def __post_init__(self) -> None:
        if not self.to:
            raise DeclarationError("A delegated field needs a target contained resource (to=...)")


def _resolve(resource: Resource, field: str) -> tuple[Delegation, ContainedSource]:
    delegation = type(resource).DELEGATES.get(field)
    if delegation is None:
        raise AttributeError(f"{type(resource).__name__} has no delegated field {field!r}")
    if delegation.to not in registry_for(type(resource)):
        raise DeclarationError(
            f"{type(resource).__name__}.{field} delegates to undeclared child {delegation.to!r}"
        )
    child = resource.child(delegation.to)
    if not isinstance(child, ContainedSource):
        raise DeclarationError(
            f"{type(resource).__name__}.{field} delegates to {delegation.to!r}, "
            f"which is a {child.KIND}, not a structured child"
        )
    return delegation, child


def read_delegated(resource: Resource, field: str) -> AttributeValue | tuple[AttributeValue, ...]:
    delegation, child = _resolve(resource, field)
    values = child[delegation.predicate or field]
    if delegation.cardinality is Cardinality.ONE:
        return values[0] if values else None
    return values


def write_delegated(resource: Resource, field: str, value: object) -> None:
    delegation, child = _resolve(resource, field)
    resource._guard_mutation()  # noqa: SLF001
    child[delegation.predicate or field] = value
