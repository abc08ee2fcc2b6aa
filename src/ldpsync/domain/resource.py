"""Persistence-facing state of a domain object mapped to one repository resource."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

from ldpsync.domain.attributes import TrackedAttributes, to_plain
from ldpsync.domain.contained import ContainedChildren, registry_for
from ldpsync.domain.errors import FrozenResourceError, IdentityError
from ldpsync.domain.handle import ResourceHandle

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ldpsync.domain.attributes import Values
    from ldpsync.domain.change_set import AttributeValue, ChangeSet
    from ldpsync.domain.contained import AttachedFile, ChildReflection, ContainedResource
    from ldpsync.domain.delegation import Delegation


class LifecycleState(StrEnum):
    NEW = "new"
    PERSISTED = "persisted"
    DESTROYED = "destroyed"


class Resource:
    """A domain object whose attributes are kept in sync with a remote resource.

    Subclasses declare their children in ``CONTAINS`` (built with
    ``ldpsync.domain.contained.contains``) and optional field delegation in
    ``DELEGATES``. Persistence itself is performed by
    ``ldpsync.domain.persistence.PersistenceCoordinator``; this class only holds
    state and enforces the frozen-after-destroy rule.
    """

    CONTAINS: ClassVar[tuple[ChildReflection, ...]] = ()
    DELEGATES: ClassVar[Mapping[str, Delegation]] = {}

    def __init__(
        self,
        attributes: Mapping[str, object] | None = None,
        *,
        id: str | None = None,  # noqa: A002
        readonly: bool = False,
    ) -> None:
        self._handle = ResourceHandle()
        self._requested_id = id
        self._id: str | None = None
        self._state = LifecycleState.NEW
        self._attributes = TrackedAttributes(attributes)
        self._contained = ContainedChildren(registry_for(type(self)), self._handle)
        self.readonly = readonly

    def __repr__(self) -> str:
        identity = self._handle.uri or self._requested_id or "unsaved"
        return f"<{type(self).__name__} {identity} {self._state}>"

    @classmethod
    def model_name(cls) -> str:
        return cls.__name__

    # Identity and lifecycle
    @property
    def handle(self) -> ResourceHandle:
        return self._handle

    @property
    def uri(self) -> str | None:
        return self._handle.uri

    @property
    def id(self) -> str | None:
        return self._id or self._requested_id

    @property
    def requested_id(self) -> str | None:
        return self._requested_id

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_new(self) -> bool:
        return self._state is LifecycleState.NEW

    @property
    def is_persisted(self) -> bool:
        return self._state is LifecycleState.PERSISTED

    @property
    def is_destroyed(self) -> bool:
        return self._state is LifecycleState.DESTROYED

    @property
    def frozen(self) -> bool:
        return self.is_destroyed

    # Attributes
    @property
    def attributes(self) -> dict[str, Values]:
        return self._attributes.as_dict()

    @property
    def baseline(self) -> dict[str, Values]:
        return self._attributes.baseline

    @property
    def changed_attributes(self) -> tuple[str, ...]:
        return self._attributes.changed_keys

    def __getitem__(self, key: str) -> Values:
        return self._attributes.get(key)

    def __setitem__(self, key: str, value: object) -> None:
        self._guard_mutation()
        self._attributes.set(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._attributes

    def first(self, key: str) -> AttributeValue | None:
        return self._attributes.first(key)

    def assign(self, values: Mapping[str, object]) -> None:
        for key, value in values.items():
            self[key] = value

    def change_set(self) -> ChangeSet:
        return self._attributes.change_set()

    # Contained resources
    @property
    def contained(self) -> ContainedChildren:
        return self._contained

    def child(self, slug: str) -> ContainedResource:
        return self._contained.child(slug)

    def attach_file(
        self,
        slug: str,
        content: bytes | str,
        *,
        mime_type: str | None = None,
        original_name: str | None = None,
    ) -> AttachedFile:
        self._guard_mutation()
        return self._contained.attach_file(
            slug, content, mime_type=mime_type, original_name=original_name
        )

    def to_index_document(self) -> dict[str, object]:
        """Flat document handed to the search index after save."""

        document: dict[str, object] = {"id": self.id, "uri": self.uri, "model": self.model_name()}
        for key, values in self._attributes.as_dict().items():
            document[key] = [to_plain(value) for value in values]
        document["contains"] = list(self._contained.materialize())
        return document

    def _guard_mutation(self) -> None:
        if self.is_destroyed:
            raise FrozenResourceError(f"{self!r} has been destroyed and can no longer be modified")

    # Friend primitives (called only by the persistence coordinator)
    def _confirm(self, uri: str, *, resource_id: str | None, version: str | None = None) -> None:
        if self._handle.uri is not None and self._handle.uri != uri:
            raise IdentityError(f"{self!r} cannot change identity to {uri}")
        self._handle.confirm(uri, version=version)
        self._id = resource_id
        self._state = LifecycleState.PERSISTED

    def _load(
        self,
        attributes: Mapping[str, Iterable[AttributeValue]],
        *,
        version: str | None,
    ) -> None:
        self._attributes.load(attributes)
        self._handle.version = version

    def _mark_destroyed(self) -> None:
        self._state = LifecycleState.DESTROYED
        self._contained._freeze()  # noqa: SLF001

    def _freeze(self) -> None:
        self._handle.forget()
