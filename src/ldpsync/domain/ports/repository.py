"""Port for the remote Linked-Data-Platform-style repository."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ldpsync.domain.attributes import Values
    from ldpsync.domain.change_set import ChangeSet
    from ldpsync.domain.handle import Existence


@dataclass(slots=True, kw_only=True)
class RemoteDocument:
    """Structured state of one remote resource as read from or written to the server."""

    uri: str
    attributes: dict[str, Values] = field(default_factory=dict)
    contains: tuple[str, ...] = ()
    model: str | None = None
    version: str | None = None


@dataclass(slots=True, kw_only=True)
class RemoteContent:
    """Binary body of one remote resource."""

    uri: str
    content: bytes
    mime_type: str | None = None
    version: str | None = None


@runtime_checkable
class RepositoryConnection(Protocol):
    """Blocking repository operations consumed by the persistence coordinator.

    Implementations raise ``ObjectNotFoundError`` for absent resources and
    ``GoneError`` for tombstoned ones on every operation except ``probe``,
    which reports both as an ``Existence`` value. Write operations return the
    new version token when the server sends one.
    """

    def probe(self, uri: str) -> Existence: ...

    def get(self, uri: str) -> RemoteDocument: ...

    def get_content(self, uri: str) -> RemoteContent: ...

    def put(self, document: RemoteDocument) -> str | None: ...

    def put_content(
        self,
        uri: str,
        content: bytes,
        *,
        mime_type: str,
        original_name: str | None = None,
    ) -> str | None: ...

    def post(self, container_uri: str, document: RemoteDocument) -> str: ...

    def patch(
        self,
        uri: str,
        change_set: ChangeSet,
        *,
        if_match: str | None = None,
    ) -> str | None: ...

    def delete(self, uri: str) -> None: ...
