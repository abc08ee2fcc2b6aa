"""In-memory repository and search index used across the test-suite."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ldpsync.domain.errors import GoneError, ObjectNotFoundError
from ldpsync.domain.handle import Existence, join_uri
from ldpsync.domain.ports import RemoteContent, RemoteDocument
from ldpsync.domain.tombstones import DEFAULT_TOMBSTONE_SEGMENT

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ldpsync.domain.change_set import ChangeSet

BASE_URL = "http://repo.test/rest"


@dataclass(slots=True)
class Call:
    method: str
    uri: str
    if_match: str | None = None


class FakeRepository:
    """Tombstone-aware stand-in for the remote repository.

    Every port call is recorded in ``calls``. ``fail_on`` injects an exception for
    the next call matching ``(method, uri)``.
    """

    def __init__(self, base_url: str = BASE_URL) -> None:
        self.base_url = base_url
        self.calls: list[Call] = []
        self.documents: dict[str, RemoteDocument] = {}
        self.binaries: dict[str, RemoteContent] = {}
        self.tombstones: set[str] = set()
        self._failures: dict[tuple[str, str], Exception] = {}
        self._version = 0
        self._minted = 0

    # Test helpers
    def fail_on(self, method: str, uri: str, exc: Exception) -> None:
        self._failures[(method, uri)] = exc

    def seed(self, uri: str, attributes: Mapping[str, tuple[object, ...]] | None = None) -> None:
        self.documents[uri] = RemoteDocument(
            uri=uri, attributes=dict(attributes or {}), version=self._next_version()
        )

    def methods(self) -> list[str]:
        return [call.method for call in self.calls]

    def calls_for(self, method: str) -> list[Call]:
        return [call for call in self.calls if call.method == method]

    def reset_calls(self) -> None:
        self.calls.clear()

    # Port
    def probe(self, uri: str) -> Existence:
        self._record("probe", uri)
        if uri in self.documents or uri in self.binaries:
            return Existence.PRESENT
        if uri in self.tombstones:
            return Existence.GONE
        return Existence.ABSENT

    def get(self, uri: str) -> RemoteDocument:
        self._record("get", uri)
        self._require(uri)
        stored = self.documents.get(uri)
        if stored is None:
            raise ObjectNotFoundError(f"{uri} is a binary", uri=uri)
        return RemoteDocument(
            uri=uri,
            attributes=dict(stored.attributes),
            contains=self._children(uri),
            model=stored.model,
            version=stored.version,
        )

    def get_content(self, uri: str) -> RemoteContent:
        self._record("get_content", uri)
        self._require(uri)
        stored = self.binaries.get(uri)
        if stored is None:
            raise ObjectNotFoundError(f"{uri} is not a binary", uri=uri)
        return stored

    def put(self, document: RemoteDocument) -> str | None:
        self._record("put", document.uri)
        self._reject_tombstoned(document.uri)
        version = self._next_version()
        self.documents[document.uri] = RemoteDocument(
            uri=document.uri,
            attributes=dict(document.attributes),
            model=document.model,
            version=version,
        )
        return version

    def put_content(
        self,
        uri: str,
        content: bytes,
        *,
        mime_type: str,
        original_name: str | None = None,
    ) -> str | None:
        del original_name
        self._record("put_content", uri)
        self._reject_tombstoned(uri)
        version = self._next_version()
        self.binaries[uri] = RemoteContent(
            uri=uri, content=content, mime_type=mime_type, version=version
        )
        return version

    def post(self, container_uri: str, document: RemoteDocument) -> str:
        self._record("post", container_uri)
        if container_uri != self.base_url:
            self._require(container_uri)
        self._minted += 1
        uri = join_uri(container_uri, f"minted-{self._minted}")
        self.documents[uri] = RemoteDocument(
            uri=uri,
            attributes=dict(document.attributes),
            model=document.model,
            version=self._next_version(),
        )
        return uri

    def patch(
        self,
        uri: str,
        change_set: ChangeSet,
        *,
        if_match: str | None = None,
    ) -> str | None:
        self._record("patch", uri, if_match=if_match)
        self._require(uri)
        stored = self.documents[uri]
        applied = change_set.apply_to(stored.attributes)
        stored.attributes = {key: tuple(values) for key, values in applied.items()}
        stored.version = self._next_version()
        return stored.version

    def delete(self, uri: str) -> None:
        self._record("delete", uri)
        suffix = "/" + DEFAULT_TOMBSTONE_SEGMENT
        if uri.endswith(suffix):
            target = uri.removesuffix(suffix)
            if target not in self.tombstones:
                raise ObjectNotFoundError(f"No tombstone at {uri}", uri=uri)
            self.tombstones.discard(target)
            return
        self._require(uri)
        prefix = uri + "/"
        for store in (self.documents, self.binaries):
            for key in [k for k in store if k == uri or k.startswith(prefix)]:
                del store[key]
        self.tombstones.add(uri)

    # Internals
    def _record(self, method: str, uri: str, *, if_match: str | None = None) -> None:
        self.calls.append(Call(method, uri, if_match))
        failure = self._failures.pop((method, uri), None)
        if failure is not None:
            raise failure

    def _require(self, uri: str) -> None:
        if uri in self.documents or uri in self.binaries:
            return
        if uri in self.tombstones:
            raise GoneError(f"{uri} has been deleted", uri=uri)
        raise ObjectNotFoundError(f"{uri} does not exist", uri=uri)

    def _reject_tombstoned(self, uri: str) -> None:
        if uri in self.tombstones:
            raise GoneError(f"{uri} has been deleted", uri=uri)

    def _children(self, uri: str) -> tuple[str, ...]:
        prefix = uri + "/"
        slugs = [
            key[len(prefix) :]
            for key in [*self.documents, *self.binaries]
            if key.startswith(prefix) and "/" not in key[len(prefix) :]
        ]
        return tuple(slugs)

    def _next_version(self) -> str:
        self._version += 1
        return f'W/"{self._version}"'


@dataclass
class FakeSearchIndex:
    documents: dict[str, dict[str, object]] = field(default_factory=dict)
    fail: bool = False
    calls: list[tuple[str, str]] = field(default_factory=list)

    def index(self, resource_id: str, document: Mapping[str, object]) -> None:
        self.calls.append(("index", resource_id))
        if self.fail:
            raise RuntimeError("index unavailable")
        self.documents[resource_id] = dict(document)

    def delete_from_index(self, resource_id: str) -> None:
        self.calls.append(("delete_from_index", resource_id))
        if self.fail:
            raise RuntimeError("index unavailable")
        self.documents.pop(resource_id, None)
