"""Save/delete lifecycle of resources against the remote repository.

``PersistenceCoordinator.save`` picks one of two paths:

- create: assign an identity (caller id, minting hook, or the server's
  ``Location``), send the full resource, derive child URIs, save every present
  child in declaration order, then refresh the baseline.
- update: diff against the baseline for locally changed keys only, ``PATCH``
  when the diff is non-empty, save dirty children, then refresh. Nothing to
  send means no network call at all.

Both paths end with a best-effort search index update. Failures of the
repository are surfaced as raised; nothing is retried or rolled back here. A
child failing after its parent was written leaves the parent persisted, and
saving again only resends what is still different.
"""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING

from ldpsync.domain.contained import AttachedFile, ContainedSource
from ldpsync.domain.errors import (
    FrozenResourceError,
    GoneError,
    IdentityError,
    ObjectNotFoundError,
    ReadOnlyError,
)
from ldpsync.domain.handle import Existence
from ldpsync.domain.ports import RemoteDocument
from ldpsync.domain.tombstones import TombstoneManager

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from ldpsync.domain.contained import ContainedResource
    from ldpsync.domain.handle import IdentityMapper
    from ldpsync.domain.ports import RepositoryConnection, SearchIndex
    from ldpsync.domain.resource import Resource

    type IdentityMinter = Callable[[Resource], str | None]

log = getLogger(__name__)


class PersistenceCoordinator:
    """Decides create vs. update and cascades into contained resources."""

    def __init__(
        self,
        *,
        connection: RepositoryConnection,
        identity: IdentityMapper,
        tombstones: TombstoneManager | None = None,
        search_index: SearchIndex | None = None,
        index_enabled: bool = True,
        minter: IdentityMinter | None = None,
        send_version_token: bool = False,
    ) -> None:
        self._connection = connection
        self._identity = identity
        self._tombstones = tombstones or TombstoneManager(connection)
        self._search_index = search_index
        self._index_enabled = index_enabled
        self._minter = minter
        self._send_version_token = send_version_token
        self._root_ready = identity.root_path is None

    @property
    def tombstones(self) -> TombstoneManager:
        return self._tombstones

    @property
    def identity(self) -> IdentityMapper:
        return self._identity

    # Save
    def save(self, resource: Resource) -> bool:
        if resource.readonly:
            raise ReadOnlyError(f"{resource!r} is read-only")
        if resource.is_destroyed:
            raise FrozenResourceError(f"{resource!r} has been destroyed and cannot be saved")
        result = self.create(resource) if resource.is_new else self.update(resource)
        return result is not False

    def create(self, resource: Resource) -> bool:
        uri = self._assign_identity(resource)
        document = self._document_for(resource, uri or "")
        if uri is not None:
            log.info("Creating %s at %s", resource.model_name(), uri)
            self._connection.put(document)
        else:
            container = self._base_container()
            log.info("Creating %s in %s", resource.model_name(), container)
            uri = self._connection.post(container, document)
        resource._confirm(uri, resource_id=self._id_for(uri))  # noqa: SLF001

        children = list(resource.contained.materialize().values())
        for child in children:
            child.derive_identity()
        self._save_children(resource, children)

        self.refresh(resource)
        self._update_index(resource)
        return True

    def update(self, resource: Resource) -> bool:
        uri = self._require_uri(resource)
        change_set = resource.change_set()
        changed_children = list(resource.contained.changed().values())
        if change_set.is_empty and not changed_children:
            log.debug("Nothing to update for %s", uri)
            return True

        if not change_set.is_empty:
            if_match = resource.handle.version if self._send_version_token else None
            log.info("Updating %s: %s", uri, ", ".join(change_set.predicates))
            self._connection.patch(uri, change_set, if_match=if_match)
        self._save_children(resource, changed_children)

        self.refresh(resource)
        self._update_index(resource)
        return True

    def update_attributes(self, resource: Resource, values: Mapping[str, object]) -> bool:
        resource.assign(values)
        return self.save(resource)

    def create_from[R: Resource](
        self,
        resource_type: type[R],
        attributes: Mapping[str, object] | Sequence[Mapping[str, object]] | None = None,
    ) -> R | list[R]:
        """Build and save one resource per attribute mapping.

        The built objects are returned whether or not saving them succeeded.
        """

        if attributes is not None and not isinstance(attributes, Mapping):
            return [self._create_one(resource_type, values) for values in attributes]
        return self._create_one(resource_type, attributes)

    def refresh(self, resource: Resource) -> None:
        """Re-read remote state into the baseline (and current attributes)."""

        document = self._connection.get(self._require_uri(resource))
        resource._load(document.attributes, version=document.version)  # noqa: SLF001

    # Load
    def find[R: Resource](self, resource_type: type[R], id_or_uri: str) -> R:
        uri = self._identity.id_to_uri(id_or_uri)
        document = self._connection.get(uri)
        resource = resource_type()
        resource_id = self._id_for(uri)
        resource._confirm(uri, resource_id=resource_id, version=document.version)  # noqa: SLF001
        resource._load(document.attributes, version=document.version)  # noqa: SLF001
        for slug in document.contains:
            self._load_child(resource.contained._adopt(slug))  # noqa: SLF001
        return resource

    def exists(self, id_or_uri: str) -> Existence:
        return self._tombstones.exists(self._identity.id_to_uri(id_or_uri))

    def is_gone(self, id_or_uri: str) -> bool:
        return self._tombstones.is_gone(self._identity.id_to_uri(id_or_uri))

    def eradicate(self, id_or_uri: str) -> bool:
        return self._tombstones.eradicate(self._identity.id_to_uri(id_or_uri))

    # Delete
    def delete(self, resource: Resource, *, eradicate: bool = False) -> Resource:
        """Delete the remote resource and freeze the local one.

        The resource is marked destroyed before the remote call so a second
        ``delete``/``save`` on the same instance cannot race it. If the remote
        delete then fails, the instance stays destroyed and the error is raised;
        load it again with ``find`` to retry.
        """

        if resource.is_new or resource.is_destroyed:
            return resource

        uri = self._require_uri(resource)
        resource_id = resource.id
        resource._mark_destroyed()  # noqa: SLF001
        try:
            self._connection.delete(uri)
        except ObjectNotFoundError as exc:
            raise ObjectNotFoundError(
                f"Unable to find {resource_id} in the repository", uri=uri
            ) from exc
        log.info("Deleted %s", uri)

        self._delete_from_index(resource_id or uri)
        if eradicate:
            self._tombstones.eradicate(uri)
        resource._freeze()  # noqa: SLF001
        return resource

    def destroy(self, resource: Resource, *, eradicate: bool = False) -> Resource:
        if resource.readonly:
            raise ReadOnlyError(f"{resource!r} is read-only")
        return self.delete(resource, eradicate=eradicate)

    # Contained resources
    def _save_children(self, parent: Resource, children: Iterable[ContainedResource]) -> None:
        for child in children:
            log.debug("Saving contained %s of %s", child.slug, parent.uri)
            self._save_child(child)

    def _save_child(self, child: ContainedResource) -> None:
        uri = child.derive_identity()
        match child:
            case AttachedFile():
                version = self._connection.put_content(
                    uri,
                    child.content or b"",
                    mime_type=child.mime_type,
                    original_name=child.original_name,
                )
                child._confirm(version=version)  # noqa: SLF001
            case ContainedSource() if child.is_new:
                version = self._connection.put(
                    RemoteDocument(uri=uri, attributes=child.attributes)
                )
                child._commit(version=version)  # noqa: SLF001
            case ContainedSource():
                change_set = child.change_set()
                version = child.handle.version
                if not change_set.is_empty:
                    if_match = version if self._send_version_token else None
                    version = self._connection.patch(uri, change_set, if_match=if_match)
                child._commit(version=version)  # noqa: SLF001
            case _:
                raise TypeError(f"Unsupported contained resource kind: {type(child).__name__}")

    def _load_child(self, child: ContainedResource) -> None:
        match child:
            case AttachedFile():
                remote = self._connection.get_content(child.uri)
                child._load(  # noqa: SLF001
                    remote.content, mime_type=remote.mime_type, version=remote.version
                )
            case ContainedSource():
                document = self._connection.get(child.uri)
                child._load(document.attributes, version=document.version)  # noqa: SLF001
            case _:
                raise TypeError(f"Unsupported contained resource kind: {type(child).__name__}")

    # Identity
    def _assign_identity(self, resource: Resource) -> str | None:
        if resource.uri is not None:
            return resource.uri
        resource_id = resource.requested_id
        if resource_id is None and self._minter is not None:
            resource_id = self._minter(resource)
        if resource_id is None:
            return None
        return self._identity.id_to_uri(resource_id)

    def _base_container(self) -> str:
        root = self._identity.root_uri
        if self._root_ready:
            return root
        state = self._connection.probe(root)
        if state is Existence.GONE:
            raise GoneError(f"Root container {root} has been deleted", uri=root)
        if state is Existence.ABSENT:
            log.info("Creating root container %s", root)
            self._connection.put(RemoteDocument(uri=root))
        self._root_ready = True
        return root

    def _id_for(self, uri: str) -> str:
        try:
            return self._identity.uri_to_id(uri)
        except ValueError:
            return uri

    @staticmethod
    def _require_uri(resource: Resource) -> str:
        if resource.uri is None:
            raise IdentityError(f"{resource!r} has no identity")
        return resource.uri

    @staticmethod
    def _document_for(resource: Resource, uri: str) -> RemoteDocument:
        return RemoteDocument(uri=uri, attributes=resource.attributes, model=resource.model_name())

    def _create_one[R: Resource](
        self,
        resource_type: type[R],
        attributes: Mapping[str, object] | None,
    ) -> R:
        resource = resource_type(attributes)
        self.save(resource)
        return resource

    # Search index (best effort)
    def _update_index(self, resource: Resource) -> None:
        if not self._index_enabled or self._search_index is None:
            return
        resource_id = resource.id or self._require_uri(resource)
        try:
            self._search_index.index(resource_id, resource.to_index_document())
        except Exception:  # noqa: BLE001
            log.warning("Search index update failed for %s", resource_id, exc_info=True)

    def _delete_from_index(self, resource_id: str) -> None:
        if not self._index_enabled or self._search_index is None:
            return
        try:
            self._search_index.delete_from_index(resource_id)
        except Exception:  # noqa: BLE001
            log.warning("Search index delete failed for %s", resource_id, exc_info=True)
