"""Application wiring: build a coordinator from environment configuration."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from ldpsync.adapters.ldp import LdpClient
from ldpsync.adapters.sqlalchemy import SqlAlchemySearchIndex, is_started, startup
from ldpsync.config import get_index_config, get_repository_config
from ldpsync.domain.handle import IdentityMapper
from ldpsync.domain.persistence import PersistenceCoordinator
from ldpsync.domain.resource import Resource
from ldpsync.domain.tombstones import TombstoneManager

if TYPE_CHECKING:
    from ldpsync.config import IndexConfig, RepositoryConfig
    from ldpsync.domain.handle import Existence
    from ldpsync.domain.persistence import IdentityMinter
    from ldpsync.domain.ports import RepositoryConnection, SearchIndex

log = getLogger(__name__)


def build_search_index(config: IndexConfig) -> SearchIndex | None:
    if not config.enabled:
        return None
    if not is_started():
        startup(database_uri=config.database_uri)
    return SqlAlchemySearchIndex()


def build_coordinator(
    *,
    repository_config: RepositoryConfig | None = None,
    index_config: IndexConfig | None = None,
    connection: RepositoryConnection | None = None,
    search_index: SearchIndex | None = None,
    minter: IdentityMinter | None = None,
) -> PersistenceCoordinator:
    """Wire the HTTP connection, tombstones and search index into a coordinator."""

    repository = repository_config or get_repository_config()
    indexing = index_config or get_index_config()
    effective_connection = connection or LdpClient(config=repository)
    effective_index = search_index if search_index is not None else build_search_index(indexing)

    log.debug(
        "Repository at %s (root=%s), index enabled=%s",
        repository.normalized_base_url,
        repository.normalized_root_path,
        indexing.enabled,
    )
    return PersistenceCoordinator(
        connection=effective_connection,
        identity=IdentityMapper(repository.normalized_base_url, repository.normalized_root_path),
        tombstones=TombstoneManager(effective_connection, segment=repository.tombstone_segment),
        search_index=effective_index,
        index_enabled=indexing.enabled,
        minter=minter,
        send_version_token=repository.send_version_token,
    )


def resource_exists(
    resource_id: str,
    *,
    coordinator: PersistenceCoordinator | None = None,
) -> Existence:
    return (coordinator or build_coordinator()).exists(resource_id)


def eradicate_resource(
    resource_id: str,
    *,
    coordinator: PersistenceCoordinator | None = None,
) -> bool:
    return (coordinator or build_coordinator()).eradicate(resource_id)


def delete_resource(
    resource_id: str,
    *,
    eradicate: bool = False,
    coordinator: PersistenceCoordinator | None = None,
) -> Resource:
    effective = coordinator or build_coordinator()
    resource = effective.find(Resource, resource_id)
    return effective.destroy(resource, eradicate=eradicate)


def show_resource(
    resource_id: str,
    *,
    coordinator: PersistenceCoordinator | None = None,
) -> dict[str, object]:
    resource = (coordinator or build_coordinator()).find(Resource, resource_id)
    return resource.to_index_document()
