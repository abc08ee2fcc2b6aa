from __future__ import annotations

import pytest

from ldpsync import app as app_module
from ldpsync.config import IndexConfig, RepositoryConfig
from ldpsync.domain.handle import Existence
from ldpsync.domain.persistence import PersistenceCoordinator
from tests.support.fake_repository import BASE_URL, FakeRepository, FakeSearchIndex


@pytest.fixture
def repository() -> FakeRepository:
    repository = FakeRepository()
    repository.seed(f"{BASE_URL}/books/b1", {"title": ("A",)})
    return repository


def _coordinator(
    repository: FakeRepository,
    index: FakeSearchIndex | None = None,
) -> PersistenceCoordinator:
    return app_module.build_coordinator(
        repository_config=RepositoryConfig(base_url=BASE_URL + "/", root_path="books"),
        index_config=IndexConfig(enabled=index is not None),
        connection=repository,
        search_index=index,
    )


def test_build_coordinator_uses_root_path(repository: FakeRepository) -> None:
    coordinator = _coordinator(repository)

    assert coordinator.identity.root_uri == f"{BASE_URL}/books"
    assert coordinator.exists("b1") is Existence.PRESENT


def test_build_coordinator_skips_index_when_disabled(repository: FakeRepository) -> None:
    coordinator = app_module.build_coordinator(
        repository_config=RepositoryConfig(base_url=BASE_URL),
        index_config=IndexConfig(enabled=False),
        connection=repository,
    )

    assert app_module.build_search_index(IndexConfig(enabled=False)) is None
    assert coordinator.exists("books/b1") is Existence.PRESENT


def test_show_and_delete_resource(repository: FakeRepository) -> None:
    index = FakeSearchIndex()
    coordinator = _coordinator(repository, index)

    document = app_module.show_resource("b1", coordinator=coordinator)
    assert document["title"] == ["A"]
    assert document["id"] == "b1"

    deleted = app_module.delete_resource("b1", eradicate=True, coordinator=coordinator)
    assert deleted.is_destroyed
    assert app_module.resource_exists("b1", coordinator=coordinator) is Existence.ABSENT
    assert app_module.eradicate_resource("b1", coordinator=coordinator) is False
    assert ("delete_from_index", "b1") in index.calls


def test_custom_tombstone_segment(repository: FakeRepository) -> None:
    coordinator = app_module.build_coordinator(
        repository_config=RepositoryConfig(
            base_url=BASE_URL, root_path="books", tombstone_segment="tomb"
        ),
        index_config=IndexConfig(enabled=False),
        connection=repository,
    )

    assert coordinator.tombstones.tombstone_uri(f"{BASE_URL}/books/b1") == (
        f"{BASE_URL}/books/b1/tomb"
    )
