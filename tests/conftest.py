from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from ldpsync.adapters.sqlalchemy import shutdown, startup
from ldpsync.domain.handle import IdentityMapper
from ldpsync.domain.persistence import PersistenceCoordinator
from tests.support.fake_repository import BASE_URL, FakeRepository, FakeSearchIndex

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def search_index() -> FakeSearchIndex:
    return FakeSearchIndex()


@pytest.fixture
def identity() -> IdentityMapper:
    return IdentityMapper(BASE_URL)


@pytest.fixture
def coordinator(
    repository: FakeRepository,
    search_index: FakeSearchIndex,
    identity: IdentityMapper,
) -> PersistenceCoordinator:
    return PersistenceCoordinator(
        connection=repository,
        identity=identity,
        search_index=search_index,
    )


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    startup(engine=engine, force=True)
    try:
        yield engine
    finally:
        shutdown()
