"""SQLAlchemy-backed search index kept next to the repository."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, cast

from sqlalchemy import create_engine, delete, insert, select, update
from sqlalchemy.orm import Session, sessionmaker

from ldpsync.config.storage import get_storage_config

from .tables import index_documents_table, metadata

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the search index is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "Search index not initialised. Call ldpsync.adapters.sqlalchemy."
                "search_index.startup() before creating an index."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the engine, create the index table, and prepare sessions."""

    if _STATE.engine is not None and not force:
        raise StartupError("Search index already initialised. Pass force=True to reconfigure.")
    if _STATE.engine is not None:
        _STATE.engine.dispose()

    resolved_engine = engine or create_engine(
        database_uri or get_storage_config().index_uri(), future=True
    )
    metadata.create_all(resolved_engine, checkfirst=True)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemySearchIndex:
    """One row per resource id holding the flat document produced on save."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory or _STATE.session_factory

    def index(self, resource_id: str, document: Mapping[str, object]) -> None:
        values = {
            "model": _model_of(document),
            "document": dict(document),
            "updated_at": datetime.now(UTC),
        }
        with self._session_factory.begin() as session:
            result = session.execute(
                update(index_documents_table)
                .where(index_documents_table.c.id == resource_id)
                .values(**values)
            )
            if result.rowcount == 0:
                session.execute(insert(index_documents_table).values(id=resource_id, **values))
        log.debug("Indexed %s", resource_id)

    def delete_from_index(self, resource_id: str) -> None:
        with self._session_factory.begin() as session:
            session.execute(
                delete(index_documents_table).where(index_documents_table.c.id == resource_id)
            )
        log.debug("Removed %s from index", resource_id)

    def get(self, resource_id: str) -> dict[str, object] | None:
        with self._session_factory() as session:
            document = session.execute(
                select(index_documents_table.c.document).where(
                    index_documents_table.c.id == resource_id
                )
            ).scalar_one_or_none()
        return cast("dict[str, object] | None", document)

    def ids(self, *, model: str | None = None) -> list[str]:
        statement = select(index_documents_table.c.id).order_by(index_documents_table.c.id)
        if model is not None:
            statement = statement.where(index_documents_table.c.model == model)
        with self._session_factory() as session:
            return list(session.execute(statement).scalars())


def _model_of(document: Mapping[str, object]) -> str | None:
    model = document.get("model")
    return model if isinstance(model, str) else None


if TYPE_CHECKING:
    from ldpsync.domain.ports import SearchIndex

    _index_check: SearchIndex = SqlAlchemySearchIndex()
