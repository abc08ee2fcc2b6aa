"""SQLAlchemy adapter for the search index."""

from __future__ import annotations

from .search_index import (
    SqlAlchemySearchIndex,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from .tables import index_documents_table, metadata

__all__ = [
    "SqlAlchemySearchIndex",
    "StartupError",
    "configured_engine",
    "index_documents_table",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
]
