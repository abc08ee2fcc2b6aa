"""Domain port definitions for adapters."""

from __future__ import annotations

from .repository import RemoteContent, RemoteDocument, RepositoryConnection
from .search_index import SearchIndex

__all__ = [
    "RemoteContent",
    "RemoteDocument",
    "RepositoryConnection",
    "SearchIndex",
]
