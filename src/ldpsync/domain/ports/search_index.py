"""Port for the secondary search index."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping


@runtime_checkable
class SearchIndex(Protocol):
    """Best-effort index kept next to the repository; never part of its transaction."""

    def index(self, resource_id: str, document: Mapping[str, object]) -> None: ...

    def delete_from_index(self, resource_id: str) -> None: ...
