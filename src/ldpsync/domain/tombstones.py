"""Tombstones: server-kept markers proving a resource existed and was deleted."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from ldpsync.domain.handle import Existence, join_uri

if TYPE_CHECKING:
    from ldpsync.domain.ports import RepositoryConnection

log = getLogger(__name__)

DEFAULT_TOMBSTONE_SEGMENT = "fcr:tombstone"


class TombstoneManager:
    """Tell "never existed" apart from "deleted" and purge tombstones on request."""

    def __init__(
        self,
        connection: RepositoryConnection,
        *,
        segment: str = DEFAULT_TOMBSTONE_SEGMENT,
    ) -> None:
        self._connection = connection
        self._segment = segment

    def tombstone_uri(self, uri: str) -> str:
        return join_uri(uri, self._segment)

    def exists(self, uri: str) -> Existence:
        return self._connection.probe(uri)

    def is_gone(self, uri: str) -> bool:
        return self.exists(uri) is Existence.GONE

    def eradicate(self, uri: str) -> bool:
        """Remove the tombstone at ``uri`` so the URI can be used again.

        This steps outside the protocol, which otherwise forbids reusing a
        deleted URI. Returns ``False`` without deleting anything when there is no
        tombstone to remove.
        """

        state = self.exists(uri)
        if state is not Existence.GONE:
            log.debug("No tombstone to eradicate at %s (state=%s)", uri, state)
            return False
        self._connection.delete(self.tombstone_uri(uri))
        log.warning("Eradicated tombstone for %s; the URI may be reused", uri)
        return True
