"""Identity and remote-state wrapper for one addressable resource."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Existence(StrEnum):
    """Three-way outcome of an existence probe."""

    PRESENT = "present"
    GONE = "gone"
    ABSENT = "absent"


@dataclass(slots=True, kw_only=True)
class ResourceHandle:
    """Where a resource lives and what the coordinator last saw of it.

    ``exists`` flips to ``True`` only once the repository confirmed a create or a
    read. ``version`` is the opaque token (``ETag``) from the last response; it is
    carried, never interpreted.
    """

    uri: str | None = None
    exists: bool = False
    version: str | None = None

    @property
    def is_new(self) -> bool:
        return not self.exists

    def confirm(self, uri: str, *, version: str | None = None) -> None:
        self.uri = uri
        self.exists = True
        self.version = version

    def forget(self) -> None:
        """Drop the remote state but keep the address (used after delete)."""

        self.exists = False
        self.version = None

    def child(self, slug: str) -> str:
        if self.uri is None:
            raise ValueError("handle has no uri")
        return join_uri(self.uri, slug)


def join_uri(base: str, *segments: str) -> str:
    parts = [base.rstrip("/")]
    parts.extend(segment.strip("/") for segment in segments if segment.strip("/"))
    return "/".join(parts)


@dataclass(frozen=True, slots=True)
class IdentityMapper:
    """Translate between short resource ids and repository URIs.

    Ids are paths relative to ``base_url`` and, when set, ``root_path``.
    """

    base_url: str
    root_path: str | None = None

    @property
    def root_uri(self) -> str:
        if self.root_path:
            return join_uri(self.base_url, self.root_path)
        return self.base_url.rstrip("/")

    def id_to_uri(self, resource_id: str) -> str:
        if resource_id.startswith(("http://", "https://")):
            return resource_id.rstrip("/")
        return join_uri(self.root_uri, resource_id)

    def uri_to_id(self, uri: str) -> str:
        prefix = self.root_uri + "/"
        if not uri.startswith(prefix):
            raise ValueError(f"{uri!r} is not below {self.root_uri!r}")
        return uri[len(prefix) :].strip("/")
