"""Domain error taxonomy for repository persistence."""

from __future__ import annotations


class LdpSyncError(RuntimeError):
    """Base class for persistence errors raised by ldpsync."""


class ObjectNotFoundError(LdpSyncError):
    """Remote resource is absent where it was expected to exist."""

    def __init__(self, message: str, *, uri: str | None = None) -> None:
        super().__init__(message)
        self.uri = uri


class GoneError(LdpSyncError):
    """Remote resource was deleted and the server kept a tombstone for it."""

    def __init__(self, message: str, *, uri: str | None = None) -> None:
        super().__init__(message)
        self.uri = uri


class ReadOnlyError(LdpSyncError):
    """Mutation attempted on a resource marked read-only."""


class FrozenResourceError(ReadOnlyError):
    """Mutation attempted on a destroyed resource."""


class IdentityError(LdpSyncError):
    """An identity was required but has not been assigned yet."""


class UnknownChildError(LdpSyncError):
    """No contained resource is declared or attached under the requested slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"No contained resource declared or attached as {slug!r}")
        self.slug = slug


class DeclarationError(ValueError):
    """A resource type declaration is missing a required parameter."""
