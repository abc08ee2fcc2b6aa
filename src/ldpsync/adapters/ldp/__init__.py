"""Public interface for the repository HTTP adapter."""

from __future__ import annotations

from .client import LdpClient, LdpProtocolError
from .schema import ChangeSetDocument, ResourceDocument, TypedLiteral
from .translator import (
    decode_value,
    encode_value,
    parse_remote_document,
    to_change_set_document,
    to_resource_document,
)

__all__ = [
    "ChangeSetDocument",
    "LdpClient",
    "LdpProtocolError",
    "ResourceDocument",
    "TypedLiteral",
    "decode_value",
    "encode_value",
    "parse_remote_document",
    "to_change_set_document",
    "to_resource_document",
]
