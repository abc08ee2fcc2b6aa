"""Translate between repository JSON documents and domain port types."""

from __future__ import annotations

import base64
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import UUID

from ldpsync.domain.ports import RemoteDocument

from .schema import ChangeSetDocument, ResourceDocument, TypedLiteral

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ldpsync.domain.attributes import Values
    from ldpsync.domain.change_set import AttributeValue, ChangeSet

log = getLogger(__name__)

XSD_DATETIME = "xsd:dateTime"
XSD_DATE = "xsd:date"
XSD_DECIMAL = "xsd:decimal"
XSD_BASE64 = "xsd:base64Binary"
UUID_TYPE = "urn:uuid"


def encode_value(value: AttributeValue) -> object:
    match value:
        case bool() | int() | float() | str() | None:
            return value
        case datetime():
            return _literal(value.isoformat(), XSD_DATETIME)
        case date():
            return _literal(value.isoformat(), XSD_DATE)
        case Decimal():
            return _literal(str(value), XSD_DECIMAL)
        case UUID():
            return _literal(str(value), UUID_TYPE)
        case bytes():
            return _literal(base64.b64encode(value).decode("ascii"), XSD_BASE64)
        case Mapping():
            return {str(k): encode_value(v) for k, v in value.items()}
        case list() | tuple():
            return [encode_value(item) for item in value]
        case _:
            return str(value)


def decode_value(raw: object) -> AttributeValue:
    if isinstance(raw, list):
        return [decode_value(item) for item in raw]
    if not isinstance(raw, Mapping):
        return raw
    if "@value" in raw and "@type" in raw:
        literal = TypedLiteral.model_validate(raw)
        return _decode_literal(literal)
    return {str(k): decode_value(v) for k, v in raw.items()}


def _literal(value: str, type_: str) -> dict[str, str]:
    return TypedLiteral(value=value, type=type_).model_dump(by_alias=True)


def _decode_literal(literal: TypedLiteral) -> AttributeValue:
    try:
        match literal.type:
            case "xsd:dateTime":
                return datetime.fromisoformat(literal.value)
            case "xsd:date":
                return date.fromisoformat(literal.value)
            case "xsd:decimal":
                return Decimal(literal.value)
            case "xsd:base64Binary":
                return base64.b64decode(literal.value)
            case "urn:uuid":
                return UUID(literal.value)
            case _:
                return literal.value
    except (ValueError, InvalidOperation):
        log.warning("Keeping malformed %s literal as text: %r", literal.type, literal.value)
        return literal.value


def _encode_attributes(
    attributes: Mapping[str, Iterable[AttributeValue]],
) -> dict[str, list[object]]:
    return {key: [encode_value(v) for v in values] for key, values in attributes.items()}


def to_resource_document(document: RemoteDocument) -> ResourceDocument:
    return ResourceDocument(
        id=document.uri or None,
        model=document.model,
        attributes=_encode_attributes(document.attributes),
        contains=list(document.contains),
    )


def to_change_set_document(change_set: ChangeSet) -> ChangeSetDocument:
    return ChangeSetDocument(
        insert=_encode_attributes(change_set.insertions),
        delete=_encode_attributes(change_set.deletions),
    )


def parse_remote_document(
    payload: Mapping[str, object],
    *,
    uri: str,
    version: str | None,
) -> RemoteDocument:
    """Validate a fetched document; ``contains`` entries become slugs below ``uri``."""

    document = ResourceDocument.model_validate(payload)
    resolved_uri = (document.id or uri).rstrip("/")
    attributes: dict[str, Values] = {
        key: tuple(decode_value(v) for v in values)
        for key, values in document.attributes.items()
        if values
    }
    return RemoteDocument(
        uri=resolved_uri,
        attributes=attributes,
        contains=tuple(_child_slug(resolved_uri, entry) for entry in document.contains),
        model=document.model,
        version=version,
    )


def _child_slug(parent_uri: str, entry: str) -> str:
    prefix = parent_uri + "/"
    if entry.startswith(prefix):
        return entry[len(prefix) :].strip("/")
    return entry.strip("/")
