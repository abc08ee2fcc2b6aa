"""Pydantic models describing the JSON documents exchanged with the repository."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DOCUMENT_MEDIA_TYPE = "application/ld+json"
CHANGE_SET_MEDIA_TYPE = "application/vnd.ldpsync.changeset+json"


class LdpBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TypedLiteral(LdpBaseModel):
    """Value plain JSON cannot carry: ``{"@value": "2024-01-31", "@type": "xsd:date"}``."""

    value: str = Field(alias="@value")
    type: str = Field(alias="@type")


class ResourceDocument(LdpBaseModel):
    id: str | None = Field(default=None, alias="@id")
    model: str | None = Field(default=None, alias="@type")
    attributes: dict[str, list[Any]] = Field(default_factory=dict)
    contains: list[str] = Field(default_factory=list)


class ChangeSetDocument(LdpBaseModel):
    insert: dict[str, list[Any]] = Field(default_factory=dict)
    delete: dict[str, list[Any]] = Field(default_factory=dict)
