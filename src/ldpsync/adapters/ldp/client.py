"""HTTP client for a Linked-Data-Platform-style repository."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from ldpsync.adapters.http_resilience import ResilientClient
from ldpsync.domain.errors import GoneError, LdpSyncError, ObjectNotFoundError
from ldpsync.domain.handle import Existence
from ldpsync.domain.ports import RemoteContent

from .schema import CHANGE_SET_MEDIA_TYPE, DOCUMENT_MEDIA_TYPE
from .translator import parse_remote_document, to_change_set_document, to_resource_document

if TYPE_CHECKING:
    from collections.abc import Callable

    from ldpsync.config.http_resilience import ResilienceConfig
    from ldpsync.config.repository import RepositoryConfig
    from ldpsync.domain.change_set import ChangeSet
    from ldpsync.domain.ports import RemoteDocument

log = getLogger(__name__)


class LdpProtocolError(LdpSyncError):
    """Raised when the repository answers in a way the protocol does not allow."""


class LdpClient:
    """Blocking repository connection; each call runs its own event loop."""

    def __init__(
        self,
        *,
        config: RepositoryConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def probe(self, uri: str) -> Existence:
        return asyncio.run(self._probe_async(uri))

    def get(self, uri: str) -> RemoteDocument:
        return asyncio.run(self._get_async(uri))

    def get_content(self, uri: str) -> RemoteContent:
        return asyncio.run(self._get_content_async(uri))

    def put(self, document: RemoteDocument) -> str | None:
        return asyncio.run(self._put_async(document))

    def put_content(
        self,
        uri: str,
        content: bytes,
        *,
        mime_type: str,
        original_name: str | None = None,
    ) -> str | None:
        return asyncio.run(
            self._put_content_async(
                uri,
                content,
                mime_type=mime_type,
                original_name=original_name,
            )
        )

    def post(self, container_uri: str, document: RemoteDocument) -> str:
        return asyncio.run(self._post_async(container_uri, document))

    def patch(
        self,
        uri: str,
        change_set: ChangeSet,
        *,
        if_match: str | None = None,
    ) -> str | None:
        return asyncio.run(self._patch_async(uri, change_set, if_match=if_match))

    def delete(self, uri: str) -> None:
        asyncio.run(self._delete_async(uri))

    async def _probe_async(self, uri: str) -> Existence:
        async with self._client_factory(self._resilience) as client:
            response = await client.head(uri)
        if response.status_code == httpx.codes.GONE:
            return Existence.GONE
        if response.status_code == httpx.codes.NOT_FOUND:
            return Existence.ABSENT
        response.raise_for_status()
        return Existence.PRESENT

    async def _get_async(self, uri: str) -> RemoteDocument:
        async with self._client_factory(self._resilience) as client:
            response = await client.get(uri, headers={"Accept": DOCUMENT_MEDIA_TYPE})
        _raise_for_status(response, uri)

        payload = response.json()
        if not isinstance(payload, dict):
            raise LdpProtocolError(f"Unexpected document payload for {uri}")
        try:
            return parse_remote_document(payload, uri=uri, version=_version_of(response))
        except ValidationError as exc:
            raise LdpProtocolError(f"Malformed document for {uri}") from exc

    async def _get_content_async(self, uri: str) -> RemoteContent:
        async with self._client_factory(self._resilience) as client:
            response = await client.get(uri)
        _raise_for_status(response, uri)
        return RemoteContent(
            uri=uri,
            content=response.content,
            mime_type=response.headers.get("Content-Type"),
            version=_version_of(response),
        )

    async def _put_async(self, document: RemoteDocument) -> str | None:
        body = to_resource_document(document).model_dump_json(by_alias=True, exclude_none=True)
        async with self._client_factory(self._resilience) as client:
            response = await client.put(
                document.uri,
                content=body,
                headers={"Content-Type": DOCUMENT_MEDIA_TYPE},
            )
        _raise_for_status(response, document.uri)
        return _version_of(response)

    async def _put_content_async(
        self,
        uri: str,
        content: bytes,
        *,
        mime_type: str,
        original_name: str | None,
    ) -> str | None:
        headers = {"Content-Type": mime_type}
        if original_name:
            headers["Content-Disposition"] = f'attachment; filename="{original_name}"'
        async with self._client_factory(self._resilience) as client:
            response = await client.put(uri, content=content, headers=headers)
        _raise_for_status(response, uri)
        return _version_of(response)

    async def _post_async(self, container_uri: str, document: RemoteDocument) -> str:
        body = to_resource_document(document).model_dump_json(by_alias=True, exclude_none=True)
        async with self._client_factory(self._resilience) as client:
            response = await client.post(
                container_uri,
                content=body,
                headers={"Content-Type": DOCUMENT_MEDIA_TYPE},
            )
        _raise_for_status(response, container_uri)

        location = response.headers.get("Location")
        if not location:
            raise LdpProtocolError(
                f"Repository created a resource in {container_uri} without a Location"
            )
        return str(response.url.join(location)).rstrip("/")

    async def _patch_async(
        self,
        uri: str,
        change_set: ChangeSet,
        *,
        if_match: str | None,
    ) -> str | None:
        headers = {"Content-Type": CHANGE_SET_MEDIA_TYPE}
        if if_match is not None:
            headers["If-Match"] = if_match
        body = to_change_set_document(change_set).model_dump_json()
        async with self._client_factory(self._resilience) as client:
            response = await client.patch(uri, content=body, headers=headers)
        _raise_for_status(response, uri)
        return _version_of(response)

    async def _delete_async(self, uri: str) -> None:
        async with self._client_factory(self._resilience) as client:
            response = await client.delete(uri)
        _raise_for_status(response, uri)
        log.debug("DELETE %s -> %s", uri, response.status_code)


def _raise_for_status(response: httpx.Response, uri: str) -> None:
    if response.status_code == httpx.codes.NOT_FOUND:
        raise ObjectNotFoundError(f"{uri} does not exist in the repository", uri=uri)
    if response.status_code == httpx.codes.GONE:
        raise GoneError(f"{uri} has been deleted", uri=uri)
    response.raise_for_status()


def _version_of(response: httpx.Response) -> str | None:
    return response.headers.get("ETag")

