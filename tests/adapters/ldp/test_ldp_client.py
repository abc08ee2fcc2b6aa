from __future__ import annotations

import json
from collections.abc import Callable  # noqa: TC003
from datetime import UTC, datetime

import httpx
import pytest

from ldpsync.adapters.http_resilience import ResilientClient
from ldpsync.adapters.ldp import LdpClient, LdpProtocolError
from ldpsync.config import RepositoryConfig, ResilienceConfig
from ldpsync.domain.change_set import ChangeSet
from ldpsync.domain.errors import GoneError, ObjectNotFoundError
from ldpsync.domain.handle import Existence
from ldpsync.domain.ports import RemoteDocument

BASE_URL = "http://repo.test/rest"
URI = f"{BASE_URL}/b1"


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(async_handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    return factory


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> LdpClient:
    return LdpClient(
        config=RepositoryConfig(base_url=BASE_URL),
        client_factory=_make_client_factory(handler),
    )


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (200, Existence.PRESENT),
        (410, Existence.GONE),
        (404, Existence.ABSENT),
    ],
)
def test_probe_maps_status_codes(status: int, expected: Existence) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.method)
        return httpx.Response(status)

    assert _client(handler).probe(URI) is expected
    assert seen == ["HEAD"]


def test_probe_propagates_server_errors() -> None:
    client = _client(lambda _request: httpx.Response(500))

    with pytest.raises(httpx.HTTPStatusError):
        client.probe(URI)


def test_get_parses_document_and_etag() -> None:
    payload = {
        "@id": URI,
        "@type": "Book",
        "attributes": {
            "title": ["Moby Dick"],
            "created": [{"@value": "2024-01-02T00:00:00+00:00", "@type": "xsd:dateTime"}],
            "empty": [],
        },
        "contains": [f"{URI}/thumbnail", "descMetadata"],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Accept"] == "application/ld+json"
        return httpx.Response(200, json=payload, headers={"ETag": 'W/"7"'})

    document = _client(handler).get(URI)

    assert document.uri == URI
    assert document.model == "Book"
    assert document.version == 'W/"7"'
    assert document.attributes == {
        "title": ("Moby Dick",),
        "created": (datetime(2024, 1, 2, tzinfo=UTC),),
    }
    assert document.contains == ("thumbnail", "descMetadata")


@pytest.mark.parametrize(
    ("status", "error"),
    [(404, ObjectNotFoundError), (410, GoneError)],
)
def test_get_translates_missing_and_gone(status: int, error: type[Exception]) -> None:
    client = _client(lambda _request: httpx.Response(status))

    with pytest.raises(error):
        client.get(URI)


def test_get_rejects_non_object_payload() -> None:
    client = _client(lambda _request: httpx.Response(200, json=["not", "a", "document"]))

    with pytest.raises(LdpProtocolError):
        client.get(URI)


def test_get_reports_malformed_document_as_protocol_error() -> None:
    client = _client(lambda _request: httpx.Response(200, json={"attributes": "nope"}))

    with pytest.raises(LdpProtocolError, match="Malformed document"):
        client.get(URI)


def test_put_sends_document() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["content_type"] = request.headers["Content-Type"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(201, headers={"ETag": '"1"'})

    version = _client(handler).put(
        RemoteDocument(uri=URI, attributes={"title": ("T",)}, model="Book")
    )

    assert version == '"1"'
    assert captured["method"] == "PUT"
    assert captured["content_type"] == "application/ld+json"
    assert captured["body"] == {
        "@id": URI,
        "@type": "Book",
        "attributes": {"title": ["T"]},
        "contains": [],
    }


def test_put_content_sends_binary_with_name() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["content"] = request.content
        captured["content_type"] = request.headers["Content-Type"]
        captured["disposition"] = request.headers["Content-Disposition"]
        return httpx.Response(204)

    version = _client(handler).put_content(
        f"{URI}/thumbnail", b"\x89PNG", mime_type="image/png", original_name="cover.png"
    )

    assert version is None
    assert captured == {
        "content": b"\x89PNG",
        "content_type": "image/png",
        "disposition": 'attachment; filename="cover.png"',
    }


def test_get_content_returns_bytes_and_type() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, content=b"%PDF", headers={"Content-Type": "application/pdf", "ETag": '"3"'}
        )

    remote = _client(handler).get_content(f"{URI}/scan")

    assert remote.content == b"%PDF"
    assert remote.mime_type == "application/pdf"
    assert remote.version == '"3"'


def test_post_resolves_relative_location() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        return httpx.Response(201, headers={"Location": "/rest/minted/"})

    uri = _client(handler).post(BASE_URL, RemoteDocument(uri=""))

    assert uri == "http://repo.test/rest/minted"


def test_post_without_location_is_a_protocol_error() -> None:
    client = _client(lambda _request: httpx.Response(201))

    with pytest.raises(LdpProtocolError):
        client.post(BASE_URL, RemoteDocument(uri=""))


def test_post_body_omits_missing_id() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content)
        return httpx.Response(201, headers={"Location": f"{BASE_URL}/x"})

    _client(handler).post(BASE_URL, RemoteDocument(uri="", attributes={"title": ("T",)}))

    assert "@id" not in captured["body"]  # type: ignore[operator]


def test_patch_sends_change_set_and_if_match() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["if_match"] = request.headers.get("If-Match")
        captured["body"] = json.loads(request.content)
        return httpx.Response(204, headers={"ETag": '"2"'})

    change_set = ChangeSet()
    change_set.insert("title", "B")
    change_set.delete("title", "A")

    version = _client(handler).patch(URI, change_set, if_match='"1"')

    assert version == '"2"'
    assert captured == {
        "method": "PATCH",
        "if_match": '"1"',
        "body": {"insert": {"title": ["B"]}, "delete": {"title": ["A"]}},
    }


def test_patch_without_version_token_sends_no_if_match() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["if_match"] = request.headers.get("If-Match")
        return httpx.Response(204)

    _client(handler).patch(URI, ChangeSet())

    assert captured["if_match"] is None


def test_delete_maps_status_codes() -> None:
    statuses = iter([204, 404, 410])
    client = _client(lambda _request: httpx.Response(next(statuses)))

    client.delete(URI)
    with pytest.raises(ObjectNotFoundError):
        client.delete(URI)
    with pytest.raises(GoneError):
        client.delete(URI)
