from __future__ import annotations

import asyncio

import httpx
import pytest

from ldpsync.adapters.http_resilience import ResilientClient, build_retry
from ldpsync.config import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy


def test_retry_policy_skips_non_idempotent_methods() -> None:
    retry = build_retry(RetryPolicy())

    assert retry.is_retryable_method("PUT")
    assert retry.is_retryable_method("DELETE")
    assert not retry.is_retryable_method("POST")
    assert not retry.is_retryable_method("PATCH")


def test_client_sends_every_verb_through_limiter() -> None:
    seen: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.method)
        return httpx.Response(200)

    async def run() -> None:
        config = ResilienceConfig(name="test", ratelimit=RateLimit(max_calls=100, per_seconds=1.0))
        async with ResilientClient(config) as client:
            client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            await client.head("http://repo.test/a")
            await client.get("http://repo.test/a")
            await client.put("http://repo.test/a")
            await client.patch("http://repo.test/a")
            await client.post("http://repo.test/a")
            await client.delete("http://repo.test/a")

    asyncio.run(run())

    assert seen == ["HEAD", "GET", "PUT", "PATCH", "POST", "DELETE"]


def test_basic_auth_is_configured() -> None:
    async def run() -> httpx.Auth | None:
        client = ResilientClient(ResilienceConfig(name="test", auth=("user", "pw")))
        try:
            return client._client.auth  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        finally:
            await client.aclose()

    assert isinstance(asyncio.run(run()), httpx.BasicAuth)


def test_unknown_cache_backend_is_rejected() -> None:
    config = ResilienceConfig(
        name="test",
        cache=CacheConfig(enabled=True, backend="redis"),  # type: ignore[arg-type]
    )

    with pytest.raises(ValueError, match="Unsupported cache backend"):
        ResilientClient(config)
