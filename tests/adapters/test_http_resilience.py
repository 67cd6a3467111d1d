from __future__ import annotations

import asyncio
from typing import cast

import httpx
from hishel import Response as HishelCacheResponse
from hishel.httpx import AsyncCacheClient

from flowtrack.adapters.http_resilience import (
    RETRY_STATUSES,
    ResilientClient,
    _ShouldCacheResponseFilter,  # type: ignore[reportPrivateUsage]
    build_retry,
)
from flowtrack.config import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

BASE_URL = "https://holidays.test/api/feriados/v1"


def test_build_retry_only_retries_idempotent_gets_on_transient_statuses() -> None:
    retry = build_retry(RetryPolicy(total=2, backoff_factor=0.1))

    assert retry.total == 2
    assert retry.backoff_factor == 0.1
    assert retry.is_retryable_method("GET")
    assert not retry.is_retryable_method("POST")
    assert all(retry.is_retryable_status_code(status) for status in RETRY_STATUSES)
    assert not retry.is_retryable_status_code(404)


def test_client_without_cache_is_a_plain_async_client() -> None:
    client = ResilientClient(
        ResilienceConfig(
            base_url=BASE_URL,
            timeout_seconds=3.0,
            default_headers={"Accept": "application/json"},
        )
    )
    inner = client._client  # noqa: SLF001  # type: ignore[reportPrivateUsage]

    try:
        assert type(inner) is httpx.AsyncClient
        assert inner.headers["Accept"] == "application/json"
        assert inner.timeout.read == 3.0
        assert client._limiter is None  # noqa: SLF001  # type: ignore[reportPrivateUsage]
    finally:
        asyncio.run(client.aclose())


def test_client_with_memory_cache_and_rate_limit() -> None:
    client = ResilientClient(
        ResilienceConfig(
            base_url=BASE_URL,
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            cache=CacheConfig(backend="memory"),
        )
    )
    limiter = client._limiter  # noqa: SLF001  # type: ignore[reportPrivateUsage]

    try:
        assert isinstance(client._client, AsyncCacheClient)  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        assert limiter is not None
        assert (limiter.max_rate, limiter.time_period) == (5, 1.0)
    finally:
        asyncio.run(client.aclose())


def test_get_goes_through_the_rate_limiter() -> None:
    requested: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, json=[])

    async def fetch_twice() -> list[int]:
        async with ResilientClient(
            ResilienceConfig(base_url=BASE_URL, ratelimit=RateLimit(max_calls=2, per_seconds=1.0))
        ) as client:
            client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            first = await client.get(f"{BASE_URL}/2025")
            second = await client.get(f"{BASE_URL}/2026")
        return [first.status_code, second.status_code]

    assert asyncio.run(fetch_twice()) == [200, 200]
    assert requested == [f"{BASE_URL}/2025", f"{BASE_URL}/2026"]


def test_cache_filter_keeps_only_bodies_the_predicate_accepts() -> None:
    cache_filter = _ShouldCacheResponseFilter(
        lambda payload: isinstance(payload, list) and bool(payload)
    )
    response = cast("HishelCacheResponse", None)

    assert cache_filter.needs_body()
    assert cache_filter.apply(response, b'[{"date": "2025-01-01"}]')
    assert not cache_filter.apply(response, b"[]")
    assert not cache_filter.apply(response, b'{"message": "error"}')
    assert not cache_filter.apply(response, b"<html>")
    assert not cache_filter.apply(response, b"\xff\xfe")
    assert cache_filter.apply(response, None)
