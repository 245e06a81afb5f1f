"""Async HTTP client with retry, rate limiting and optional response caching.

Requests pass through a stack of transports: the hishel cache (when
configured), then httpx-retries, then the network. A cached page therefore
never consumes a retry or a rate-limit slot downstream of the cache.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, BaseFilter, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel.httpx import AsyncCacheTransport
from httpx_retries import Retry, RetryTransport

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._types import QueryParamTypes, URLTypes

    from tagrecon.config.http_resilience import (
        CacheConfig,
        ResilienceConfig,
        RetryPolicy,
        ShouldCacheHook,
    )


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


def build_transport(
    config: ResilienceConfig,
    network: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncBaseTransport:
    """Stack cache and retry layers over ``network`` (a real HTTP transport by default)."""

    transport: httpx.AsyncBaseTransport = RetryTransport(
        retry=build_retry(config.retry),
        transport=network or httpx.AsyncHTTPTransport(),
    )
    if config.cache is not None:
        transport = AsyncCacheTransport(
            next_transport=transport,
            storage=_build_cache_storage(config.cache),
            policy=FilterPolicy(response_filters=[_CacheablePageFilter(config.cache.should_cache)]),
        )
    return transport


class ResilientClient:
    """``httpx.AsyncClient`` configured from a ``ResilienceConfig``.

    ``transport`` replaces only the network layer, so retries and caching
    still apply to it.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )
        self._client = httpx.AsyncClient(
            base_url=config.base_url or "",
            timeout=config.timeout_seconds,
            headers=dict(config.default_headers) if config.default_headers else None,
            transport=build_transport(config, transport),
        )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: URLTypes, *, params: QueryParamTypes | None = None) -> httpx.Response:
        if self._limiter is None:
            return await self._client.get(url, params=params)
        async with self._limiter:
            return await self._client.get(url, params=params)


class _CacheablePageFilter(BaseFilter[HishelCacheResponse]):
    """Store only successful JSON responses accepted by ``predicate``."""

    def __init__(self, predicate: ShouldCacheHook | None) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:
        if not 200 <= item.status_code < 300 or body is None:
            return False
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        return self._predicate is None or bool(self._predicate(payload))


def _build_cache_storage(config: CacheConfig) -> AsyncSqliteStorage:
    database_path = config.sqlite_path if config.backend == "sqlite" else None
    return AsyncSqliteStorage(
        database_path=database_path or ":memory:",
        default_ttl=config.default_ttl_seconds,
    )
