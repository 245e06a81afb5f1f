"""HTTP client for the paged tag-catalog API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from json import JSONDecodeError
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from tagrecon.adapters.http_resilience import ResilientClient
from tagrecon.domain.errors import TransportError

if TYPE_CHECKING:
    from collections.abc import Callable

    from tagrecon.config.catalog import CatalogApiConfig
    from tagrecon.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


def should_cache_page(payload: object) -> bool:
    """Only keep well-formed pages in the HTTP cache."""

    return isinstance(payload, list)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(with_page_cache_filter(config))


def with_page_cache_filter(config: ResilienceConfig) -> ResilienceConfig:
    """Restrict a configured cache to list pages unless it already has a predicate."""

    if config.cache is None or config.cache.should_cache is not None:
        return config
    return replace(config, cache=replace(config.cache, should_cache=should_cache_page))


def _bool_param(value: bool) -> str:  # noqa: FBT001
    return "true" if value else "false"


@dataclass(slots=True)
class CatalogClient:
    """Retrieve the whole tag catalog by walking its pages in order.

    Pages are requested one at a time starting at page 1. The walk stops on a
    non-list or empty page (not appended) or on a page shorter than the page
    size (appended). Any transport failure raises ``TransportError`` and no
    partial result is returned.
    """

    config: CatalogApiConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    max_pages: int | None = None

    def fetch_all(
        self,
        *,
        base_url: str | None = None,
        page_size: int | None = None,
    ) -> list[object]:
        return asyncio.run(self.fetch_all_async(base_url=base_url, page_size=page_size))

    async def fetch_all_async(
        self,
        *,
        base_url: str | None = None,
        page_size: int | None = None,
    ) -> list[object]:
        url = base_url or self.config.base_url
        size = page_size if page_size is not None else self.config.page_size
        if size <= 0:
            raise ValueError(f"page_size must be positive, got {size}")

        items: list[object] = []
        page = 1
        async with self.client_factory(self.config.resilience) as client:
            while True:
                log.debug("Fetching catalog page %s", page)
                payload = await self._request_page(
                    client=client, url=url, page=page, page_size=size
                )

                if not isinstance(payload, list) or not payload:
                    log.debug("Catalog page %s is empty, stopping", page)
                    break

                items.extend(payload)
                if len(payload) < size:
                    log.debug("Catalog page %s is the last partial page", page)
                    break

                if self.max_pages is not None and page >= self.max_pages:
                    log.warning("Stopping catalog fetch after max_pages=%s", self.max_pages)
                    break
                page += 1

        log.info("Fetched %d catalog items in %d pages", len(items), page)
        return items

    async def _request_page(
        self,
        *,
        client: ResilientClient,
        url: str,
        page: int,
        page_size: int,
    ) -> object:
        params = httpx.QueryParams(
            {
                "entityId": self.config.entity_id,
                "sortDesc": _bool_param(self.config.sort_desc),
                "page": page,
                "pageSize": page_size,
                "addCounter": _bool_param(self.config.add_counter),
            }
        )
        try:
            response = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(f"Request for page {page} failed: {exc}", page=page) from exc

        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code} on page {page}",
                page=page,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except (JSONDecodeError, UnicodeDecodeError) as exc:
            raise TransportError(
                f"Malformed body on page {page}",
                page=page,
                status_code=response.status_code,
            ) from exc
