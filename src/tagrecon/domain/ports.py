"""Ports the application layer depends on instead of concrete adapters."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CatalogPageFetcher(Protocol):
    """Async port returning every raw item of the paged tag catalog."""

    async def fetch_all_async(
        self,
        *,
        base_url: str | None = None,
        page_size: int | None = None,
    ) -> list[object]: ...


__all__ = ["CatalogPageFetcher"]
