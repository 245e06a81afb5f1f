"""Public interface for the paged tag-catalog adapter."""

from __future__ import annotations

from .client import CatalogClient, should_cache_page, with_page_cache_filter

__all__ = ["CatalogClient", "should_cache_page", "with_page_cache_filter"]
