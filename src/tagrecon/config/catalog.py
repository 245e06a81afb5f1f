"""Paged tag-catalog API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, parse_positive_int, require_env_vars
from .errors import ConfigurationError
from .http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    ShouldCacheHook,
)
from .storage import get_storage_config

DEFAULT_PAGE_SIZE = 1000
CATALOG_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class CatalogApiConfig:
    """Holds the paged catalog endpoint and its query defaults."""

    base_url: str
    entity_id: int
    resilience: ResilienceConfig
    page_size: int = DEFAULT_PAGE_SIZE
    sort_desc: bool = False
    add_counter: bool = False


def _cache_from_environment(predicate: ShouldCacheHook | None) -> CacheConfig | None:
    backend = optional_env_var("TAGRECON_HTTP_CACHE")
    if backend is None or backend == "off":
        return None
    if backend == "memory":
        return CacheConfig(backend="memory", should_cache=predicate)
    if backend == "sqlite":
        cache_path = get_storage_config().http_cache_path()
        return CacheConfig(backend="sqlite", sqlite_path=str(cache_path), should_cache=predicate)
    raise ConfigurationError(f"Unsupported TAGRECON_HTTP_CACHE value: {backend}")


def get_catalog_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> CatalogApiConfig:
    values = require_env_vars(("TAGRECON_CATALOG_URL", "TAGRECON_ENTITY_ID"))
    entity_id = parse_positive_int("TAGRECON_ENTITY_ID", values["TAGRECON_ENTITY_ID"])

    page_size_raw = optional_env_var("TAGRECON_PAGE_SIZE")
    page_size = (
        parse_positive_int("TAGRECON_PAGE_SIZE", page_size_raw)
        if page_size_raw is not None
        else DEFAULT_PAGE_SIZE
    )
    retries_raw = optional_env_var("TAGRECON_HTTP_RETRIES")
    retries = (
        parse_positive_int("TAGRECON_HTTP_RETRIES", retries_raw, allow_zero=True)
        if retries_raw is not None
        else 0
    )

    return CatalogApiConfig(
        base_url=values["TAGRECON_CATALOG_URL"],
        entity_id=entity_id,
        page_size=page_size,
        resilience=resilience
        or ResilienceConfig(
            name="catalog",
            timeout_seconds=CATALOG_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=retries),
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            cache=_cache_from_environment(cache_predicate),
            default_headers={"accept": "*/*"},
        ),
    )
