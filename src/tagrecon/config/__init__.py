"""Application configuration helpers."""

from __future__ import annotations

from .catalog import DEFAULT_PAGE_SIZE, CatalogApiConfig, get_catalog_config
from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .sources import SourceFilesConfig, get_source_files_config
from .storage import StorageConfig, get_storage_config

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "CacheConfig",
    "CatalogApiConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SourceFilesConfig",
    "StorageConfig",
    "configure_logging",
    "get_catalog_config",
    "get_source_files_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
