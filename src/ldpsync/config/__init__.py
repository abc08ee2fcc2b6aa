"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env, optional_env_bool, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .indexing import IndexConfig, get_index_config
from .logging import configure_logging
from .repository import DEFAULT_TOMBSTONE_SEGMENT, RepositoryConfig, get_repository_config
from .storage import StorageConfig, get_storage_config

__all__ = [
    "DEFAULT_TOMBSTONE_SEGMENT",
    "CacheConfig",
    "ConfigurationError",
    "IndexConfig",
    "MissingConfigurationError",
    "RateLimit",
    "RepositoryConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_index_config",
    "get_repository_config",
    "get_storage_config",
    "optional_env",
    "optional_env_bool",
    "require_env_var",
    "require_env_vars",
]
