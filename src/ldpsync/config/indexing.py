"""Secondary index synchronisation settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env, optional_env_bool
from .storage import StorageConfig, get_storage_config


@dataclass(frozen=True, slots=True)
class IndexConfig:
    """``enabled`` gates every index call made by the persistence coordinator."""

    enabled: bool = True
    database_uri: str | None = None


def get_index_config(*, storage: StorageConfig | None = None) -> IndexConfig:
    enabled = optional_env_bool("LDP_INDEX_ENABLED", default=True)
    database_uri = optional_env("LDP_INDEX_DATABASE_URI")
    if database_uri is None and enabled:
        database_uri = (storage or get_storage_config()).index_uri()
    return IndexConfig(enabled=enabled, database_uri=database_uri)
