"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, optional_seconds, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .facets import FacetConfig, get_facet_config, load_facet_file, parse_facet_document
from .logging import configure_logging, parse_log_level
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .store import RemoteStoreConfig, StoreBackend, get_remote_store_config, get_store_backend
from .sync import SaveConfig, get_save_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "FacetConfig",
    "MissingConfigurationError",
    "RemoteStoreConfig",
    "SaveConfig",
    "StorageConfig",
    "StoreBackend",
    "configure_logging",
    "get_database_config",
    "get_facet_config",
    "get_remote_store_config",
    "get_save_config",
    "get_storage_config",
    "get_store_backend",
    "load_facet_file",
    "optional_env_var",
    "optional_seconds",
    "parse_facet_document",
    "parse_log_level",
    "require_env_vars",
]
