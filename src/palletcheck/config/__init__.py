"""Application configuration helpers."""

from __future__ import annotations

from .check import CheckConfig, get_check_config
from .errors import ConfigurationError
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CheckConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "StorageConfig",
    "configure_logging",
    "get_check_config",
    "get_database_config",
    "get_storage_config",
]
