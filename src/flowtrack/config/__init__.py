"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, optional_env_var
from .errors import ConfigurationError
from .holidays import HolidayConfig, get_holiday_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .server import ServerConfig, get_server_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "HolidayConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ServerConfig",
    "StorageConfig",
    "configure_logging",
    "env_float",
    "env_int",
    "get_database_config",
    "get_holiday_config",
    "get_server_config",
    "get_storage_config",
    "optional_env_var",
]
