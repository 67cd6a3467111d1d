"""Holiday source configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, optional_env_var
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .storage import StorageConfig, get_storage_config

DEFAULT_HOLIDAYS_BASE_URL = "https://brasilapi.com.br/api/feriados/v1"
DEFAULT_RETRY_DELAY_SECONDS = 0.2


@dataclass(frozen=True, slots=True)
class HolidayConfig:
    resilience: ResilienceConfig
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS


def _is_non_empty_list(payload: object) -> bool:
    return isinstance(payload, list) and bool(payload)


def _cache_config(storage: StorageConfig) -> CacheConfig | None:
    mode = (optional_env_var("HOLIDAYS_HTTP_CACHE") or "sqlite").lower()
    if mode == "off":
        return None
    if mode == "memory":
        return CacheConfig(backend="memory", should_cache=_is_non_empty_list)
    if mode == "sqlite":
        return CacheConfig(
            backend="sqlite",
            sqlite_path=str(storage.http_cache_path()),
            should_cache=_is_non_empty_list,
        )
    raise ConfigurationError(f"Unsupported HOLIDAYS_HTTP_CACHE mode: {mode}")


def get_holiday_config(*, storage: StorageConfig | None = None) -> HolidayConfig:
    base_url = optional_env_var("HOLIDAYS_BASE_URL") or DEFAULT_HOLIDAYS_BASE_URL
    retry_delay = env_float("HOLIDAYS_RETRY_DELAY_SECONDS", DEFAULT_RETRY_DELAY_SECONDS)
    if retry_delay < 0:
        raise ConfigurationError("HOLIDAYS_RETRY_DELAY_SECONDS must be non-negative")

    # The directory performs its own single retry, so the transport does not.
    resilience = ResilienceConfig(
        base_url=base_url.rstrip("/"),
        retry=RetryPolicy(total=0),
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        cache=_cache_config(storage or get_storage_config()),
        default_headers={"Accept": "application/json"},
    )
    return HolidayConfig(resilience=resilience, retry_delay_seconds=retry_delay)
