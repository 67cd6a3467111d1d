"""HTTP server configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int, optional_env_var
from .errors import ConfigurationError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


@dataclass(frozen=True, slots=True)
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


def get_server_config() -> ServerConfig:
    port = env_int("FLOWTRACK_PORT", DEFAULT_PORT)
    if not 0 < port < 65536:
        raise ConfigurationError(f"FLOWTRACK_PORT out of range: {port}")
    return ServerConfig(host=optional_env_var("FLOWTRACK_HOST") or DEFAULT_HOST, port=port)
