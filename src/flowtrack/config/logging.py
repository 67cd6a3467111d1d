"""Shared logging helpers."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import ConfigurationError


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: the level
    defaults to ``LOG_LEVEL`` from the environment (INFO when unset) and the format
    is terse enough for CLI output. Pass ``force=True`` to reconfigure during tests
    or specialised entry points.
    """

    logging.basicConfig(
        level=level if level is not None else _level_from_env(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )


def _level_from_env() -> int:
    raw = optional_env_var("LOG_LEVEL")
    if raw is None:
        return logging.INFO
    level = logging.getLevelNamesMapping().get(raw.upper())
    if level is None:
        raise ConfigurationError(f"Unknown LOG_LEVEL: {raw}")
    return level
