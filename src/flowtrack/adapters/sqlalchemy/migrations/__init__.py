"""Utilities for managing Alembic migrations within the SQLAlchemy adapter."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from flowtrack.config import get_database_config

PROJECT_ROOT: Final[Path] = Path(__file__).resolve().parents[5]
PYPROJECT_PATH: Final[Path] = PROJECT_ROOT / "pyproject.toml"
MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def _load_pyproject_options() -> dict[str, str]:
    """Load Alembic configuration values from pyproject.toml, if it is present."""

    try:
        with PYPROJECT_PATH.open("rb") as pyproject_file:
            document = tomllib.load(pyproject_file)
    except FileNotFoundError:
        return {}

    alembic_section = document.get("tool", {}).get("alembic", {})
    return {str(key): str(value) for key, value in alembic_section.items()}


def _resolve(path_option: str | None, default: Path) -> Path:
    if path_option is None:
        return default
    candidate = Path(path_option)
    return candidate if candidate.is_absolute() else (PROJECT_ROOT / candidate).resolve()


def build_config() -> Config:
    """Return an Alembic Config seeded from pyproject settings.

    Installed copies without a pyproject fall back to the bundled migrations.
    """

    config = Config()
    options = _load_pyproject_options()

    script_path = _resolve(options.get("script_location"), MIGRATIONS_PATH)
    if not script_path.is_dir():
        script_path = MIGRATIONS_PATH
    config.set_main_option("script_location", str(script_path))
    config.set_main_option(
        "prepend_sys_path",
        str(_resolve(options.get("prepend_sys_path"), PROJECT_ROOT)),
    )

    for key, value in options.items():
        if key in {"script_location", "prepend_sys_path"}:
            continue
        config.set_main_option(key, value)

    config.attributes["pyproject_options"] = options
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Upgrade the database schema to the latest revision."""

    config = build_config()
    if engine is not None:
        with engine.begin() as connection:
            config.attributes["connection"] = connection
            command.upgrade(config, "head")
        return
    config.set_main_option("sqlalchemy.url", database_uri or get_database_config().uri)
    command.upgrade(config, "head")
