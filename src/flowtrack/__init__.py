"""Work item import reconciliation and development-time tracking."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("flowtrack")
except PackageNotFoundError:
    __version__ = "0.0.0"
