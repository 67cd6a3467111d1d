"""Ports for looking up public holidays."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import date


class HolidaySourceError(RuntimeError):
    """Raised by holiday sources when a year cannot be fetched."""


@runtime_checkable
class HolidaySource(Protocol):
    """Remote lookup of the holidays of one calendar year."""

    async def __call__(self, year: int) -> frozenset[date]: ...
