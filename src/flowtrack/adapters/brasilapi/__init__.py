"""BrasilAPI holiday adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flowtrack.config.holidays import get_holiday_config

from .client import BrasilApiHolidaySource
from .schema import HolidayPayload

if TYPE_CHECKING:
    from flowtrack.config.holidays import HolidayConfig


def build_brasilapi_holiday_source(config: HolidayConfig | None = None) -> BrasilApiHolidaySource:
    return BrasilApiHolidaySource(config=config or get_holiday_config())


__all__ = ["BrasilApiHolidaySource", "HolidayPayload", "build_brasilapi_holiday_source"]
