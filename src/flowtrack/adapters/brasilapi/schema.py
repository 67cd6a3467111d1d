"""BrasilAPI holiday response schema."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, TypeAdapter


class HolidayPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: dt.date
    name: str | None = None
    type: str | None = None


HOLIDAY_LIST_ADAPTER: TypeAdapter[list[HolidayPayload]] = TypeAdapter(list[HolidayPayload])
