"""Holiday source backed by the BrasilAPI ``feriados`` endpoint."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from flowtrack.adapters.http_resilience import ResilientClient
from flowtrack.domain.ports.holidays import HolidaySourceError

from .schema import HOLIDAY_LIST_ADAPTER

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date

    from flowtrack.config.holidays import HolidayConfig
    from flowtrack.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


class BrasilApiHolidaySource:
    """Fetch the national holidays of one year from BrasilAPI.

    Transport failures, non-2xx statuses and malformed payloads all surface as
    :class:`HolidaySourceError`; retrying is left to the holiday directory.
    """

    def __init__(
        self,
        *,
        config: HolidayConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    async def __call__(self, year: int) -> frozenset[date]:
        try:
            async with self._client_factory(self._resilience) as client:
                response = await client.get(f"{self._resilience.base_url}/{year}")
                response.raise_for_status()
                payload = HOLIDAY_LIST_ADAPTER.validate_json(response.content)
        except httpx.HTTPStatusError as exc:
            raise HolidaySourceError(
                f"BrasilAPI returned {exc.response.status_code} for {year}"
            ) from exc
        except httpx.HTTPError as exc:
            raise HolidaySourceError(f"BrasilAPI request for {year} failed: {exc}") from exc
        except ValidationError as exc:
            raise HolidaySourceError(f"Unexpected BrasilAPI payload for {year}") from exc

        holidays = frozenset(entry.date for entry in payload)
        log.debug("Fetched %s holiday(s) for %s", len(holidays), year)
        return holidays
