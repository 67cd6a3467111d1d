"""Process-wide directory of public holidays, keyed by calendar year.

Each year is fetched at most once successfully and then kept for the life of the
process. A year whose lookup fails twice is recorded as having no holidays so the
business-day calculation degrades instead of failing the caller.
"""

from __future__ import annotations

import asyncio
import threading
from logging import getLogger
from typing import TYPE_CHECKING

from flowtrack.domain.ports.holidays import HolidaySourceError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable
    from datetime import date

    from flowtrack.domain.ports.holidays import HolidaySource

log = getLogger(__name__)

DEFAULT_RETRY_DELAY_SECONDS = 0.2


class HolidayDirectory:
    """Year-partitioned holiday cache in front of a :class:`HolidaySource`.

    Safe to share between threads and coroutines. Two callers missing the same year
    at the same time may both hit the source; the first result stored wins.
    """

    def __init__(
        self,
        source: HolidaySource,
        *,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._source = source
        self._retry_delay_seconds = retry_delay_seconds
        self._sleep = sleep
        self._cache: dict[int, frozenset[date]] = {}
        self._lock = threading.Lock()

    async def get_holidays(self, year: int) -> frozenset[date]:
        cached = self.cached(year)
        if cached is not None:
            return cached
        holidays = await self._fetch_with_retry(year)
        with self._lock:
            return self._cache.setdefault(year, holidays)

    async def load(self, years: Iterable[int]) -> dict[int, frozenset[date]]:
        """Resolve several years concurrently."""

        unique_years = sorted(set(years))
        results = await asyncio.gather(*(self.get_holidays(year) for year in unique_years))
        return dict(zip(unique_years, results, strict=True))

    def holidays_for(self, years: Iterable[int]) -> dict[int, frozenset[date]]:
        """Synchronous variant of :meth:`load`.

        Fully cached lookups never start an event loop, so this is usable from code
        already running inside one as long as the years were loaded beforehand.
        """

        unique_years = set(years)
        with self._lock:
            if unique_years.issubset(self._cache):
                return {year: self._cache[year] for year in sorted(unique_years)}
        return asyncio.run(self.load(unique_years))

    def cached(self, year: int) -> frozenset[date] | None:
        with self._lock:
            return self._cache.get(year)

    def cached_years(self) -> tuple[int, ...]:
        with self._lock:
            return tuple(sorted(self._cache))

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    async def _fetch_with_retry(self, year: int) -> frozenset[date]:
        try:
            return await self._source(year)
        except HolidaySourceError as exc:
            log.info(
                "Holiday lookup for %s failed (%s); retrying in %.2fs",
                year,
                exc,
                self._retry_delay_seconds,
            )

        await self._sleep(self._retry_delay_seconds)
        try:
            return await self._source(year)
        except HolidaySourceError as exc:
            log.warning(
                "Holiday lookup for %s failed after retry, assuming no holidays: %s",
                year,
                exc,
            )
            return frozenset()
