"""Business-day arithmetic and the development-time derivation."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Protocol

from flowtrack.domain.normalization import day_truncate

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import date, datetime

    from flowtrack.domain.holidays import HolidayDirectory

type HolidayPredicate = Callable[[date], bool]

SATURDAY = 5
_ONE_DAY = timedelta(days=1)


class HasLifecycleDates(Protocol):
    @property
    def created_date(self) -> datetime: ...

    @property
    def activated_date(self) -> datetime | None: ...

    @property
    def closed_date(self) -> datetime | None: ...


def is_weekend(day: date) -> bool:
    return day.weekday() >= SATURDAY


def count_business_days(start: datetime, end: datetime, is_holiday: HolidayPredicate) -> int:
    """Count the days in ``[start, end]`` that are neither weekend days nor holidays.

    Both bounds are truncated to their UTC day first; an inverted range counts as 0.
    """

    current = day_truncate(start).date()
    last = day_truncate(end).date()
    count = 0
    while current <= last:
        if not is_weekend(current) and not is_holiday(current):
            count += 1
        current += _ONE_DAY
    return count


def years_between(start: datetime, end: datetime) -> list[int]:
    first = day_truncate(start).year
    last = day_truncate(end).year
    return list(range(first, last + 1))


def holiday_predicate(sets_by_year: Mapping[int, frozenset[date]]) -> HolidayPredicate:
    def is_holiday(day: date) -> bool:
        holidays = sets_by_year.get(day.year)
        return holidays is not None and day in holidays

    return is_holiday


def development_window(
    created: datetime,
    activated: datetime | None,
    closed: datetime | None,
) -> tuple[datetime, datetime] | None:
    """Return the day-truncated ``(start, end)`` of development, or ``None`` if open."""

    if closed is None:
        return None
    start = activated if activated is not None else created
    return day_truncate(start), day_truncate(closed)


def window_years(item: HasLifecycleDates) -> list[int]:
    window = development_window(item.created_date, item.activated_date, item.closed_date)
    if window is None:
        return []
    return years_between(*window)


def business_days_for(item: HasLifecycleDates, is_holiday: HolidayPredicate) -> int | None:
    """Development time of ``item`` against pre-fetched holidays."""

    window = development_window(item.created_date, item.activated_date, item.closed_date)
    if window is None:
        return None
    return count_business_days(*window, is_holiday)


def development_business_days(item: HasLifecycleDates, directory: HolidayDirectory) -> int | None:
    """Business days from activation (or creation) to closure, ``None`` while open."""

    years = window_years(item)
    if not years:
        return None
    is_holiday = holiday_predicate(directory.holidays_for(years))
    return business_days_for(item, is_holiday)
