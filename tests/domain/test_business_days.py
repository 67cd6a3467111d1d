from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime
from uuid import uuid4

from flowtrack.domain.business_days import (
    count_business_days,
    development_business_days,
    development_window,
    holiday_predicate,
    years_between,
)
from flowtrack.domain.holidays import HolidayDirectory
from flowtrack.domain.model import WorkItem
from tests.helpers.holidays import FakeHolidaySource, no_sleep

TYPE_ID = uuid4()


def _at(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, tzinfo=UTC)


def _never(_day: date) -> bool:
    return False


def _item(
    *,
    created: datetime,
    activated: datetime | None = None,
    closed: datetime | None = None,
) -> WorkItem:
    return WorkItem(
        id=1,
        work_item_type_id=TYPE_ID,
        state="Closed" if closed else "Active",
        created_date=created,
        activated_date=activated,
        closed_date=closed,
        title="Example",
    )


def test_full_working_week_counts_five_days() -> None:
    assert count_business_days(_at(2025, 5, 5), _at(2025, 5, 9), _never) == 5


def test_weekend_is_excluded() -> None:
    assert count_business_days(_at(2025, 5, 9), _at(2025, 5, 12), _never) == 2


def test_holiday_is_excluded() -> None:
    is_holiday = holiday_predicate({2025: frozenset({date(2025, 5, 8)})})

    assert count_business_days(_at(2025, 5, 7), _at(2025, 5, 9), is_holiday) == 2


def test_inverted_range_counts_zero() -> None:
    assert count_business_days(_at(2025, 5, 9), _at(2025, 5, 5), _never) == 0


def test_same_day_counts_once_regardless_of_time() -> None:
    assert count_business_days(_at(2025, 5, 6, 23), _at(2025, 5, 6, 1), _never) == 1


def test_weekend_only_range_counts_zero() -> None:
    assert count_business_days(_at(2025, 5, 10), _at(2025, 5, 11), _never) == 0


def test_years_between_is_inclusive() -> None:
    assert years_between(_at(2023, 12, 28), _at(2025, 1, 2)) == [2023, 2024, 2025]


def test_holiday_predicate_ignores_years_not_loaded() -> None:
    is_holiday = holiday_predicate({2024: frozenset({date(2024, 12, 25)})})

    assert is_holiday(date(2024, 12, 25))
    assert not is_holiday(date(2025, 12, 25))


def test_development_window_is_none_while_open() -> None:
    assert development_window(_at(2025, 5, 5), _at(2025, 5, 6), None) is None


def test_development_window_prefers_activation() -> None:
    window = development_window(_at(2025, 5, 1), _at(2025, 5, 5, 15), _at(2025, 5, 9, 18))

    assert window == (datetime(2025, 5, 5, tzinfo=UTC), datetime(2025, 5, 9, tzinfo=UTC))


def test_development_business_days_is_none_for_open_items() -> None:
    source = FakeHolidaySource()
    directory = HolidayDirectory(source, sleep=no_sleep)

    assert development_business_days(_item(created=_at(2025, 5, 5)), directory) is None
    assert source.calls == []


def test_development_business_days_falls_back_to_created_date() -> None:
    directory = HolidayDirectory(FakeHolidaySource(), sleep=no_sleep)
    item = _item(created=_at(2025, 5, 5), closed=_at(2025, 5, 9))

    assert development_business_days(item, directory) == 5


def test_development_business_days_uses_activation_and_holidays() -> None:
    source = FakeHolidaySource({2025: {date(2025, 5, 1)}})
    directory = HolidayDirectory(source, sleep=no_sleep)
    item = _item(created=_at(2025, 4, 1), activated=_at(2025, 4, 30), closed=_at(2025, 5, 2))

    # Wed 30 Apr, Thu 1 May (holiday), Fri 2 May
    assert development_business_days(item, directory) == 2


def test_development_business_days_loads_every_spanned_year() -> None:
    source = FakeHolidaySource({2024: {date(2024, 12, 25)}, 2025: {date(2025, 1, 1)}})
    directory = HolidayDirectory(source, sleep=no_sleep)
    item = _item(created=_at(2024, 12, 23), closed=_at(2025, 1, 3))

    # 23-27 Dec minus Christmas, 30-31 Dec, 2-3 Jan
    assert development_business_days(item, directory) == 8
    assert sorted(source.calls) == [2024, 2025]


def test_development_business_days_reuses_cached_years() -> None:
    source = FakeHolidaySource()
    directory = HolidayDirectory(source, sleep=no_sleep)
    asyncio.run(directory.load([2025]))

    development_business_days(_item(created=_at(2025, 5, 5), closed=_at(2025, 5, 9)), directory)

    assert source.calls == [2025]
