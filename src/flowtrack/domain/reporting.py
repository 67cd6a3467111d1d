"""Read models: work item listing with development time, and reference listings."""

from __future__ import annotations

import math
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from flowtrack.domain.business_days import business_days_for, holiday_predicate, window_years
from flowtrack.domain.model import DimensionFilter, WorkItemFilter, WorkItemSort

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from datetime import datetime
    from uuid import UUID

    from flowtrack.domain.business_days import HasLifecycleDates
    from flowtrack.domain.holidays import HolidayDirectory
    from flowtrack.domain.model import Person, WorkItem, WorkItemType
    from flowtrack.domain.ports.unit_of_work import WorkItemUnitOfWork

log = getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200
CLOSED_STATE = "Closed"


@dataclass(slots=True, frozen=True)
class WorkItemView:
    id: int
    work_item_type_id: UUID
    work_item_type: str | None
    state: str
    created_date: datetime
    activated_date: datetime | None
    closed_date: datetime | None
    title: str
    description: str | None
    assigned_to_id: UUID | None
    assigned_to: str | None
    parent_id: int | None
    created_at: datetime | None
    updated_at: datetime | None
    development_business_days: int | None

    @classmethod
    def from_item(
        cls,
        item: WorkItem,
        development_business_days: int | None,
        names: Mapping[UUID, str] | None = None,
    ) -> WorkItemView:
        names = names or {}
        return cls(
            id=item.id,
            work_item_type_id=item.work_item_type_id,
            work_item_type=names.get(item.work_item_type_id),
            state=item.state,
            created_date=item.created_date,
            activated_date=item.activated_date,
            closed_date=item.closed_date,
            title=item.title,
            description=item.description,
            assigned_to_id=item.assigned_to_id,
            assigned_to=names.get(item.assigned_to_id) if item.assigned_to_id else None,
            parent_id=item.parent_id,
            created_at=item.created_at,
            updated_at=item.updated_at,
            development_business_days=development_business_days,
        )


@dataclass(slots=True, frozen=True)
class WorkItemSummary:
    total: int
    closed: int
    avg_development_business_days: int | None


@dataclass(slots=True, frozen=True)
class WorkItemPage:
    items: list[WorkItemView]
    total: int
    summary: WorkItemSummary


@dataclass(slots=True, frozen=True)
class LifecycleDates:
    state: str
    created_date: datetime
    activated_date: datetime | None
    closed_date: datetime | None


def list_work_items(
    *,
    unit_of_work_factory: Callable[[], WorkItemUnitOfWork],
    holiday_directory: HolidayDirectory,
    criteria: WorkItemFilter | None = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    sort: WorkItemSort | None = None,
) -> WorkItemPage:
    """Return one page of work items plus totals over the whole filtered set.

    The summary average covers every filtered item closed in state ``Closed``
    (not only the current page) and is rounded up to whole days.
    """

    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    if offset < 0:
        raise ValueError("offset must be non-negative")
    effective_criteria = criteria or WorkItemFilter()
    effective_sort = sort or WorkItemSort()

    with unit_of_work_factory() as uow:
        repository = uow.repositories.work_items
        items = repository.list_filtered(
            effective_criteria,
            limit=limit,
            offset=offset,
            sort=effective_sort,
        )
        total = repository.count_filtered(effective_criteria)
        closed = repository.count_closed(effective_criteria)
        summary_rows = [
            LifecycleDates(state, created, activated, closed_at)
            for state, created, activated, closed_at in repository.lifecycle_dates(
                effective_criteria
            )
        ]
        names = {
            **uow.repositories.work_item_types.names_by_ids(
                item.work_item_type_id for item in items
            ),
            **uow.repositories.people.names_by_ids(
                item.assigned_to_id for item in items if item.assigned_to_id is not None
            ),
        }

    averaged = [
        row for row in summary_rows if row.closed_date is not None and row.state == CLOSED_STATE
    ]
    is_holiday = holiday_predicate(holiday_directory.holidays_for(_years_needed(items, averaged)))

    views = [
        WorkItemView.from_item(item, business_days_for(item, is_holiday), names) for item in items
    ]
    average: int | None = None
    if averaged:
        durations = [business_days_for(row, is_holiday) or 0 for row in averaged]
        average = math.ceil(sum(durations) / len(durations))

    log.debug("Listed %s of %s work item(s) (offset=%s)", len(views), total, offset)
    return WorkItemPage(
        items=views,
        total=total,
        summary=WorkItemSummary(total=total, closed=closed, avg_development_business_days=average),
    )


def _years_needed(*groups: Iterable[HasLifecycleDates]) -> set[int]:
    years: set[int] = set()
    for group in groups:
        for item in group:
            years.update(window_years(item))
    return years


def list_people(
    *,
    unit_of_work_factory: Callable[[], WorkItemUnitOfWork],
    criteria: DimensionFilter | None = None,
) -> list[Person]:
    with unit_of_work_factory() as uow:
        return uow.repositories.people.search(criteria or DimensionFilter())


def list_work_item_types(
    *,
    unit_of_work_factory: Callable[[], WorkItemUnitOfWork],
    criteria: DimensionFilter | None = None,
) -> list[WorkItemType]:
    with unit_of_work_factory() as uow:
        return uow.repositories.work_item_types.search(criteria or DimensionFilter())
