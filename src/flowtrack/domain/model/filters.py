"""Read-side filter and sort criteria."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


class WorkItemSortField(StrEnum):
    ID = "id"


@dataclass(slots=True, frozen=True)
class WorkItemSort:
    field: WorkItemSortField = WorkItemSortField.ID
    direction: SortDirection = SortDirection.ASC


@dataclass(slots=True, frozen=True, kw_only=True)
class WorkItemFilter:
    """Conjunctive work item filter; ``None`` means "do not filter on this".

    Name and title criteria are case-insensitive substring matches. Date bounds are
    inclusive.
    """

    id: int | None = None
    parent_id: int | None = None
    work_item_type: str | None = None
    work_item_type_id: UUID | None = None
    state: str | None = None
    assigned_to_id: UUID | None = None
    assigned_to: str | None = None
    title_contains: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
    activated_from: datetime | None = None
    activated_to: datetime | None = None
    closed_from: datetime | None = None
    closed_to: datetime | None = None
    is_closed: bool | None = None
    has_parent: bool | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class DimensionFilter:
    id: UUID | None = None
    name_contains: str | None = None
