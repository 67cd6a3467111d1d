"""Work item aggregate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

TRACKED_FIELDS: Final[tuple[str, ...]] = (
    "work_item_type_id",
    "state",
    "created_date",
    "activated_date",
    "closed_date",
    "title",
    "description",
    "assigned_to_id",
    "parent_id",
)


@dataclass(eq=False, kw_only=True)
class WorkItem:
    """A ticket identified by the integer id assigned upstream.

    ``created_at`` / ``updated_at`` are bookkeeping columns owned by the store and are
    never compared during import.
    """

    id: int
    work_item_type_id: UUID
    state: str
    created_date: datetime
    title: str
    activated_date: datetime | None = None
    closed_date: datetime | None = None
    description: str | None = None
    assigned_to_id: UUID | None = None
    parent_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def changed_fields(self, other: WorkItem) -> tuple[str, ...]:
        """Return the tracked fields whose values differ from ``other``.

        Datetimes compare by instant, so the same moment in different offsets is equal.
        """

        return tuple(name for name in TRACKED_FIELDS if getattr(self, name) != getattr(other, name))

    def differs_from(self, other: WorkItem) -> bool:
        return bool(self.changed_fields(other))

    def tracked_values(self) -> dict[str, object]:
        return {name: getattr(self, name) for name in TRACKED_FIELDS}
