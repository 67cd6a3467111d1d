"""Reference resolution from names and titles to identifiers.

Titles resolve only against the batch being imported: a parent that is not part of
the same batch resolves to no parent, even if a stored item carries that title.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flowtrack.domain.model import WorkItem
from flowtrack.domain.normalization import normalize_title

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from uuid import UUID

    from .records import WorkItemRecord


class UnresolvedWorkItemTypeError(RuntimeError):
    """Raised when a record's type is missing from the freshly re-read type table."""


def dimension_pairs(names: Iterable[str | None]) -> list[tuple[str, str]]:
    """Return ``(display_name, canonical_name)`` pairs, one per canonical name.

    The first spelling seen for a canonical name is the one that gets stored.
    """

    display_by_canonical: dict[str, str] = {}
    for name in names:
        if name is None:
            continue
        display = name.strip()
        canonical = normalize_title(display)
        if canonical is None:
            continue
        display_by_canonical.setdefault(canonical, display)
    return [(display, canonical) for canonical, display in display_by_canonical.items()]


def build_title_index(records: Iterable[WorkItemRecord]) -> dict[str, int]:
    """Map canonical titles to ids; a repeated title resolves to its last occurrence."""

    index: dict[str, int] = {}
    for record in records:
        if record.title_key is not None:
            index[record.title_key] = record.id
    return index


def resolve_record(
    record: WorkItemRecord,
    *,
    people: Mapping[str, UUID],
    work_item_types: Mapping[str, UUID],
    titles: Mapping[str, int],
) -> WorkItem:
    type_key = normalize_title(record.work_item_type)
    type_id = work_item_types.get(type_key) if type_key is not None else None
    if type_id is None:
        raise UnresolvedWorkItemTypeError(
            f"Work item {record.id}: type {record.work_item_type!r} could not be resolved"
        )

    assignee_key = normalize_title(record.assigned_to)
    parent_id = titles.get(record.parent_key) if record.parent_key is not None else None

    return WorkItem(
        id=record.id,
        work_item_type_id=type_id,
        state=record.state,
        created_date=record.created_date,
        activated_date=record.activated_date,
        closed_date=record.closed_date,
        title=record.title,
        description=record.description,
        assigned_to_id=people.get(assignee_key) if assignee_key is not None else None,
        parent_id=parent_id,
    )
