"""Work item import: validate, resolve references, diff against storage, write.

The whole batch is processed in memory before anything is written. Reference
tables are synchronised first in their own unit of work (insert-if-absent, then a
full re-read); the work item writes then happen in a single unit of work that
rolls back completely if either the inserts or the updates fail.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from .plan import ImportResult, plan_import
from .records import parse_batch
from .resolve import build_title_index, dimension_pairs, resolve_record

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from flowtrack.domain.ports.unit_of_work import WorkItemUnitOfWork

    from .records import WorkItemRecord

log = getLogger(__name__)


def import_work_items(
    raw_items: Any,
    *,
    unit_of_work_factory: Callable[[], WorkItemUnitOfWork],
) -> ImportResult:
    """Import a batch of raw work item records and report what changed."""

    records = parse_batch(raw_items)
    log.info("Importing %s work item record(s)", len(records))

    people_ids, type_ids = sync_reference_tables(records, unit_of_work_factory=unit_of_work_factory)
    titles = build_title_index(records)
    items = [
        resolve_record(record, people=people_ids, work_item_types=type_ids, titles=titles)
        for record in records
    ]

    with unit_of_work_factory() as uow:
        repository = uow.repositories.work_items
        existing = repository.find_by_ids([item.id for item in items])
        plan = plan_import(items, existing)
        log.info(
            "Import plan: insert=%s, update=%s, unchanged=%s",
            len(plan.inserts),
            len(plan.updates),
            len(plan.ignored),
        )
        inserted = repository.bulk_insert(plan.inserts) if plan.inserts else 0
        updated = repository.bulk_update(plan.updates) if plan.updates else 0
        uow.commit()

    return ImportResult(inserted=inserted, updated=updated, ignored=len(plan.ignored))


def sync_reference_tables(
    records: Sequence[WorkItemRecord],
    *,
    unit_of_work_factory: Callable[[], WorkItemUnitOfWork],
) -> tuple[dict[str, UUID], dict[str, UUID]]:
    """Insert unseen assignee and type names, then return canonical-name → id maps."""

    people = dimension_pairs(record.assigned_to for record in records)
    work_item_types = dimension_pairs(record.work_item_type for record in records)

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        people_ids: dict[str, UUID] = {}
        if people:
            repositories.people.upsert_many(people)
            people_ids = repositories.people.ids_by_canonical_name()
        repositories.work_item_types.upsert_many(work_item_types)
        type_ids = repositories.work_item_types.ids_by_canonical_name()
        uow.commit()

    log.debug(
        "Reference tables synchronised: people=%s, work_item_types=%s",
        len(people_ids),
        len(type_ids),
    )
    return people_ids, type_ids
