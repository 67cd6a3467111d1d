"""Import classification types.

An import plan is the contract between the read phase (what already exists) and the
write phase (what must be inserted or overwritten). Records whose tracked fields all
match the stored row are counted but never written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from flowtrack.domain.model import WorkItem


class ImportAction(StrEnum):
    INSERT = "insert"
    UPDATE = "update"
    IGNORE = "ignore"


@dataclass(slots=True)
class ImportPlan:
    inserts: list[WorkItem] = field(default_factory=list["WorkItem"])
    updates: list[WorkItem] = field(default_factory=list["WorkItem"])
    ignored: list[WorkItem] = field(default_factory=list["WorkItem"])

    def add(self, action: ImportAction, item: WorkItem) -> None:
        match action:
            case ImportAction.INSERT:
                self.inserts.append(item)
            case ImportAction.UPDATE:
                self.updates.append(item)
            case ImportAction.IGNORE:
                self.ignored.append(item)


@dataclass(slots=True, frozen=True)
class ImportResult:
    """Counts reported back to the caller of an import."""

    inserted: int
    updated: int
    ignored: int

    def as_dict(self) -> dict[str, int]:
        return {"inserted": self.inserted, "updated": self.updated, "ignored": self.ignored}


def classify(item: WorkItem, current: WorkItem | None) -> ImportAction:
    if current is None:
        return ImportAction.INSERT
    if item.differs_from(current):
        return ImportAction.UPDATE
    return ImportAction.IGNORE


def plan_import(items: Iterable[WorkItem], existing: Mapping[int, WorkItem]) -> ImportPlan:
    plan = ImportPlan()
    for item in items:
        plan.add(classify(item, existing.get(item.id)), item)
    return plan
