"""Reference tables resolved by name during import."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class Dimension:
    """Named reference row keyed by its canonical name."""

    name: str
    name_normalized: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime | None = None


@dataclass(eq=False, kw_only=True)
class Person(Dimension):
    """Assignee of work items."""


@dataclass(eq=False, kw_only=True)
class WorkItemType(Dimension):
    """Category of a work item (bug, user story, task, ...)."""
