"""Ports for persisting work items and their reference tables."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from flowtrack.domain.model import Dimension, Person, WorkItemType

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime
    from uuid import UUID

    from flowtrack.domain.model import DimensionFilter, WorkItem, WorkItemFilter, WorkItemSort


@runtime_checkable
class WorkItemRepository(Protocol):
    """Persistence contract for work items."""

    def find_by_ids(self, ids: Iterable[int]) -> dict[int, WorkItem]: ...

    def bulk_insert(self, items: Sequence[WorkItem]) -> int:
        """Insert ``items``, silently skipping ids that already exist."""
        ...

    def bulk_update(self, items: Sequence[WorkItem]) -> int:
        """Overwrite every tracked field of ``items`` and touch ``updated_at``."""
        ...

    def list_filtered(
        self,
        criteria: WorkItemFilter,
        *,
        limit: int,
        offset: int,
        sort: WorkItemSort,
    ) -> list[WorkItem]: ...

    def count_filtered(self, criteria: WorkItemFilter) -> int: ...

    def count_closed(self, criteria: WorkItemFilter) -> int: ...

    def lifecycle_dates(
        self,
        criteria: WorkItemFilter,
    ) -> list[tuple[str, datetime, datetime | None, datetime | None]]:
        """Return ``(state, created, activated, closed)`` for every matching item."""
        ...


@runtime_checkable
class DimensionRepository[TDimension: Dimension](Protocol):
    """Insert-if-absent store for name-keyed reference rows."""

    def upsert(self, name: str, canonical_name: str) -> None: ...

    def upsert_many(self, pairs: Iterable[tuple[str, str]]) -> None: ...

    def ids_by_canonical_name(self) -> dict[str, UUID]: ...

    def names_by_ids(self, ids: Iterable[UUID]) -> dict[UUID, str]:
        """Return the display name of each existing row among ``ids``."""
        ...

    def search(self, criteria: DimensionFilter) -> list[TDimension]: ...


@runtime_checkable
class PersonRepository(DimensionRepository[Person], Protocol):
    """Repository contract for people."""


@runtime_checkable
class WorkItemTypeRepository(DimensionRepository[WorkItemType], Protocol):
    """Repository contract for work item types."""
