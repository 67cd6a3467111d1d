"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from itertools import batched
from typing import TYPE_CHECKING, Any, Final, cast

from sqlalchemy import bindparam, func, select, update
from sqlalchemy.dialects import postgresql, sqlite

from flowtrack.adapters.sqlalchemy.mappings import (
    person_table,
    work_item_table,
    work_item_type_table,
)
from flowtrack.domain.model import (
    TRACKED_FIELDS,
    Dimension,
    Person,
    SortDirection,
    WorkItem,
    WorkItemType,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from sqlalchemy import ColumnElement, Table
    from sqlalchemy.orm import Session

    from flowtrack.domain.model import DimensionFilter, WorkItemFilter, WorkItemSort

# Keeps IN (...) lists below the bound-parameter limits of SQLite and PostgreSQL.
ID_LOOKUP_CHUNK_SIZE: Final[int] = 500


class UnsupportedDialectError(RuntimeError):
    """Raised when conflict-ignoring inserts are requested on an unknown backend."""


def insert_ignoring_conflicts(
    session: Session,
    table: Table,
    rows: Sequence[dict[str, Any]],
    *,
    conflict_columns: Sequence[str],
) -> None:
    """Insert ``rows``, skipping any that collide on ``conflict_columns``."""

    if not rows:
        return
    dialect_name = session.get_bind().dialect.name
    if dialect_name == "sqlite":
        stmt = sqlite.insert(table).on_conflict_do_nothing(index_elements=conflict_columns)
    elif dialect_name == "postgresql":
        stmt = postgresql.insert(table).on_conflict_do_nothing(index_elements=conflict_columns)
    else:
        raise UnsupportedDialectError(f"Conflict-ignoring insert not supported on {dialect_name}")
    session.execute(stmt, list(rows))


class SqlAlchemyWorkItemRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_ids(self, ids: Iterable[int]) -> dict[int, WorkItem]:
        unique_ids = sorted(set(ids))
        found: dict[int, WorkItem] = {}
        for chunk in batched(unique_ids, ID_LOOKUP_CHUNK_SIZE):
            stmt = select(WorkItem).where(work_item_table.c.id.in_(chunk))
            for item in self.session.scalars(stmt):
                found[item.id] = item
        return found

    def bulk_insert(self, items: Sequence[WorkItem]) -> int:
        """Insert new rows; returns the number of rows submitted."""

        rows = [{"id": item.id, **item.tracked_values()} for item in items]
        insert_ignoring_conflicts(self.session, work_item_table, rows, conflict_columns=("id",))
        return len(rows)

    def bulk_update(self, items: Sequence[WorkItem]) -> int:
        if not items:
            return 0
        values: dict[str, Any] = {name: bindparam(f"b_{name}") for name in TRACKED_FIELDS}
        values["updated_at"] = bindparam("b_updated_at")
        stmt = (
            update(work_item_table)
            .where(work_item_table.c.id == bindparam("b_id"))
            .values(values)
        )
        touched_at = datetime.now(UTC)
        params = [
            {
                "b_id": item.id,
                "b_updated_at": touched_at,
                **{f"b_{name}": value for name, value in item.tracked_values().items()},
            }
            for item in items
        ]
        self.session.execute(stmt, params)
        return len(params)

    def list_filtered(
        self,
        criteria: WorkItemFilter,
        *,
        limit: int,
        offset: int,
        sort: WorkItemSort,
    ) -> list[WorkItem]:
        order_column = work_item_table.c[sort.field.value]
        ordering = order_column.desc() if sort.direction is SortDirection.DESC else order_column.asc()
        stmt = (
            select(WorkItem)
            .where(*_work_item_clauses(criteria))
            .order_by(ordering)
            .limit(limit)
            .offset(offset)
        )
        return list(self.session.scalars(stmt))

    def count_filtered(self, criteria: WorkItemFilter) -> int:
        stmt = select(func.count()).select_from(work_item_table).where(*_work_item_clauses(criteria))
        return int(self.session.execute(stmt).scalar_one())

    def count_closed(self, criteria: WorkItemFilter) -> int:
        stmt = (
            select(func.count())
            .select_from(work_item_table)
            .where(*_work_item_clauses(criteria))
            .where(work_item_table.c.closed_date.is_not(None))
        )
        return int(self.session.execute(stmt).scalar_one())

    def lifecycle_dates(
        self,
        criteria: WorkItemFilter,
    ) -> list[tuple[str, datetime, datetime | None, datetime | None]]:
        columns = work_item_table.c
        stmt = select(
            columns.state,
            columns.created_date,
            columns.activated_date,
            columns.closed_date,
        ).where(*_work_item_clauses(criteria))
        return [
            (row.state, row.created_date, row.activated_date, row.closed_date)
            for row in self.session.execute(stmt)
        ]


def _work_item_clauses(criteria: WorkItemFilter) -> list[ColumnElement[bool]]:
    columns = work_item_table.c
    clauses: list[ColumnElement[bool]] = []
    if criteria.id is not None:
        clauses.append(columns.id == criteria.id)
    if criteria.parent_id is not None:
        clauses.append(columns.parent_id == criteria.parent_id)
    if criteria.work_item_type_id is not None:
        clauses.append(columns.work_item_type_id == criteria.work_item_type_id)
    if criteria.work_item_type:
        type_ids = select(work_item_type_table.c.id).where(
            work_item_type_table.c.name.icontains(criteria.work_item_type, autoescape=True)
        )
        clauses.append(columns.work_item_type_id.in_(type_ids))
    if criteria.state is not None:
        clauses.append(columns.state == criteria.state)
    if criteria.assigned_to_id is not None:
        clauses.append(columns.assigned_to_id == criteria.assigned_to_id)
    if criteria.assigned_to:
        person_ids = select(person_table.c.id).where(
            person_table.c.name.icontains(criteria.assigned_to, autoescape=True)
        )
        clauses.append(columns.assigned_to_id.in_(person_ids))
    if criteria.title_contains:
        clauses.append(columns.title.icontains(criteria.title_contains, autoescape=True))

    bounds = (
        (columns.created_date, criteria.created_from, criteria.created_to),
        (columns.activated_date, criteria.activated_from, criteria.activated_to),
        (columns.closed_date, criteria.closed_from, criteria.closed_to),
    )
    for column, lower, upper in bounds:
        if lower is not None:
            clauses.append(column >= lower)
        if upper is not None:
            clauses.append(column <= upper)

    if criteria.is_closed is not None:
        closed_column = columns.closed_date
        clauses.append(
            closed_column.is_not(None) if criteria.is_closed else closed_column.is_(None)
        )
    if criteria.has_parent is not None:
        parent_column = columns.parent_id
        clauses.append(
            parent_column.is_not(None) if criteria.has_parent else parent_column.is_(None)
        )
    return clauses


class SqlAlchemyDimensionRepository[TDimension: Dimension]:
    """Insert-if-absent repository for name-keyed reference tables."""

    def __init__(self, session: Session, entity_cls: type[TDimension], table: Table) -> None:
        self.session = session
        self._entity_cls = entity_cls
        self._table = table

    def upsert(self, name: str, canonical_name: str) -> None:
        self.upsert_many([(name, canonical_name)])

    def upsert_many(self, pairs: Iterable[tuple[str, str]]) -> None:
        rows = [{"name": name, "name_normalized": canonical} for name, canonical in pairs]
        insert_ignoring_conflicts(
            self.session,
            self._table,
            rows,
            conflict_columns=("name_normalized",),
        )

    def ids_by_canonical_name(self) -> dict[str, UUID]:
        stmt = select(self._table.c.name_normalized, self._table.c.id)
        return {
            cast("str", canonical): cast("UUID", entity_id)
            for canonical, entity_id in self.session.execute(stmt)
        }

    def names_by_ids(self, ids: Iterable[UUID]) -> dict[UUID, str]:
        columns = self._table.c
        names: dict[UUID, str] = {}
        for chunk in batched(sorted(set(ids)), ID_LOOKUP_CHUNK_SIZE):
            stmt = select(columns.id, columns.name).where(columns.id.in_(chunk))
            for entity_id, name in self.session.execute(stmt):
                names[cast("UUID", entity_id)] = cast("str", name)
        return names

    def search(self, criteria: DimensionFilter) -> list[TDimension]:
        columns = self._table.c
        stmt = select(self._entity_cls)
        if criteria.id is not None:
            stmt = stmt.where(columns.id == criteria.id)
        if criteria.name_contains:
            stmt = stmt.where(columns.name.icontains(criteria.name_contains, autoescape=True))
        stmt = stmt.order_by(columns.name.asc(), columns.id.asc())
        return list(self.session.scalars(stmt))


class SqlAlchemyPersonRepository(SqlAlchemyDimensionRepository[Person]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Person, person_table)


class SqlAlchemyWorkItemTypeRepository(SqlAlchemyDimensionRepository[WorkItemType]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, WorkItemType, work_item_type_table)


if TYPE_CHECKING:
    from flowtrack.domain.ports.persistence import (
        PersonRepository,
        WorkItemRepository,
        WorkItemTypeRepository,
    )

    _session_stub = cast("Session", object())
    _work_item_repo: WorkItemRepository = SqlAlchemyWorkItemRepository(_session_stub)
    _person_repo: PersonRepository = SqlAlchemyPersonRepository(_session_stub)
    _type_repo: WorkItemTypeRepository = SqlAlchemyWorkItemTypeRepository(_session_stub)
