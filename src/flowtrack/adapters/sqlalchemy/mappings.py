"""SQLAlchemy table metadata and imperative mappings for the domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    func,
    orm,
)

from flowtrack.domain.model import Person, WorkItem, WorkItemType

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _dimension_table(name: str) -> Table:
    return Table(
        name,
        mapper_registry.metadata,
        Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
        Column("name", String(255), nullable=False),
        Column("name_normalized", String(255), nullable=False),
        Column("created_at", UTCDateTime(), nullable=False, server_default=func.now()),
        UniqueConstraint("name_normalized", name=f"uq_{name}_name_normalized"),
    )


person_table = _dimension_table("person")
work_item_type_table = _dimension_table("work_item_type")

# No FK on parent_id: a batch may reference parents in any order and ids are
# assigned upstream.
work_item_table = Table(
    "work_item",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column(
        "work_item_type_id",
        UUIDColumnType,
        ForeignKey("work_item_type.id"),
        nullable=False,
    ),
    Column("state", String(100), nullable=False),
    Column("created_date", UTCDateTime(), nullable=False),
    Column("activated_date", UTCDateTime(), nullable=True),
    Column("closed_date", UTCDateTime(), nullable=True),
    Column("title", Text, nullable=False),
    Column("description", Text, nullable=True),
    Column("assigned_to_id", UUIDColumnType, ForeignKey("person.id"), nullable=True),
    Column("parent_id", Integer, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False, server_default=func.now()),
    Column("updated_at", UTCDateTime(), nullable=False, server_default=func.now()),
    Index("ix_work_item_parent_id", "parent_id"),
    Index("ix_work_item_work_item_type_id", "work_item_type_id"),
    Index("ix_work_item_assigned_to_id", "assigned_to_id"),
    Index("ix_work_item_closed_date", "closed_date"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model (idempotent)."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Person, person_table)
    mapper_registry.map_imperatively(WorkItemType, work_item_type_table)
    mapper_registry.map_imperatively(WorkItem, work_item_table)
    orm.configure_mappers()
    return mapper_registry

