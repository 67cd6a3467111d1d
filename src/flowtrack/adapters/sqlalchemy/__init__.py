"""SQLAlchemy adapter package."""

from __future__ import annotations

from .mappings import (
    mapper_registry,
    person_table,
    start_mappers,
    work_item_table,
    work_item_type_table,
)
from .repositories import (
    SqlAlchemyDimensionRepository,
    SqlAlchemyPersonRepository,
    SqlAlchemyWorkItemRepository,
    SqlAlchemyWorkItemTypeRepository,
)

__all__ = [
    "SqlAlchemyDimensionRepository",
    "SqlAlchemyPersonRepository",
    "SqlAlchemyWorkItemRepository",
    "SqlAlchemyWorkItemTypeRepository",
    "mapper_registry",
    "person_table",
    "start_mappers",
    "work_item_table",
    "work_item_type_table",
]
