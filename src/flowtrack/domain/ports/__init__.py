"""Domain ports (interfaces) implemented by adapters."""

from __future__ import annotations

from .holidays import HolidaySource, HolidaySourceError
from .persistence import (
    DimensionRepository,
    PersonRepository,
    WorkItemRepository,
    WorkItemTypeRepository,
)
from .unit_of_work import RepositoryCollection, UnitOfWork, WorkItemRepositories, WorkItemUnitOfWork

__all__ = [
    "DimensionRepository",
    "HolidaySource",
    "HolidaySourceError",
    "PersonRepository",
    "RepositoryCollection",
    "UnitOfWork",
    "WorkItemRepositories",
    "WorkItemRepository",
    "WorkItemTypeRepository",
    "WorkItemUnitOfWork",
]
