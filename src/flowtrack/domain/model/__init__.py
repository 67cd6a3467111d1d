"""Domain model exports."""

from __future__ import annotations

from .dimensions import Dimension, Person, WorkItemType
from .filters import DimensionFilter, SortDirection, WorkItemFilter, WorkItemSort, WorkItemSortField
from .work_item import TRACKED_FIELDS, WorkItem

__all__ = [
    "TRACKED_FIELDS",
    "Dimension",
    "DimensionFilter",
    "Person",
    "SortDirection",
    "WorkItem",
    "WorkItemFilter",
    "WorkItemSort",
    "WorkItemSortField",
    "WorkItemType",
]
