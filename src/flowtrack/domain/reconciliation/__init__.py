"""Work item import reconciliation."""

from __future__ import annotations

from .engine import import_work_items, sync_reference_tables
from .plan import ImportAction, ImportPlan, ImportResult, classify, plan_import
from .records import (
    BatchValidationError,
    ValidationIssue,
    WorkItemPayload,
    WorkItemRecord,
    format_issue_path,
    parse_batch,
)
from .resolve import (
    UnresolvedWorkItemTypeError,
    build_title_index,
    dimension_pairs,
    resolve_record,
)

__all__ = [
    "BatchValidationError",
    "ImportAction",
    "ImportPlan",
    "ImportResult",
    "UnresolvedWorkItemTypeError",
    "ValidationIssue",
    "WorkItemPayload",
    "WorkItemRecord",
    "build_title_index",
    "classify",
    "dimension_pairs",
    "format_issue_path",
    "import_work_items",
    "parse_batch",
    "plan_import",
    "resolve_record",
    "sync_reference_tables",
]
