"""Inbound work item records: payload schema, parsing and validation issues."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from flowtrack.domain.normalization import normalize_title, parse_strict_date


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _parse_external_date(value: object) -> object:
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError("Expected a date string in DD-MM-YYYY HH:mm format")
    if not value.strip():
        return None
    return parse_strict_date(value)


class WorkItemPayload(BaseModel):
    """One raw record, accepting both the spaced and the camelCase key spelling."""

    model_config = ConfigDict(extra="ignore")

    id: int
    work_item_type: str = Field(
        min_length=1,
        validation_alias=AliasChoices("work item type", "workItemType"),
    )
    assigned_to: str | None = Field(
        default=None,
        validation_alias=AliasChoices("assigned to", "assignedTo"),
    )
    state: str = Field(min_length=1)
    created_date: datetime = Field(validation_alias=AliasChoices("created date", "createdDate"))
    activated_date: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("activated date", "activatedDate"),
    )
    closed_date: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("closed date", "closedDate"),
    )
    description: str | None = None
    title: str = Field(min_length=1)
    parent: str | None = None

    _normalize_references = field_validator("assigned_to", "parent", mode="before")(_blank_to_none)
    _parse_dates = field_validator(
        "created_date", "activated_date", "closed_date", mode="before"
    )(_parse_external_date)

    @field_validator("id", mode="before")
    @classmethod
    def _reject_boolean_id(cls, value: object) -> object:
        if isinstance(value, bool):
            raise ValueError("Work item id must be a number")
        return value

    @field_validator("work_item_type")
    @classmethod
    def _require_canonical_type(cls, value: str) -> str:
        if normalize_title(value) is None:
            raise ValueError("Work item type must contain visible characters")
        return value


_BATCH_ADAPTER: TypeAdapter[list[WorkItemPayload]] = TypeAdapter(
    Annotated[list[WorkItemPayload], Field(min_length=1)]
)


@dataclass(slots=True, frozen=True, kw_only=True)
class WorkItemRecord:
    """Typed record ready for reference resolution."""

    id: int
    work_item_type: str
    assigned_to: str | None
    state: str
    created_date: datetime
    activated_date: datetime | None
    closed_date: datetime | None
    title: str
    title_key: str | None
    description: str | None
    parent_key: str | None

    @classmethod
    def from_payload(cls, payload: WorkItemPayload) -> WorkItemRecord:
        return cls(
            id=payload.id,
            work_item_type=payload.work_item_type,
            assigned_to=payload.assigned_to,
            state=payload.state,
            created_date=payload.created_date,
            activated_date=payload.activated_date,
            closed_date=payload.closed_date,
            title=payload.title,
            title_key=normalize_title(payload.title),
            description=payload.description,
            parent_key=normalize_title(payload.parent),
        )


@dataclass(slots=True, frozen=True)
class ValidationIssue:
    path: str
    message: str
    code: str

    def as_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message, "code": self.code}


class BatchValidationError(ValueError):
    """Raised when any record of a batch fails validation; nothing is written."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        super().__init__(f"Invalid work item batch ({len(issues)} issue(s))")
        self.issues = issues

    @classmethod
    def from_pydantic(cls, error: ValidationError) -> BatchValidationError:
        issues = [
            ValidationIssue(
                path=format_issue_path(detail["loc"]),
                message=detail["msg"],
                code=detail["type"],
            )
            for detail in error.errors(include_url=False)
        ]
        return cls(issues)


def format_issue_path(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic location as ``items[0]."work item type"``."""

    parts = ["items"]
    for segment in loc:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        elif " " in segment:
            parts.append(f'."{segment}"')
        else:
            parts.append(f".{segment}")
    return "".join(parts)


def parse_batch(raw_items: Any) -> list[WorkItemRecord]:
    """Validate a whole batch; any invalid record rejects all of it."""

    try:
        payloads = _BATCH_ADAPTER.validate_python(raw_items)
    except ValidationError as exc:
        raise BatchValidationError.from_pydantic(exc) from exc
    return [WorkItemRecord.from_payload(payload) for payload in payloads]
