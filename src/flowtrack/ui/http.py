"""HTTP interface built on FastAPI.

Endpoints are plain ``def`` functions so FastAPI runs them in its threadpool, where
the synchronous storage layer and the holiday lookups can block freely.
"""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Annotated, Any
from uuid import UUID  # noqa: TC003

from fastapi import Body, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError

from flowtrack import __version__, app as services
from flowtrack.domain.model import (
    DimensionFilter,
    SortDirection,
    WorkItemFilter,
    WorkItemSort,
    WorkItemSortField,
)
from flowtrack.domain.reconciliation import (
    BatchValidationError,
    ValidationIssue,
    format_issue_path,
)
from flowtrack.domain.reporting import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

if TYPE_CHECKING:
    from collections.abc import Mapping

    from flowtrack.app import UnitOfWorkFactory
    from flowtrack.domain.holidays import HolidayDirectory

log = getLogger(__name__)


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ImportResultResponse(ApiModel):
    inserted: int
    updated: int
    ignored: int


class WorkItemResponse(ApiModel):
    id: int
    work_item_type_id: UUID
    work_item_type: str | None
    state: str
    created_date: datetime
    activated_date: datetime | None
    closed_date: datetime | None
    title: str
    description: str | None
    assigned_to_id: UUID | None
    assigned_to: str | None
    parent_id: int | None
    created_at: datetime | None
    updated_at: datetime | None
    development_business_days: int | None


class WorkItemSummaryResponse(ApiModel):
    total: int
    closed: int
    avg_development_business_days: int | None


class WorkItemPageResponse(ApiModel):
    items: list[WorkItemResponse]
    total: int
    summary: WorkItemSummaryResponse


class DimensionResponse(ApiModel):
    id: UUID
    name: str
    name_normalized: str
    created_at: datetime | None


class DimensionListResponse(ApiModel):
    items: list[DimensionResponse]


class HealthResponse(ApiModel):
    status: str
    now: datetime


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def _body_issue(detail: Mapping[str, Any]) -> ValidationIssue:
    """Report a request body error with the same shape as a batch validation issue."""

    loc = tuple(detail.get("loc", ()))
    if loc[:1] == ("body",):
        loc = loc[1:]
    code = str(detail.get("type", "value_error"))
    # A syntax error location is a character offset, not an item index.
    path = "items" if code == "json_invalid" else format_issue_path(loc)
    return ValidationIssue(path=path, message=str(detail.get("msg", "")), code=code)


def create_app(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    holiday_directory: HolidayDirectory | None = None,
) -> FastAPI:
    """Build the HTTP application; the arguments override the default adapters."""

    api = FastAPI(title="flowtrack", version=__version__)

    @api.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        if request.method == "POST":
            issues = [_body_issue(detail) for detail in exc.errors()]
            return JSONResponse(
                status_code=400,
                content={"error": "Invalid input", "errors": [issue.as_dict() for issue in issues]},
            )
        details = jsonable_encoder(exc.errors())
        return JSONResponse(status_code=400, content={"error": "invalid_query", "details": details})

    @api.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok", now=datetime.now(UTC))

    @api.get("/ready", response_model=None)
    def ready() -> JSONResponse:
        try:
            services.check_database()
        except (SQLAlchemyError, RuntimeError):
            log.warning("Readiness check failed", exc_info=True)
            return JSONResponse(
                status_code=503,
                content={"status": "degraded", "error": "database_unreachable"},
            )
        return JSONResponse(status_code=200, content={"status": "ready"})

    @api.post("/work-items/import", response_model=ImportResultResponse)
    def import_work_items(payload: Annotated[Any, Body()] = None) -> Any:
        try:
            result = services.import_work_items(payload, unit_of_work_factory=unit_of_work_factory)
        except BatchValidationError as exc:
            return JSONResponse(
                status_code=400,
                content={
                    "error": "Invalid input",
                    "errors": [issue.as_dict() for issue in exc.issues],
                },
            )
        except Exception:
            log.exception("Work item import failed")
            return JSONResponse(status_code=500, content={"error": "internal_error"})
        return ImportResultResponse.model_validate(result)

    @api.get("/work-items", response_model=WorkItemPageResponse)
    def list_work_items(  # noqa: PLR0913
        limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
        offset: Annotated[int, Query(ge=0)] = 0,
        sort_by: Annotated[WorkItemSortField, Query(alias="sortBy")] = WorkItemSortField.ID,
        sort_dir: Annotated[SortDirection, Query(alias="sortDir")] = SortDirection.ASC,
        id: int | None = None,  # noqa: A002
        parent_id: Annotated[int | None, Query(alias="parentId")] = None,
        work_item_type: Annotated[str | None, Query(alias="workItemType", min_length=1)] = None,
        work_item_type_id: Annotated[UUID | None, Query(alias="workItemTypeId")] = None,
        state: Annotated[str | None, Query(min_length=1)] = None,
        assigned_to_id: Annotated[UUID | None, Query(alias="assignedToId")] = None,
        assigned_to: Annotated[str | None, Query(alias="assignedTo", min_length=1)] = None,
        title_contains: Annotated[str | None, Query(alias="titleContains", min_length=1)] = None,
        created_from: Annotated[datetime | None, Query(alias="createdFrom")] = None,
        created_to: Annotated[datetime | None, Query(alias="createdTo")] = None,
        activated_from: Annotated[datetime | None, Query(alias="activatedFrom")] = None,
        activated_to: Annotated[datetime | None, Query(alias="activatedTo")] = None,
        closed_from: Annotated[datetime | None, Query(alias="closedFrom")] = None,
        closed_to: Annotated[datetime | None, Query(alias="closedTo")] = None,
        is_closed: Annotated[bool | None, Query(alias="isClosed")] = None,
        has_parent: Annotated[bool | None, Query(alias="hasParent")] = None,
    ) -> Any:
        criteria = WorkItemFilter(
            id=id,
            parent_id=parent_id,
            work_item_type=work_item_type,
            work_item_type_id=work_item_type_id,
            state=state,
            assigned_to_id=assigned_to_id,
            assigned_to=assigned_to,
            title_contains=title_contains,
            created_from=_as_utc(created_from),
            created_to=_as_utc(created_to),
            activated_from=_as_utc(activated_from),
            activated_to=_as_utc(activated_to),
            closed_from=_as_utc(closed_from),
            closed_to=_as_utc(closed_to),
            is_closed=is_closed,
            has_parent=has_parent,
        )
        try:
            page = services.list_work_items(
                criteria=criteria,
                limit=limit,
                offset=offset,
                sort=WorkItemSort(field=sort_by, direction=sort_dir),
                unit_of_work_factory=unit_of_work_factory,
                holiday_directory=holiday_directory,
            )
        except Exception:
            log.exception("Work item listing failed")
            return JSONResponse(status_code=500, content={"error": "internal_error"})
        return WorkItemPageResponse.model_validate(page)

    @api.get("/people", response_model=DimensionListResponse)
    def list_people(
        id: UUID | None = None,  # noqa: A002
        name: Annotated[str | None, Query(min_length=1)] = None,
    ) -> Any:
        try:
            people = services.list_people(
                criteria=DimensionFilter(id=id, name_contains=name),
                unit_of_work_factory=unit_of_work_factory,
            )
        except Exception:
            log.exception("People listing failed")
            return JSONResponse(status_code=500, content={"error": "internal_error"})
        return DimensionListResponse(
            items=[DimensionResponse.model_validate(person) for person in people]
        )

    @api.get("/work-item-types", response_model=DimensionListResponse)
    def list_work_item_types(
        id: UUID | None = None,  # noqa: A002
        name: Annotated[str | None, Query(min_length=1)] = None,
    ) -> Any:
        try:
            work_item_types = services.list_work_item_types(
                criteria=DimensionFilter(id=id, name_contains=name),
                unit_of_work_factory=unit_of_work_factory,
            )
        except Exception:
            log.exception("Work item type listing failed")
            return JSONResponse(status_code=500, content={"error": "internal_error"})
        return DimensionListResponse(
            items=[DimensionResponse.model_validate(entry) for entry in work_item_types]
        )

    return api
