"""Application orchestration entry points."""

from __future__ import annotations

import threading
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import text

from flowtrack.adapters.brasilapi import build_brasilapi_holiday_source
from flowtrack.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    configured_engine,
    ensure_started,
)
from flowtrack.config import get_holiday_config
from flowtrack.domain import reporting
from flowtrack.domain.holidays import HolidayDirectory
from flowtrack.domain.ports.unit_of_work import WorkItemUnitOfWork
from flowtrack.domain.reconciliation import import_work_items as import_batch

if TYPE_CHECKING:
    from flowtrack.domain.model import (
        DimensionFilter,
        Person,
        WorkItemFilter,
        WorkItemSort,
        WorkItemType,
    )
    from flowtrack.domain.reconciliation import ImportResult
    from flowtrack.domain.reporting import WorkItemPage

UnitOfWorkFactory = Callable[[], WorkItemUnitOfWork]

log = getLogger(__name__)

_directory_lock = threading.Lock()
_holiday_directory: HolidayDirectory | None = None


def get_holiday_directory() -> HolidayDirectory:
    """Return the process-wide holiday directory, building it on first use."""

    global _holiday_directory  # noqa: PLW0603
    with _directory_lock:
        if _holiday_directory is None:
            config = get_holiday_config()
            _holiday_directory = HolidayDirectory(
                build_brasilapi_holiday_source(config),
                retry_delay_seconds=config.retry_delay_seconds,
            )
        return _holiday_directory


def set_holiday_directory(directory: HolidayDirectory | None) -> None:
    """Replace (or with ``None`` reset) the process-wide holiday directory."""

    global _holiday_directory  # noqa: PLW0603
    with _directory_lock:
        _holiday_directory = directory


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    ensure_started()
    return SqlAlchemyUnitOfWork


def import_work_items(
    raw_items: Any,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ImportResult:
    """Import a batch of raw work item records into the configured store."""

    result = import_batch(
        raw_items,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
    )
    log.info(
        "Finished work item import: inserted=%s, updated=%s, ignored=%s",
        result.inserted,
        result.updated,
        result.ignored,
    )
    return result


def list_work_items(
    *,
    criteria: WorkItemFilter | None = None,
    limit: int = reporting.DEFAULT_PAGE_SIZE,
    offset: int = 0,
    sort: WorkItemSort | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    holiday_directory: HolidayDirectory | None = None,
) -> WorkItemPage:
    return reporting.list_work_items(
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        holiday_directory=holiday_directory or get_holiday_directory(),
        criteria=criteria,
        limit=limit,
        offset=offset,
        sort=sort,
    )


def list_people(
    *,
    criteria: DimensionFilter | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[Person]:
    return reporting.list_people(
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        criteria=criteria,
    )


def list_work_item_types(
    *,
    criteria: DimensionFilter | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[WorkItemType]:
    return reporting.list_work_item_types(
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        criteria=criteria,
    )


def check_database() -> None:
    """Round-trip a trivial query; raises if the database is unreachable."""

    ensure_started()
    engine = configured_engine()
    if engine is None:
        raise RuntimeError("Database engine not configured")
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
