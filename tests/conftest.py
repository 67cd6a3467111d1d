from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from flowtrack import app as app_module
from flowtrack.adapters.sqlalchemy import start_mappers
from flowtrack.adapters.sqlalchemy.migrations import upgrade_head
from flowtrack.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup
from flowtrack.domain.holidays import HolidayDirectory
from tests.helpers.holidays import FakeHolidaySource, no_sleep

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("HOLIDAYS_HTTP_CACHE", "off")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # One shared connection so the in-memory database survives across sessions/threads.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def holiday_source() -> FakeHolidaySource:
    return FakeHolidaySource()


@pytest.fixture
def holiday_directory(holiday_source: FakeHolidaySource) -> Iterator[HolidayDirectory]:
    directory = HolidayDirectory(holiday_source, sleep=no_sleep)
    app_module.set_holiday_directory(directory)
    try:
        yield directory
    finally:
        app_module.set_holiday_directory(None)
