from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from flowtrack import app as app_module
from flowtrack.ui.http import create_app
from tests.helpers.work_items import FakeStore, make_raw_item

if TYPE_CHECKING:
    from collections.abc import Callable

    from flowtrack.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
    from flowtrack.domain.holidays import HolidayDirectory


@pytest.fixture
def client(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
    holiday_directory: HolidayDirectory,
) -> TestClient:
    api = create_app(
        unit_of_work_factory=sqlite_unit_of_work,
        holiday_directory=holiday_directory,
    )
    return TestClient(api)


def _seed(client: TestClient) -> None:
    response = client.post(
        "/work-items/import",
        json=[
            make_raw_item(1, title="Checkout", state="Closed", closed="09-05-2025 18:00"),
            make_raw_item(2, title="Carrinho", parent="checkout", work_item_type="Bug"),
            make_raw_item(3, title="Login", assigned_to="Bruno Lima", camel_case=True),
        ],
    )
    assert response.status_code == 200


def test_health_reports_ok(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "now" in response.json()


def test_ready_when_database_answers(client: TestClient) -> None:
    response = client.get("/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


def test_ready_degrades_when_database_fails(
    client: TestClient,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def unreachable() -> None:
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(app_module, "check_database", unreachable)

    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json() == {"status": "degraded", "error": "database_unreachable"}


def test_import_reports_counts(client: TestClient) -> None:
    batch = [make_raw_item(1), make_raw_item(2, title="Second")]

    first = client.post("/work-items/import", json=batch)
    second = client.post("/work-items/import", json=batch)

    assert first.json() == {"inserted": 2, "updated": 0, "ignored": 0}
    assert second.json() == {"inserted": 0, "updated": 0, "ignored": 2}


def test_import_rejects_invalid_records_with_paths(client: TestClient) -> None:
    raw = make_raw_item(1)
    del raw["work item type"]

    response = client.post("/work-items/import", json=[raw])

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid input"
    assert body["errors"][0]["path"] == 'items[0]."work item type"'


@pytest.mark.parametrize("payload", [[], {"id": 1}])
def test_import_requires_a_non_empty_array(client: TestClient, payload: object) -> None:
    response = client.post("/work-items/import", json=payload)

    assert response.status_code == 400
    assert response.json()["errors"][0]["path"] == "items"


def test_import_rejects_malformed_json(client: TestClient) -> None:
    response = client.post(
        "/work-items/import",
        content=b"[{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid input"
    errors = response.json()["errors"]
    assert len(errors) == 1
    assert errors[0]["path"] == "items"
    assert errors[0]["code"] == "json_invalid"
    assert set(errors[0]) == {"path", "message", "code"}


def test_import_failure_is_an_internal_error(holiday_directory: HolidayDirectory) -> None:
    store = FakeStore()
    store.work_items.fail_on = "insert"
    api = create_app(unit_of_work_factory=store.unit_of_work, holiday_directory=holiday_directory)

    response = TestClient(api).post("/work-items/import", json=[make_raw_item(1)])

    assert response.status_code == 500
    assert response.json() == {"error": "internal_error"}


def test_list_work_items_uses_camel_case(client: TestClient) -> None:
    _seed(client)

    response = client.get("/work-items", params={"limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert [item["id"] for item in body["items"]] == [1, 2]
    first = body["items"][0]
    assert first["developmentBusinessDays"] == 5
    assert first["closedDate"].startswith("2025-05-09T18:00:00")
    assert body["items"][1]["parentId"] == 1
    assert body["items"][1]["workItemType"] == "Bug"
    assert body["items"][1]["assignedTo"] == "Ana Souza"
    assert body["summary"] == {"total": 3, "closed": 1, "avgDevelopmentBusinessDays": 5}


def test_list_work_items_filters(client: TestClient) -> None:
    _seed(client)

    open_items = client.get("/work-items", params={"isClosed": "false", "sortDir": "desc"})
    bugs = client.get("/work-items", params={"workItemType": "BUG"})
    assigned = client.get("/work-items", params={"assignedTo": "bruno"})
    closed_window = client.get(
        "/work-items",
        params={"closedFrom": "2025-05-09T00:00:00", "closedTo": "2025-05-09T23:59:59Z"},
    )

    assert [item["id"] for item in open_items.json()["items"]] == [3, 2]
    assert [item["id"] for item in bugs.json()["items"]] == [2]
    assert [item["id"] for item in assigned.json()["items"]] == [3]
    assert [item["id"] for item in closed_window.json()["items"]] == [1]


@pytest.mark.parametrize(
    "params",
    [{"limit": "0"}, {"limit": "201"}, {"offset": "-1"}, {"sortDir": "sideways"}, {"id": "x"}],
)
def test_list_work_items_rejects_bad_queries(client: TestClient, params: dict[str, str]) -> None:
    response = client.get("/work-items", params=params)

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_query"
    assert response.json()["details"]


def test_list_failure_is_an_internal_error(holiday_directory: HolidayDirectory) -> None:
    def broken_factory() -> SqlAlchemyUnitOfWork:
        raise RuntimeError("database gone")

    api = create_app(unit_of_work_factory=broken_factory, holiday_directory=holiday_directory)

    response = TestClient(api).get("/work-items")

    assert response.status_code == 500
    assert response.json() == {"error": "internal_error"}


def test_reference_endpoints(client: TestClient) -> None:
    _seed(client)

    people = client.get("/people").json()["items"]
    types = client.get("/work-item-types", params={"name": "story"}).json()["items"]
    by_id = client.get("/people", params={"id": people[0]["id"]}).json()["items"]

    assert [person["name"] for person in people] == ["Ana Souza", "Bruno Lima"]
    assert people[0]["nameNormalized"] == "ana souza"
    assert [entry["name"] for entry in types] == ["User Story"]
    assert by_id == people[:1]


def test_reference_endpoints_reject_blank_names(client: TestClient) -> None:
    response = client.get("/people", params={"name": ""})

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_query"
