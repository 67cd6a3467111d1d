from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta, timezone
from uuid import uuid4

from flowtrack.domain.model import WorkItem
from flowtrack.domain.reconciliation import ImportAction, ImportResult, classify, plan_import

TYPE_ID = uuid4()


def _item(item_id: int = 1, **overrides: object) -> WorkItem:
    item = WorkItem(
        id=item_id,
        work_item_type_id=TYPE_ID,
        state="Active",
        created_date=datetime(2025, 5, 5, 9, tzinfo=UTC),
        title="Example",
    )
    return replace(item, **overrides)


def test_missing_item_is_inserted() -> None:
    assert classify(_item(), None) is ImportAction.INSERT


def test_identical_item_is_ignored() -> None:
    assert classify(_item(), _item()) is ImportAction.IGNORE


def test_bookkeeping_columns_are_not_compared() -> None:
    stored = _item(created_at=datetime(2020, 1, 1, tzinfo=UTC), updated_at=datetime.now(UTC))

    assert classify(_item(), stored) is ImportAction.IGNORE


def test_same_instant_in_another_offset_is_unchanged() -> None:
    brasilia = timezone(timedelta(hours=-3))
    stored = _item(created_date=datetime(2025, 5, 5, 6, tzinfo=brasilia))

    assert classify(_item(), stored) is ImportAction.IGNORE


def test_one_changed_field_is_an_update() -> None:
    incoming = _item(state="Closed")

    assert classify(incoming, _item()) is ImportAction.UPDATE
    assert incoming.changed_fields(_item()) == ("state",)


def test_clearing_a_field_is_an_update() -> None:
    stored = _item(description="old notes")

    assert classify(_item(), stored) is ImportAction.UPDATE


def test_plan_import_partitions_the_batch() -> None:
    existing = {2: _item(2), 3: _item(3)}
    items = [_item(1), _item(2), _item(3, title="Renamed")]

    plan = plan_import(items, existing)

    assert [item.id for item in plan.inserts] == [1]
    assert [item.id for item in plan.ignored] == [2]
    assert [item.id for item in plan.updates] == [3]


def test_import_result_as_dict() -> None:
    assert ImportResult(inserted=1, updated=2, ignored=3).as_dict() == {
        "inserted": 1,
        "updated": 2,
        "ignored": 3,
    }
