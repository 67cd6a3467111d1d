from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from flowtrack.app import (
    import_work_items,
    list_people,
    list_work_item_types,
    list_work_items,
)
from flowtrack.config import configure_logging, get_server_config
from flowtrack.domain.model import DimensionFilter, SortDirection, WorkItemFilter, WorkItemSort
from flowtrack.domain.reconciliation import BatchValidationError
from flowtrack.domain.reporting import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from flowtrack.domain.model import Dimension
    from flowtrack.domain.reporting import WorkItemPage

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track work items and their development time")
    subparsers = parser.add_subparsers(dest="command", required=True)

    importer = subparsers.add_parser("import", help="Import work items from a JSON file")
    importer.add_argument("file", type=Path, help="JSON file holding an array of work items")

    work_items = subparsers.add_parser("work-items", help="List work items as JSON")
    work_items.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_PAGE_SIZE,
        help=f"Page size between 1 and {MAX_PAGE_SIZE} (default: %(default)s)",
    )
    work_items.add_argument("--offset", type=int, default=0, help="Rows to skip")
    work_items.add_argument("--desc", action="store_true", help="Sort by id descending")
    work_items.add_argument("--state", type=str, help="Exact state to match")
    work_items.add_argument("--type", dest="work_item_type", type=str, help="Type name substring")
    work_items.add_argument("--assignee", type=str, help="Assignee name substring")
    work_items.add_argument("--title", type=str, help="Title substring")
    work_items.add_argument("--parent-id", type=int, help="Only children of this work item")
    work_items.add_argument(
        "--closed-from",
        type=str,
        help="ISO-8601 timestamp (UTC) marking the inclusive start of the closed window",
    )
    work_items.add_argument(
        "--closed-to",
        type=str,
        help="ISO-8601 timestamp (UTC) marking the inclusive end of the closed window",
    )
    closed_group = work_items.add_mutually_exclusive_group()
    closed_group.add_argument(
        "--closed",
        dest="is_closed",
        action="store_const",
        const=True,
        help="Only closed items",
    )
    closed_group.add_argument(
        "--open",
        dest="is_closed",
        action="store_const",
        const=False,
        help="Only open items",
    )

    for name, help_text in (("people", "List people"), ("work-item-types", "List work item types")):
        dimension = subparsers.add_parser(name, help=help_text)
        dimension.add_argument("--name", type=str, help="Name substring")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, help="Bind address (defaults to config)")
    serve.add_argument("--port", type=int, help="Bind port (defaults to config)")

    return parser.parse_args(list(argv))


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _build_filter(args: argparse.Namespace) -> WorkItemFilter:
    if not 1 <= args.limit <= MAX_PAGE_SIZE:
        raise ValueError(f"--limit must be between 1 and {MAX_PAGE_SIZE}")
    if args.offset < 0:
        raise ValueError("--offset must be non-negative")
    return WorkItemFilter(
        state=args.state,
        work_item_type=args.work_item_type,
        assigned_to=args.assignee,
        title_contains=args.title,
        parent_id=args.parent_id,
        closed_from=_parse_iso_datetime(args.closed_from) if args.closed_from else None,
        closed_to=_parse_iso_datetime(args.closed_to) if args.closed_to else None,
        is_closed=args.is_closed,
    )


def _load_items(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot read work items from {path}: {exc}") from exc


def _page_as_dict(page: WorkItemPage) -> dict[str, object]:
    summary = page.summary
    return {
        "items": [
            {
                "id": view.id,
                "workItemTypeId": str(view.work_item_type_id),
                "workItemType": view.work_item_type,
                "state": view.state,
                "title": view.title,
                "createdDate": view.created_date.isoformat(),
                "activatedDate": view.activated_date.isoformat() if view.activated_date else None,
                "closedDate": view.closed_date.isoformat() if view.closed_date else None,
                "assignedToId": str(view.assigned_to_id) if view.assigned_to_id else None,
                "assignedTo": view.assigned_to,
                "parentId": view.parent_id,
                "developmentBusinessDays": view.development_business_days,
            }
            for view in page.items
        ],
        "total": page.total,
        "summary": {
            "total": summary.total,
            "closed": summary.closed,
            "avgDevelopmentBusinessDays": summary.avg_development_business_days,
        },
    }


def _dimensions_as_dict(rows: Sequence[Dimension]) -> dict[str, object]:
    return {"items": [{"id": str(row.id), "name": row.name} for row in rows]}


def _emit(payload: object) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


def _serve(args: argparse.Namespace) -> None:
    import uvicorn  # noqa: PLC0415

    from flowtrack.ui.http import create_app  # noqa: PLC0415

    server = get_server_config()
    uvicorn.run(create_app(), host=args.host or server.host, port=args.port or server.port)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        criteria = _build_filter(parsed_args) if parsed_args.command == "work-items" else None
        raw_items = _load_items(parsed_args.file) if parsed_args.command == "import" else None
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "import":
            result = import_work_items(raw_items)
            _emit(result.as_dict())
        elif parsed_args.command == "work-items":
            direction = SortDirection.DESC if parsed_args.desc else SortDirection.ASC
            page = list_work_items(
                criteria=criteria,
                limit=parsed_args.limit,
                offset=parsed_args.offset,
                sort=WorkItemSort(direction=direction),
            )
            _emit(_page_as_dict(page))
        elif parsed_args.command == "people":
            rows = list_people(criteria=DimensionFilter(name_contains=parsed_args.name))
            _emit(_dimensions_as_dict(rows))
        elif parsed_args.command == "work-item-types":
            rows = list_work_item_types(criteria=DimensionFilter(name_contains=parsed_args.name))
            _emit(_dimensions_as_dict(rows))
        elif parsed_args.command == "serve":
            _serve(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except BatchValidationError as exc:
        for issue in exc.issues:
            log.error("%s: %s (%s)", issue.path, issue.message, issue.code)  # noqa: TRY400
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
