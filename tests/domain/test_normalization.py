from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from flowtrack.domain.normalization import (
    DateFormatError,
    day_truncate,
    normalize_title,
    parse_strict_date,
)


def test_normalize_title_folds_case_accents_and_whitespace() -> None:
    assert normalize_title("  Árvore   de  TÍTULO ") == "arvore de titulo"


def test_normalize_title_strips_enclosing_brackets() -> None:
    assert normalize_title("[Estoque]") == "estoque"


def test_normalize_title_strips_only_one_bracket_per_side() -> None:
    assert normalize_title("[[Estoque]]") == "[estoque]"


def test_normalize_title_keeps_inner_brackets() -> None:
    assert normalize_title("Ajuste [urgente] no login") == "ajuste [urgente] no login"


@pytest.mark.parametrize("value", [None, "", "   ", "[]"])
def test_normalize_title_returns_none_for_blank_results(value: str | None) -> None:
    assert normalize_title(value) is None


def test_parse_strict_date_reads_utc_instant() -> None:
    assert parse_strict_date("05-06-2025 11:03") == datetime(2025, 6, 5, 11, 3, tzinfo=UTC)


def test_parse_strict_date_allows_extra_spaces_between_date_and_time() -> None:
    assert parse_strict_date("05-06-2025   11:03") == datetime(2025, 6, 5, 11, 3, tzinfo=UTC)


@pytest.mark.parametrize(
    "value",
    [
        "2025-06-05 11:03",
        "5-6-2025 11:03",
        "05-06-2025",
        "05-06-2025 11:03:00",
        "05/06/2025 11:03",
        " 05-06-2025 11:03",
        "05-06-2025 11:03\n",
    ],
)
def test_parse_strict_date_rejects_other_shapes(value: str) -> None:
    with pytest.raises(DateFormatError):
        parse_strict_date(value)


def test_parse_strict_date_rejects_impossible_calendar_dates() -> None:
    with pytest.raises(DateFormatError, match="Invalid calendar date"):
        parse_strict_date("31-02-2025 10:00")


def test_date_format_error_is_a_value_error() -> None:
    assert issubclass(DateFormatError, ValueError)


def test_day_truncate_uses_the_utc_calendar_day() -> None:
    local = datetime(2025, 5, 5, 22, 30, tzinfo=timezone(timedelta(hours=-3)))

    assert day_truncate(local) == datetime(2025, 5, 6, tzinfo=UTC)


def test_day_truncate_treats_naive_values_as_utc() -> None:
    assert day_truncate(datetime(2025, 5, 5, 13, 45)) == datetime(2025, 5, 5, tzinfo=UTC)
