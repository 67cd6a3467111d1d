"""Canonical forms for titles/names and the fixed external date format."""

from __future__ import annotations

import re
import unicodedata
from datetime import UTC, datetime
from typing import Final

EXTERNAL_DATE_FORMAT: Final[str] = "DD-MM-YYYY HH:mm"

_WHITESPACE_RE: Final = re.compile(r"\s+")
_STRICT_DATE_RE: Final = re.compile(
    r"(?P<day>\d{2})-(?P<month>\d{2})-(?P<year>\d{4})\s+(?P<hour>\d{2}):(?P<minute>\d{2})",
    re.ASCII,
)


class DateFormatError(ValueError):
    """Raised when a date string does not follow ``DD-MM-YYYY HH:mm``."""


def normalize_title(text: str | None) -> str | None:
    """Return the matching key for a title or display name.

    Lower-cases, drops diacritics, collapses whitespace runs, trims, then removes
    one leading ``[`` and one trailing ``]``. Blank input (or a result that ends up
    empty) yields ``None``.
    """

    if not text:
        return None
    decomposed = unicodedata.normalize("NFKD", text.lower())
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    collapsed = _WHITESPACE_RE.sub(" ", stripped).strip()
    collapsed = collapsed.removeprefix("[").removesuffix("]")
    return collapsed or None


def parse_strict_date(text: str) -> datetime:
    """Parse ``DD-MM-YYYY HH:mm`` into an aware UTC datetime."""

    match = _STRICT_DATE_RE.fullmatch(text)
    if match is None:
        raise DateFormatError(f"Invalid date format: {text!r} (expected {EXTERNAL_DATE_FORMAT})")
    try:
        return datetime(
            int(match["year"]),
            int(match["month"]),
            int(match["day"]),
            int(match["hour"]),
            int(match["minute"]),
            tzinfo=UTC,
        )
    except ValueError as exc:
        raise DateFormatError(f"Invalid calendar date: {text!r}") from exc


def day_truncate(instant: datetime) -> datetime:
    """Return midnight UTC of the day containing ``instant``."""

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=UTC)
    utc_instant = instant.astimezone(UTC)
    return utc_instant.replace(hour=0, minute=0, second=0, microsecond=0)
