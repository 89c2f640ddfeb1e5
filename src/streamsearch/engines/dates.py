"""Date normalization for extracted results."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

from streamsearch.core.config import settings
from streamsearch.engines.schemas import SearchResultDate

RELATIVE_DATE = re.compile(
    r"^(?P<amount>\d+)\s+(?P<unit>second|minute|hour|day|week|month|year)s?\s+ago$",
    re.IGNORECASE,
)


def _unit_seconds(unit: str) -> int:
    """Seconds per relative-date unit.

    Months and years are fixed approximations taken from settings, not
    calendar arithmetic.
    """
    day = 86400
    match unit:
        case "second":
            return 1
        case "minute":
            return 60
        case "hour":
            return 3600
        case "day":
            return day
        case "week":
            return 7 * day
        case "month":
            return settings.relative_month_days * day
        case "year":
            return settings.relative_year_days * day
    raise ValueError(f"Unknown relative date unit: {unit}")


def parse_absolute_date(text: str, date_format: str) -> datetime | None:
    """Parse an absolute date with an engine's strptime format, as UTC."""
    try:
        parsed = datetime.strptime(text, date_format)
    except ValueError:
        return None
    return parsed.replace(tzinfo=UTC)


def parse_relative_date(text: str, now: datetime) -> datetime | None:
    """Parse "<n> <unit> ago" against the given wall-clock time.

    Args:
        text: The relative expression, e.g. "3 days ago".
        now: The extraction wall-clock time.

    Returns:
        ``now`` minus the offset, or None if the text is not relative.
    """
    match = RELATIVE_DATE.match(text.strip())
    if not match:
        return None

    seconds = int(match.group("amount")) * _unit_seconds(match.group("unit").lower())
    try:
        return now - timedelta(seconds=seconds)
    except OverflowError:
        return None


def parse_result_date(
    text: str | None,
    date_format: str | None,
    now: datetime,
) -> SearchResultDate | None:
    """Normalize an extracted date string.

    The absolute format is tried first, then the relative form. Text that
    matches neither yields None rather than an error.
    """
    if not text:
        return None

    text = text.strip()
    if date_format:
        absolute = parse_absolute_date(text, date_format)
        if absolute is not None:
            return SearchResultDate(timestamp=absolute, is_relative=False)

    relative = parse_relative_date(text, now)
    if relative is not None:
        return SearchResultDate(timestamp=relative, is_relative=True, reference_time=now)

    return None
