"""Ledger date parsing.

Transaction dates are the ordering key of the ledger, so every value must be
comparable with every other. Plain dates become midnight; timezone-aware
values are converted to UTC and made naive.
"""

from __future__ import annotations

from datetime import date, datetime, timezone


def parse_ledger_date(value: str | date | datetime) -> datetime:
    """Parse an ISO-8601 date or date-time into a naive UTC datetime.

    Args:
        value: ISO string ("2024-01-15", "2024-01-15T10:30:00Z", ...),
            ``date`` or ``datetime``.

    Returns:
        Naive datetime (UTC when the input carried an offset).

    Raises:
        ValueError: If the string is not ISO-8601.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty date")
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unsupported date value: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
