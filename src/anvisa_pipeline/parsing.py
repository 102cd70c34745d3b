"""Total parsers for the free-text date and duration fields.

None of these helpers raise: malformed input maps to ``None`` so callers can
exclude the record from date- or duration-dependent statistics.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime

log = logging.getLogger(__name__)

# Leading decimal number, the way the export's duration column is read
_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_publication_date(value: str | None) -> date | None:
    """Parse an ISO-8601 date or datetime string into a calendar `date`.

    Accepts the ISO-8601 forms `datetime.fromisoformat` reads on Python
    3.11+, including a ``Z`` suffix and fractional seconds.

    Args:
        value: Raw field value (``"2024-01-15"``, ``"2024-01-15T10:00:00.000Z"``...).

    Returns:
        The calendar day, or ``None`` for blank or malformed input.
    """
    if not value or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        log.debug("Invalid date format: %r", text)
        return None


def parse_duration(value: str | None) -> float | None:
    """Parse a processing duration, keeping only strictly positive values.

    The leading numeric part of the string is used (``"12 dias"`` reads as
    12), so trailing units or notes do not discard the value.

    Returns:
        The duration in days, or ``None`` when absent, non-numeric,
        non-finite, zero or negative.
    """
    if not value:
        return None
    match = _NUMBER_PREFIX.match(value)
    if match is None:
        return None
    number = float(match.group(0))
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def month_key(day: date) -> str:
    """Return the ``YYYY-MM`` timeline key for a day."""
    return f"{day.year:04d}-{day.month:02d}"


def year_key(day: date) -> str:
    """Return the ``YYYY`` timeline key for a day."""
    return f"{day.year:04d}"
