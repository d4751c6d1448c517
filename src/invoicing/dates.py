"""
Calendar helpers: ISO date parsing, range expansion and display formatting.
"""

import re
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Union

from .errors import InvalidDateError
from .schema import ExclusionPolicy

logger = logging.getLogger(__name__)

# Fixed English abbreviations so output never depends on the process locale
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

ISO_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')

DateLike = Union[date, datetime, str]


def parse_iso_date(value: DateLike) -> date:
    """Coerce a form value to a calendar date.

    ``datetime`` values keep their own calendar date (no timezone shift);
    strings must be ISO-8601 ``YYYY-MM-DD``.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not ISO_DATE_PATTERN.match(text):
            raise InvalidDateError(value)
        try:
            return date.fromisoformat(text)
        except ValueError:
            raise InvalidDateError(value) from None
    raise InvalidDateError(value)


def parse_excluded_dates(values: Iterable[DateLike]) -> frozenset:
    """Parse a collection of excluded dates, ignoring blanks."""
    return frozenset(parse_iso_date(v) for v in values if v not in (None, ""))


def expand_date_range(start: date, end: date, policy: ExclusionPolicy) -> List[date]:
    """List every eligible day from ``start`` to ``end`` inclusive, in order.

    An inverted range yields an empty list.
    """
    eligible = []
    current = start
    while current <= end:
        if policy.is_eligible(current):
            eligible.append(current)
        current += timedelta(days=1)

    logger.debug(
        "Expanded %s..%s to %d eligible dates (exclude_weekends=%s, excluded=%d)",
        start, end, len(eligible), policy.exclude_weekends, len(policy.excluded_dates),
    )
    return eligible


def format_invoice_date(value: DateLike) -> str:
    """Render a date as ``DD Mon YYYY``, e.g. ``05 Mar 2024``."""
    day = parse_iso_date(value)
    return f"{day.day:02d} {MONTH_ABBREVIATIONS[day.month - 1]} {day.year:04d}"
