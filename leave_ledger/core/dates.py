"""
Date-range normalization and inclusive day accounting.

Every place that orders a (start, end) pair or counts the days in it goes
through this module.
"""
from datetime import date, datetime
from typing import Any, Optional, Tuple

from leave_ledger.core.exceptions import ValidationError


def parse_date(value: Any) -> Optional[date]:
    """Coerce a date, datetime or ISO 'YYYY-MM-DD' string to a date; None if it can't be read."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def normalize(start: Any, end: Any = None) -> Tuple[date, date]:
    """
    Return (start, end) in ascending order.

    A missing or unreadable ``end`` defaults to ``start``. Reversed input is
    swapped, never rejected.

    Raises:
        ValidationError: If ``start`` is not a readable date.
    """
    start_date = parse_date(start)
    if start_date is None:
        raise ValidationError("A valid start date is required", details={"start_date": str(start)})
    end_date = parse_date(end) or start_date
    if end_date < start_date:
        return end_date, start_date
    return start_date, end_date


def duration(start: Any, end: Any) -> int:
    """Inclusive number of days between start and end, never negative. Unreadable input counts as 0."""
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date is None or end_date is None:
        return 0
    return max((end_date - start_date).days + 1, 0)


def overlaps(start: date, end: date, from_date: Optional[date], to_date: Optional[date]) -> bool:
    """True when [start, end] intersects [from_date, to_date]; a missing bound is open."""
    if from_date is not None and end < from_date:
        return False
    if to_date is not None and start > to_date:
        return False
    return True
