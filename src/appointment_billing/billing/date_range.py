"""Inclusive calendar-date range filter."""

from datetime import date, datetime

from ..schemas.records import JoinedRecord
from .joiner import parse_timestamp


def parse_date(value: str | date | None) -> date | None:
    """Parse a date value that may be string or date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def in_date_range(
    record: JoinedRecord,
    start_date: str | date | None,
    end_date: str | date | None,
) -> bool:
    """Check a record's appointment day against ``[start_date, end_date]``.

    The day is the timestamp's own calendar date, without timezone
    conversion. Either bound missing disables the filter.
    """
    start = parse_date(start_date)
    end = parse_date(end_date)
    if start is None or end is None:
        return True

    timestamp = parse_timestamp(record.appointment.time)
    if timestamp is None:
        return False
    return start <= timestamp.date() <= end
