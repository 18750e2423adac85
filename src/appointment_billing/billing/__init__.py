"""Billing engine: join, search and date filtering of appointment records."""

import logging
from datetime import date

from ..schemas.common import Appointment, Patient
from ..schemas.records import JoinedRecord
from .amounts import is_no_amount, parse_amount
from .consultation_age import format_last_consultation
from .date_range import in_date_range
from .joiner import join_records, sort_by_time_desc
from .rows import build_billing_rows
from .search import matches_query
from .status import derive_status, display_status, reduction_rate, resolve_status

logger = logging.getLogger(__name__)

__all__ = [
    "run_filter_pipeline",
    "join_records",
    "sort_by_time_desc",
    "matches_query",
    "in_date_range",
    "derive_status",
    "resolve_status",
    "display_status",
    "reduction_rate",
    "parse_amount",
    "is_no_amount",
    "format_last_consultation",
    "build_billing_rows",
]


def run_filter_pipeline(
    appointments: list[Appointment],
    patients: list[Patient],
    search_text: str = "",
    start_date: str | date | None = None,
    end_date: str | date | None = None,
) -> list[JoinedRecord]:
    """Join, sort and filter appointments into the displayed record set.

    Pure over its inputs: the same inputs always give the same list.
    - Join: appointments without a known patient are dropped
    - Sort: most recent appointment first
    - Filter: search tokens AND inclusive date range
    """
    joined = sort_by_time_desc(join_records(appointments, patients))
    dropped = len(appointments) - len(joined)
    if dropped:
        logger.debug("Dropped %d appointment(s) with unknown patient", dropped)

    filtered = [
        record
        for record in joined
        if matches_query(record, search_text)
        and in_date_range(record, start_date, end_date)
    ]
    logger.debug("Filter pipeline kept %d of %d record(s)", len(filtered), len(joined))
    return filtered
