"""Join appointments to their patients and order them for display."""

from datetime import datetime

from ..schemas.common import Appointment, Patient
from ..schemas.records import JoinedRecord


def join_records(
    appointments: list[Appointment], patients: list[Patient]
) -> list[JoinedRecord]:
    """Attach each appointment's patient, dropping appointments without one.

    Output keeps appointment order.
    """
    patients_by_id = {p.id: p for p in patients}
    joined: list[JoinedRecord] = []
    for appointment in appointments:
        patient = patients_by_id.get(appointment.patient_id)
        if patient is None:
            continue
        joined.append(JoinedRecord(appointment=appointment, patient=patient))
    return joined


def sort_by_time_desc(records: list[JoinedRecord]) -> list[JoinedRecord]:
    """Most recent first. Stable for equal timestamps; unparsable times go last."""

    def _key(record: JoinedRecord) -> tuple[int, datetime]:
        instant = _sortable_instant(parse_timestamp(record.appointment.time))
        if instant is None:
            return (0, datetime.min)
        return (1, instant)

    # reverse=True keeps equal keys in input order
    return sorted(records, key=_key, reverse=True)


def _sortable_instant(parsed: datetime | None) -> datetime | None:
    """Naive datetime for ordering: aware values shifted to UTC, naive ones as written."""
    if parsed is None or parsed.utcoffset() is None:
        return parsed
    try:
        return parsed.replace(tzinfo=None) - parsed.utcoffset()
    except OverflowError:
        return None


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None when it cannot be read."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except (ValueError, TypeError):
        return None
