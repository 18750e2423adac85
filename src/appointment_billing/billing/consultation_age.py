"""Human-readable age of the last paid consultation."""

from datetime import datetime

from dateutil.relativedelta import relativedelta

from .amounts import is_no_amount
from .formatters import AmountFormatter, amount
from .joiner import parse_timestamp


def format_last_consultation(
    last_consult_amount: str | None,
    consultation_date: str | None,
    now: datetime | None = None,
    formatter: AmountFormatter = amount,
) -> str:
    """Render ``<amount> - depuis <n> jours|mois`` for a prior paid consultation.

    Returns ``"-"`` when there is no prior amount or the date is unreadable.
    """
    if is_no_amount(last_consult_amount):
        return "-"

    consulted_at = parse_timestamp(consultation_date)
    if consulted_at is None:
        return "-"

    if now is None:
        now = datetime.now(consulted_at.tzinfo)
    elif (now.tzinfo is None) != (consulted_at.tzinfo is None):
        # Compare on wall-clock time when only one side carries an offset
        now = now.replace(tzinfo=consulted_at.tzinfo)

    delta = relativedelta(now, consulted_at)
    months = delta.years * 12 + delta.months
    days = (now - consulted_at).days

    rendered = formatter(last_consult_amount)
    if months < 1:
        if days <= 1:
            return f"{rendered} - depuis 1 jour"
        return f"{rendered} - depuis {days} jours"
    if months == 1:
        return f"{rendered} - depuis 1 mois"
    return f"{rendered} - depuis {months} mois"
