"""Billing status derivation from a consultation amount."""

from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from ..config import DEFAULT_CONFIG
from ..schemas.common import BillingStatus
from .amounts import ZERO, is_no_amount, parse_amount

REFERENCE_PRICE = DEFAULT_CONFIG.reference_price

# Stored statuses that win over the amount-derived label
OVERRIDE_STATUSES = {BillingStatus.FREE.value, BillingStatus.UNPAID.value}


class StatusDerivation(NamedTuple):
    label: str
    reduction_rate: int | None = None


def reduction_rate(amount: Decimal, reference_price: Decimal = REFERENCE_PRICE) -> int:
    """Percentage discount of ``amount`` relative to the full reference price."""
    if amount == ZERO:
        return 0
    rate = (reference_price - amount) / reference_price * 100
    return int(rate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def reduction_label(rate: int) -> str:
    return f"Réduction ({rate}%)"


def status_for_amount(
    amount: Decimal, reference_price: Decimal = REFERENCE_PRICE
) -> StatusDerivation:
    """Derive the status of an already-parsed amount.

    Non-positive amounts carry no charge. Amounts at or above the reference
    price are "Payé", overpayments included.
    """
    if amount <= ZERO:
        return StatusDerivation(BillingStatus.NONE.value)
    if amount < reference_price:
        rate = reduction_rate(amount, reference_price)
        return StatusDerivation(reduction_label(rate), rate)
    return StatusDerivation(BillingStatus.PAID.value)


def derive_status(
    amount_text: str | None, reference_price: Decimal = REFERENCE_PRICE
) -> StatusDerivation:
    """Derive the status label and reduction rate for a stored amount text."""
    if is_no_amount(amount_text):
        return StatusDerivation(BillingStatus.NONE.value)
    return status_for_amount(parse_amount(amount_text), reference_price)


def resolve_status(
    amount_text: str | None,
    stored_status: str | None,
    reference_price: Decimal = REFERENCE_PRICE,
) -> str:
    """Stored status when present, otherwise the derived one."""
    if stored_status:
        return stored_status
    return derive_status(amount_text, reference_price).label


def display_status(
    amount_text: str | None,
    status: str | None,
    reference_price: Decimal = REFERENCE_PRICE,
) -> str:
    """Label shown for a record: free/unpaid overrides, else the amount decides."""
    if status in OVERRIDE_STATUSES:
        return status
    return derive_status(amount_text, reference_price).label


def status_tone(label: str) -> str:
    """Badge tone keyword for a status label."""
    if label == BillingStatus.FREE.value:
        return "gratuit"
    if label == BillingStatus.UNPAID.value:
        return "non_paye"
    if label.startswith("Réduction"):
        return "reduction"
    if label == BillingStatus.PAID.value:
        return "paye"
    return "none"
