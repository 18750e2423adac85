"""Comma-decimal amount parsing."""

import re
from decimal import Decimal, InvalidOperation

ZERO = Decimal("0")

_NO_AMOUNT_TEXT = {"", "0", "0,00"}

# Leading number, as read by a float prefix parse ("200 DH" reads 200)
_NUMERIC_PREFIX = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+))")


def parse_amount(text: str | None) -> Decimal:
    """Parse the leading number of a comma-decimal amount.

    Only the first comma is read as the decimal separator. Text without a
    leading number, missing text and non-finite values count as zero.
    """
    if text is None:
        return ZERO
    match = _NUMERIC_PREFIX.match(text.replace(",", ".", 1))
    if match is None:
        return ZERO
    try:
        value = Decimal(match.group(1))
    except InvalidOperation:
        return ZERO
    if not value.is_finite():
        return ZERO
    return value


def is_no_amount(text: str | None) -> bool:
    """Check whether an amount text stands for "nothing charged"."""
    if text is None or text in _NO_AMOUNT_TEXT:
        return True
    return parse_amount(text) == ZERO
