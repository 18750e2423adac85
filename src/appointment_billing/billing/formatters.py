"""Default display formatters for amounts, patient codes and names.

The presentation layer may pass its own locale-aware callables instead.
"""

from collections.abc import Callable
from decimal import ROUND_HALF_UP, Decimal

from ..config import DEFAULT_CONFIG
from ..schemas.common import Mutuelle
from .amounts import is_no_amount, parse_amount

AmountFormatter = Callable[[str], str]
PatientCodeFormatter = Callable[[str | None], str]

_TWO_PLACES = Decimal("0.01")


def amount(text: str, currency: str = DEFAULT_CONFIG.currency) -> str:
    """Render a comma-decimal amount as ``1 250,00 DH``."""
    value = parse_amount(text).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    rendered = f"{value:,.2f}".replace(",", " ").replace(".", ",")
    return f"{rendered} {currency}" if currency else rendered


def patient_number(code: str | None) -> str:
    """Trimmed patient code, or "-" when there is none."""
    if code is None or not str(code).strip():
        return "-"
    return str(code).strip()


def patient_name(nom: str | None, prenom: str | None) -> str:
    """``DUPONT Jean`` style name, empty when either part is missing."""
    if not nom or not prenom:
        return ""
    return f"{nom.upper()} {prenom[:1].upper()}{prenom[1:].lower()}"


def amount_display(text: str | None, formatter: AmountFormatter = amount) -> str:
    """Formatted amount, or "-" when nothing was charged."""
    if is_no_amount(text):
        return "-"
    return formatter(text)


def mutuelle_display(mutuelle: Mutuelle | None) -> str:
    """``Oui - <provider>`` for an active attestation, else ``Non``."""
    if mutuelle is not None and mutuelle.active:
        return f"Oui - {mutuelle.nom}"
    return "Non"
