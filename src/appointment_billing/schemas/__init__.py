"""Appointment billing schemas for records, edit buffers and display rows."""

from .common import (
    Appointment,
    BillingStatus,
    Mutuelle,
    MutuelleProvider,
    Patient,
    PaymentMethod,
)
from .records import BillingRow, CommitResult, EditBuffer, JoinedRecord

__all__ = [
    # Common
    "PaymentMethod",
    "MutuelleProvider",
    "BillingStatus",
    "Mutuelle",
    "Patient",
    "Appointment",
    # Derived
    "JoinedRecord",
    "EditBuffer",
    "BillingRow",
    "CommitResult",
]
