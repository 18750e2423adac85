"""Derived records produced by the filter pipeline and the edit session."""

from typing import Any

from pydantic import BaseModel, Field

from .common import Appointment, Mutuelle, Patient


class JoinedRecord(BaseModel):
    """An appointment together with its resolved patient."""

    appointment: Appointment
    patient: Patient


class EditBuffer(BaseModel):
    """Working copy of the editable fields of one appointment."""

    amount: str = ""
    status: str = "-"
    payment_method: str = "-"
    mutuelle: Mutuelle = Field(default_factory=Mutuelle)


class BillingRow(BaseModel):
    """Display-ready billing row."""

    appointment_id: str
    patient_number: str
    patient_name: str
    amount_display: str
    status_label: str
    status_tone: str
    payment_method: str
    mutuelle_display: str
    last_consultation: str
    is_editing: bool = False


class CommitResult(BaseModel):
    """Outcome of committing an edit buffer to the appointment store."""

    appointment_id: str
    fields: dict[str, Any]
    persisted: bool = True
    error: str | None = None
