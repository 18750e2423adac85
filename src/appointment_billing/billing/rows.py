"""Display rows for the billing table."""

from datetime import datetime
from decimal import Decimal

from ..schemas.records import BillingRow, EditBuffer, JoinedRecord
from . import formatters
from .consultation_age import format_last_consultation
from .formatters import AmountFormatter, PatientCodeFormatter
from .status import REFERENCE_PRICE, display_status, status_tone


def build_billing_rows(
    records: list[JoinedRecord],
    editing_id: str | None = None,
    buffer: EditBuffer | None = None,
    now: datetime | None = None,
    amount_formatter: AmountFormatter = formatters.amount,
    patient_code_formatter: PatientCodeFormatter = formatters.patient_number,
    reference_price: Decimal = REFERENCE_PRICE,
) -> list[BillingRow]:
    """Render joined records as display rows.

    The row being edited shows the buffered values rather than the stored ones.
    """
    rows: list[BillingRow] = []
    for record in records:
        appointment = record.appointment
        patient = record.patient
        is_editing = buffer is not None and appointment.id == editing_id

        if is_editing:
            amount_text = buffer.amount
            status = buffer.status
            payment_method = buffer.payment_method
            mutuelle = buffer.mutuelle
        else:
            amount_text = appointment.amount
            status = appointment.status
            payment_method = appointment.payment_method
            mutuelle = appointment.mutuelle

        label = display_status(amount_text, status, reference_price)
        rows.append(
            BillingRow(
                appointment_id=appointment.id,
                patient_number=patient_code_formatter(patient.numero_patient),
                patient_name=formatters.patient_name(patient.nom, patient.prenom),
                amount_display=formatters.amount_display(amount_text, amount_formatter),
                status_label=label,
                status_tone=status_tone(label),
                payment_method=payment_method or "-",
                mutuelle_display=formatters.mutuelle_display(mutuelle),
                last_consultation=format_last_consultation(
                    appointment.last_consult_amount,
                    appointment.time,
                    now=now,
                    formatter=amount_formatter,
                ),
                is_editing=is_editing,
            )
        )
    return rows
