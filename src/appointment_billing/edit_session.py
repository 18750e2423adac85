"""Edit session for billing records.

A single session owns at most one edit buffer at a time:

1. ``begin_edit`` seeds a buffer from the stored (or derived) values
2. Field setters change the buffer only
3. ``commit_edit`` re-derives the status, persists the fields and clears the buffer

Starting an edit on another record drops the current buffer unsaved.
"""

import logging
from decimal import Decimal
from typing import Any

from .billing.amounts import ZERO, parse_amount
from .billing.status import resolve_status, status_for_amount
from .config import DEFAULT_CONFIG, BillingConfig
from .schemas.common import Appointment, BillingStatus, Mutuelle, PaymentMethod
from .schemas.records import CommitResult, EditBuffer, JoinedRecord
from .stores import AppointmentStore

logger = logging.getLogger(__name__)

COMMIT_KEY = "Enter"


def _appointment_of(record: Appointment | JoinedRecord) -> Appointment:
    if isinstance(record, JoinedRecord):
        return record.appointment
    return record


def seed_buffer(
    appointment: Appointment, config: BillingConfig = DEFAULT_CONFIG
) -> EditBuffer:
    """Working copy of a record's editable fields, with defaults filled in."""
    status = resolve_status(appointment.amount, appointment.status, config.reference_price)
    mutuelle = appointment.mutuelle or Mutuelle()
    return EditBuffer(
        amount=appointment.amount or "",
        status=status,
        payment_method=appointment.payment_method or PaymentMethod.NONE.value,
        mutuelle=mutuelle.model_copy(),
    )


def commit_fields(
    buffer: EditBuffer, config: BillingConfig = DEFAULT_CONFIG
) -> dict[str, Any]:
    """Fields persisted for a buffer, with the status re-derived from the amount.

    Zero, negative and unreadable amounts are stored as no charge.
    """
    amount = parse_amount(buffer.amount)
    payment_method = buffer.payment_method

    charged = amount > ZERO

    if not charged:
        status = BillingStatus.NONE.value
        payment_method = PaymentMethod.NONE.value
    else:
        status = status_for_amount(amount, config.reference_price).label

    return {
        "amount": buffer.amount if charged else "",
        "status": status,
        "paymentMethod": payment_method,
        "mutuelle": buffer.mutuelle.model_dump(),
    }


class EditSession:
    """Tracks the one billing record currently being edited."""

    def __init__(self, store: AppointmentStore, config: BillingConfig = DEFAULT_CONFIG):
        self.store = store
        self.config = config
        self._editing_id: str | None = None
        self._buffer: EditBuffer | None = None

    # --- State ---

    @property
    def editing_id(self) -> str | None:
        return self._editing_id

    @property
    def buffer(self) -> EditBuffer | None:
        return self._buffer

    @property
    def is_editing(self) -> bool:
        return self._buffer is not None

    def is_editing_record(self, record: Appointment | JoinedRecord) -> bool:
        return self._buffer is not None and self._editing_id == _appointment_of(record).id

    # --- Transitions ---

    def begin_edit(self, record: Appointment | JoinedRecord) -> EditBuffer:
        """Start editing ``record``, discarding any other buffer unsaved."""
        appointment = _appointment_of(record)
        if self._buffer is not None and self._editing_id != appointment.id:
            logger.warning(
                "Discarding unsaved edit of appointment %s", self._editing_id
            )

        self._editing_id = appointment.id
        self._buffer = seed_buffer(appointment, self.config)
        logger.info("Editing billing of appointment %s", appointment.id)
        return self._buffer

    def commit_edit(self, record: Appointment | JoinedRecord) -> CommitResult | None:
        """Persist the buffer of ``record`` and return to viewing.

        Returns None when ``record`` is not the one being edited. Store errors
        are logged and reported on the result; the buffer is dropped either way.
        """
        appointment = _appointment_of(record)
        if not self.is_editing_record(appointment):
            logger.warning(
                "Ignoring commit for appointment %s: not being edited", appointment.id
            )
            return None

        fields = commit_fields(self._buffer, self.config)
        self._editing_id = None
        self._buffer = None

        try:
            self.store.update_appointment(appointment.id, fields)
        except Exception as exc:
            logger.exception("Failed to persist billing of appointment %s", appointment.id)
            return CommitResult(
                appointment_id=appointment.id,
                fields=fields,
                persisted=False,
                error=str(exc) or exc.__class__.__name__,
            )

        logger.info(
            "Saved billing of appointment %s as %s", appointment.id, fields["status"]
        )
        return CommitResult(appointment_id=appointment.id, fields=fields)

    def handle_amount_key(
        self, record: Appointment | JoinedRecord, key: str
    ) -> CommitResult | None:
        """Commit straight from the amount field on Enter."""
        if key != COMMIT_KEY:
            return None
        return self.commit_edit(record)

    # --- Field edits ---

    def _buffered_amount(self) -> Decimal:
        return parse_amount(self._buffer.amount) if self._buffer else ZERO

    def _reject(self, field: str, value: Any, reason: str) -> bool:
        logger.warning("Rejected %s=%r: %s", field, value, reason)
        return False

    def set_amount(self, amount: str) -> bool:
        if self._buffer is None:
            return self._reject("amount", amount, "no edit in progress")
        self._buffer.amount = amount or ""
        return True

    def set_status(self, status: str) -> bool:
        """Pick a manual status. Only offered while nothing is charged."""
        if self._buffer is None:
            return self._reject("status", status, "no edit in progress")
        if self._buffered_amount() > ZERO:
            return self._reject("status", status, "status follows a positive amount")
        if status not in self.config.zero_amount_statuses:
            return self._reject("status", status, "not a selectable status")
        self._buffer.status = status
        return True

    def set_payment_method(self, payment_method: str) -> bool:
        """Pick a payment method. Only offered while the amount is positive."""
        if self._buffer is None:
            return self._reject("payment_method", payment_method, "no edit in progress")
        if self._buffered_amount() <= ZERO:
            return self._reject("payment_method", payment_method, "nothing charged")
        if payment_method not in self.config.payment_methods:
            return self._reject("payment_method", payment_method, "unknown method")
        self._buffer.payment_method = payment_method
        return True

    def set_mutuelle_active(self, active: bool) -> bool:
        if self._buffer is None:
            return self._reject("mutuelle.active", active, "no edit in progress")
        self._buffer.mutuelle.active = bool(active)
        return True

    def set_mutuelle_nom(self, nom: str) -> bool:
        if self._buffer is None:
            return self._reject("mutuelle.nom", nom, "no edit in progress")
        if nom and nom not in self.config.mutuelle_providers:
            return self._reject("mutuelle.nom", nom, "unknown provider")
        self._buffer.mutuelle.nom = nom or ""
        return True
