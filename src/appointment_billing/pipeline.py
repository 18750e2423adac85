"""Filter pipeline bound to the appointment and patient stores."""

import logging
from datetime import date, datetime

from .billing import build_billing_rows, run_filter_pipeline
from .billing.formatters import AmountFormatter, PatientCodeFormatter, amount, patient_number
from .config import DEFAULT_CONFIG, BillingConfig
from .edit_session import EditSession
from .schemas.records import BillingRow, JoinedRecord
from .stores import AppointmentStore, PatientStore

logger = logging.getLogger(__name__)


class FilterPipeline:
    """Derived billing view over the stores, search text and date bounds.

    Every call to :meth:`recompute` re-reads the stores and recomputes the
    whole view. Nothing is cached.
    """

    def __init__(
        self,
        appointments: AppointmentStore,
        patients: PatientStore,
        config: BillingConfig = DEFAULT_CONFIG,
        amount_formatter: AmountFormatter | None = None,
        patient_code_formatter: PatientCodeFormatter = patient_number,
    ):
        self.appointments = appointments
        self.patients = patients
        self.config = config
        self.amount_formatter = amount_formatter or (
            lambda text: amount(text, currency=config.currency)
        )
        self.patient_code_formatter = patient_code_formatter
        self.search_text = ""
        self.start_date: str | date | None = None
        self.end_date: str | date | None = None

    def set_search(self, text: str) -> list[JoinedRecord]:
        self.search_text = text or ""
        return self.recompute()

    def set_date_range(
        self, start_date: str | date | None, end_date: str | date | None
    ) -> list[JoinedRecord]:
        self.start_date = start_date or None
        self.end_date = end_date or None
        return self.recompute()

    def recompute(self) -> list[JoinedRecord]:
        """Current filtered record set, most recent first."""
        return run_filter_pipeline(
            self.appointments.list_appointments(),
            self.patients.list_patients(),
            search_text=self.search_text,
            start_date=self.start_date,
            end_date=self.end_date,
        )

    def rows(
        self, session: EditSession | None = None, now: datetime | None = None
    ) -> list[BillingRow]:
        """Display rows for the current view, reflecting an in-progress edit."""
        editing_id = session.editing_id if session else None
        buffer = session.buffer if session else None
        return build_billing_rows(
            self.recompute(),
            editing_id=editing_id,
            buffer=buffer,
            now=now,
            amount_formatter=self.amount_formatter,
            patient_code_formatter=self.patient_code_formatter,
            reference_price=self.config.reference_price,
        )
