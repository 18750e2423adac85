"""Billing records for medical appointments: search, status derivation and editing."""

from .billing import derive_status, format_last_consultation, run_filter_pipeline
from .config import BillingConfig, load_config
from .edit_session import EditSession
from .pipeline import FilterPipeline
from .stores import (
    AppointmentStore,
    InMemoryAppointmentStore,
    InMemoryPatientStore,
    PatientStore,
)

__all__ = [
    "BillingConfig",
    "load_config",
    "derive_status",
    "format_last_consultation",
    "run_filter_pipeline",
    "FilterPipeline",
    "EditSession",
    "AppointmentStore",
    "PatientStore",
    "InMemoryAppointmentStore",
    "InMemoryPatientStore",
]
