"""Appointment and patient store interfaces, with in-memory implementations."""

import logging
from typing import Any, Protocol

from .schemas.common import Appointment, Patient

logger = logging.getLogger(__name__)


class AppointmentStore(Protocol):
    """Read-all and partial-update access to appointments."""

    def list_appointments(self) -> list[Appointment]:
        """Return every appointment."""

    def update_appointment(self, appointment_id: str, fields: dict[str, Any]) -> None:
        """Merge ``fields`` (wire names) into one appointment."""


class PatientStore(Protocol):
    """Read-all access to patients."""

    def list_patients(self) -> list[Patient]:
        """Return every patient."""


class InMemoryAppointmentStore:
    """Dict-backed appointment store keeping insertion order."""

    def __init__(self, appointments: list[Appointment | dict[str, Any]] | None = None):
        self._appointments: dict[str, Appointment] = {}
        for item in appointments or []:
            appointment = (
                item if isinstance(item, Appointment) else Appointment.model_validate(item)
            )
            self._appointments[appointment.id] = appointment

    def list_appointments(self) -> list[Appointment]:
        return list(self._appointments.values())

    def get(self, appointment_id: str) -> Appointment | None:
        return self._appointments.get(appointment_id)

    def update_appointment(self, appointment_id: str, fields: dict[str, Any]) -> None:
        current = self._appointments.get(appointment_id)
        if current is None:
            raise KeyError(f"Unknown appointment {appointment_id}")
        merged = current.model_dump(by_alias=True)
        merged.update(fields)
        self._appointments[appointment_id] = Appointment.model_validate(merged)
        logger.debug("Updated appointment %s with %s", appointment_id, sorted(fields))


class InMemoryPatientStore:
    """List-backed patient store."""

    def __init__(self, patients: list[Patient | dict[str, Any]] | None = None):
        self._patients = [
            p if isinstance(p, Patient) else Patient.model_validate(p)
            for p in patients or []
        ]

    def list_patients(self) -> list[Patient]:
        return list(self._patients)
