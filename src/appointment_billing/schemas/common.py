"""Shared types for appointment billing records."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PaymentMethod(str, Enum):
    """Closed set of payment methods a billing record may carry."""

    NONE = "-"
    CARD = "Carte Bancaire"
    CASH = "Espèces"
    TRANSFER = "Virement"
    CHEQUE = "Chèque"


class MutuelleProvider(str, Enum):
    """Supplemental insurance providers accepted on an attestation."""

    UNSET = ""
    CNOPS = "CNOPS"
    CNSS = "CNSS"
    RMA = "RMA"
    SAHAM = "SAHAM"


class BillingStatus(str, Enum):
    """Fixed status labels. Reductions are rendered as ``Réduction (<rate>%)``."""

    NONE = "-"
    FREE = "Gratuit"
    UNPAID = "Non payé"
    PAID = "Payé"


class Mutuelle(BaseModel):
    """Supplemental health-insurance attestation attached to a billing record."""

    active: bool = False
    nom: str = ""


class Patient(BaseModel):
    """Patient reference data, read-only from the billing side."""

    model_config = ConfigDict(
        populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )

    id: str
    numero_patient: str | None = Field(default=None, alias="numeroPatient")
    nom: str | None = None
    prenom: str | None = None


class Appointment(BaseModel):
    """Appointment as exposed by the appointment store.

    ``amount`` and ``last_consult_amount`` stay as comma-decimal text, exactly
    as stored. They are parsed with ``billing.amounts.parse_amount`` when needed.
    """

    model_config = ConfigDict(
        populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )

    id: str
    patient_id: str = Field(alias="patientId")
    time: str
    amount: str | None = None
    status: str | None = None
    payment_method: str | None = Field(default=None, alias="paymentMethod")
    mutuelle: Mutuelle | None = None
    last_consult_amount: str | None = Field(default=None, alias="lastConsultAmount")
