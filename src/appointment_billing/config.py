"""Billing configuration loaded from ``configs/config.json``."""

import json
import logging
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "configs/config.json"
BILLING_SECTION = "billing"


class BillingConfig(BaseModel):
    """Pricing reference and the selectable values of the billing editor."""

    reference_price: Decimal = Decimal("400")
    currency: str = "DH"
    payment_methods: list[str] = Field(
        default_factory=lambda: ["-", "Carte Bancaire", "Espèces", "Virement", "Chèque"]
    )
    zero_amount_statuses: list[str] = Field(
        default_factory=lambda: ["-", "Gratuit", "Non payé"]
    )
    mutuelle_providers: list[str] = Field(
        default_factory=lambda: ["CNOPS", "CNSS", "RMA", "SAHAM"]
    )


def load_config(
    config_file: str | Path = DEFAULT_CONFIG_FILE,
    path_selector: str = BILLING_SECTION,
) -> BillingConfig:
    """Load the selected section of a JSON config file.

    A missing file or section yields the defaults. A present but invalid
    section raises ``pydantic.ValidationError``.
    """
    path = Path(config_file)
    if not path.exists():
        logger.debug("Config file %s not found, using defaults", path)
        return BillingConfig()

    raw = json.loads(path.read_text(encoding="utf-8"))
    section = raw.get(path_selector)
    if section is None:
        logger.debug("No '%s' section in %s, using defaults", path_selector, path)
        return BillingConfig()
    return BillingConfig.model_validate(section)


DEFAULT_CONFIG = BillingConfig()
