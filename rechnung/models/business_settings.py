from __future__ import annotations

from datetime import datetime

from pydantic import Field

from rechnung.constants import LOCAL_TZ
from rechnung.models.base import Record


class BankDetails(Record):
    account_holder: str = ""
    iban: str = ""
    bic: str = ""
    bank_name: str = ""


class Preferences(Record):
    default_payment_terms: int = 14
    is_kleinunternehmer: bool = True
    invoice_prefix: str = ""
    starting_invoice_number: int = 1
    currency: str = "EUR"


class BusinessSettings(Record):
    name: str = ""
    street: str = ""
    postal_code: str = ""
    city: str = ""
    tax_number: str | None = ""
    tax_number_pending: bool = False
    email: str | None = ""
    phone: str | None = ""
    bank_details: BankDetails = Field(default_factory=BankDetails)
    preferences: Preferences = Field(default_factory=Preferences)


def default_business_settings() -> BusinessSettings:
    """Fresh default record; the invoice prefix is the current year, e.g. '2025-'."""
    year = datetime.now(LOCAL_TZ).year
    return BusinessSettings(preferences=Preferences(invoice_prefix=f"{year}-"))
