from __future__ import annotations

from enum import Enum

from pydantic import Field

from rechnung.models.base import Record
from rechnung.models.client import Client, new_id


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class Unit(str, Enum):
    DAYS = "Tage"
    HOURS = "Stunden"
    PIECES = "Stück"
    FLAT_RATE = "Pauschal"


class LineItem(Record):
    id: str = Field(default_factory=new_id)
    description: str
    sub_description: str | None = None
    quantity: float = Field(default=0, ge=0, allow_inf_nan=False)
    unit: str = Unit.DAYS.value
    unit_price: float = Field(default=0, ge=0, allow_inf_nan=False)
    total: float = 0  # always quantity * unit_price, see calculations.line_item_total


class Invoice(Record):
    id: str = Field(default_factory=new_id)
    invoice_number: str
    date: str  # 'YYYY-MM-DD'
    service_period_start: str = ""
    service_period_end: str = ""
    client_id: str
    client: Client
    line_items: list[LineItem] = []
    subtotal: float = 0
    vat_rate: float = 0
    vat_amount: float = 0
    total: float = 0
    payment_terms: int = 14
    due_date: str = ""
    status: InvoiceStatus = InvoiceStatus.PENDING
    paid_date: str | None = None
    notes: str | None = None
    created_at: str = ""
    updated_at: str = ""
