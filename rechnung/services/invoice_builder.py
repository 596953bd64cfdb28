"""Composing invoices from user input.

Everything derived (line totals, subtotal, VAT, total, due date) is computed
here so that a saved invoice never carries hand-edited amounts.
"""

from __future__ import annotations

import logging
import math

from rechnung import calculations
from rechnung.clock import now_iso, today
from rechnung.errors import InvoiceValidationError
from rechnung.models.business_settings import BusinessSettings
from rechnung.models.client import Client
from rechnung.models.invoice import Invoice, InvoiceStatus, LineItem, Unit

logger = logging.getLogger(__name__)


def make_line_item(
    description: str,
    quantity: float,
    unit_price: float,
    unit: str = Unit.DAYS.value,
    sub_description: str | None = None,
    item_id: str | None = None,
) -> LineItem:
    if not (math.isfinite(quantity) and math.isfinite(unit_price)):
        raise InvoiceValidationError("Quantity and unit price must be finite numbers")
    if quantity < 0:
        raise InvoiceValidationError("Quantity must not be negative")
    if unit_price < 0:
        raise InvoiceValidationError("Unit price must not be negative")
    fields = dict(
        description=description,
        sub_description=sub_description or None,
        quantity=quantity,
        unit=unit,
        unit_price=unit_price,
        total=calculations.line_item_total(quantity, unit_price),
    )
    if item_id:
        fields["id"] = item_id
    return LineItem(**fields)


def with_quantity_and_price(item: LineItem, quantity: float, unit_price: float) -> LineItem:
    """Copy of ``item`` with new quantity/price and its total recomputed."""
    return make_line_item(
        item.description,
        quantity,
        unit_price,
        unit=item.unit,
        sub_description=item.sub_description,
        item_id=item.id,
    )


def is_business_info_complete(settings: BusinessSettings) -> bool:
    return all(field.strip() for field in (settings.name, settings.street, settings.postal_code, settings.city))


def validate_invoice(
    invoice_number: str,
    invoice_date: str,
    client: Client | None,
    line_items: list[LineItem],
    settings: BusinessSettings | None = None,
) -> None:
    """Raise InvoiceValidationError on the first missing piece.

    ``settings`` is optional; when given, the issuer address must be complete
    before an invoice may be saved or rendered.
    """
    if settings is not None and not is_business_info_complete(settings):
        raise InvoiceValidationError(
            "Please complete your business information in Settings before saving or exporting invoices."
        )
    if not invoice_number:
        raise InvoiceValidationError("Invoice number is required")
    if not invoice_date:
        raise InvoiceValidationError("Invoice date is required")
    if client is None:
        raise InvoiceValidationError("Please select a client")
    if not line_items:
        raise InvoiceValidationError("Please add at least one line item")


def build_invoice(
    *,
    invoice_number: str,
    invoice_date: str,
    client: Client | None,
    line_items: list[LineItem],
    payment_terms: int,
    is_kleinunternehmer: bool,
    status: InvoiceStatus = InvoiceStatus.PENDING,
    service_period_start: str = "",
    service_period_end: str = "",
    notes: str = "",
    existing: Invoice | None = None,
    settings: BusinessSettings | None = None,
) -> Invoice:
    validate_invoice(invoice_number, invoice_date, client, line_items, settings)
    if payment_terms < 0:
        raise InvoiceValidationError("Payment terms must not be negative")

    items = [with_quantity_and_price(item, item.quantity, item.unit_price) for item in line_items]
    subtotal = calculations.subtotal(items)
    vat_rate = calculations.vat_rate_for(is_kleinunternehmer)
    vat_amount = calculations.vat(subtotal, vat_rate)

    # Paid is terminal: an edit never takes it back.
    if existing is not None and existing.status == InvoiceStatus.PAID:
        status = InvoiceStatus.PAID
    paid_date = None
    if status == InvoiceStatus.PAID:
        paid_date = (existing.paid_date if existing else None) or today().isoformat()

    timestamp = now_iso()
    fields = dict(
        invoice_number=invoice_number,
        date=invoice_date,
        service_period_start=service_period_start or invoice_date,
        service_period_end=service_period_end or invoice_date,
        client_id=client.id,
        client=client.model_copy(deep=True),
        line_items=items,
        subtotal=subtotal,
        vat_rate=vat_rate,
        vat_amount=vat_amount,
        total=calculations.total(subtotal, vat_amount),
        payment_terms=payment_terms,
        due_date=calculations.due_date(invoice_date, payment_terms),
        status=status,
        paid_date=paid_date,
        notes=notes,
        created_at=existing.created_at if existing else timestamp,
        updated_at=timestamp,
    )
    if existing is not None:
        fields["id"] = existing.id
    invoice = Invoice(**fields)
    logger.debug(
        "Built invoice number=%s items=%d subtotal=%.2f vat=%.2f total=%.2f",
        invoice.invoice_number,
        len(items),
        invoice.subtotal,
        invoice.vat_amount,
        invoice.total,
    )
    return invoice
