from __future__ import annotations

from datetime import date

from rechnung.clock import today
from rechnung.models.invoice import Invoice, InvoiceStatus

FROZEN_STATUSES = (InvoiceStatus.DRAFT, InvoiceStatus.PAID)


def is_overdue(due_date: str, on: date | None = None) -> bool:
    """True once the due date's calendar day has fully passed.

    The due date itself is not overdue; the day after is.
    """
    if not due_date:
        return False
    try:
        due = date.fromisoformat(due_date)
    except ValueError:
        return False
    return (on or today()) > due


def derive_status(invoice: Invoice, on: date | None = None) -> Invoice:
    """Return the invoice with its effective status.

    Drafts and paid invoices are returned untouched. For the open states,
    ``overdue`` is a function of the due date: a pending invoice past its due
    date becomes overdue, and an overdue one whose due date was moved into the
    future is open (pending) again. The input is never mutated; a copy is
    returned when the status changes, otherwise the same object.
    """
    if invoice.status in FROZEN_STATUSES:
        return invoice
    effective = InvoiceStatus.OVERDUE if is_overdue(invoice.due_date, on) else InvoiceStatus.PENDING
    if effective == invoice.status:
        return invoice
    return invoice.model_copy(update={"status": effective})
