from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from rechnung.clock import now_iso, today
from rechnung.constants import INVOICES_KEY
from rechnung.errors import DuplicateInvoiceError, InvoiceNotFoundError
from rechnung.gateway.base import PersistenceGateway
from rechnung.models.business_settings import BusinessSettings
from rechnung.models.invoice import Invoice, InvoiceStatus
from rechnung.status import derive_status

logger = logging.getLogger(__name__)

_LEADING_DIGITS = re.compile(r"\d+")


def suggest_invoice_number(prefix: str, starting_number: int, existing_numbers: Iterable[str]) -> str:
    """Next free number for ``prefix``: '2025-' with 2025-001, 2025-007 -> '2025-008'.

    Only numbers starting with the prefix count, and only if the rest starts
    with digits. With none, numbering begins at ``starting_number``.
    """
    used: list[int] = []
    for number in existing_numbers:
        if not number.startswith(prefix):
            continue
        match = _LEADING_DIGITS.match(number[len(prefix) :])
        if match:
            used.append(int(match.group()))
    next_number = (max(used) if used else starting_number - 1) + 1
    return f"{prefix}{next_number:03d}"


class InvoiceService:
    """In-memory invoice collection, written through to the gateway on every change.

    Each mutation builds the new collection, persists it, and only then swaps
    the cache, so a failed write leaves the cache as it was.
    """

    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway
        self._invoices: list[Invoice] = []

    def _read(self) -> list[Invoice]:
        raw = self.gateway.get(INVOICES_KEY) or []
        return [Invoice.model_validate(item) for item in raw]

    def _write(self, invoices: list[Invoice]) -> None:
        self.gateway.set(INVOICES_KEY, [inv.to_json() for inv in invoices])
        self._invoices = invoices

    def _replace(self, invoice: Invoice) -> None:
        self._write([invoice if inv.id == invoice.id else inv for inv in self._invoices])

    def load(self) -> list[Invoice]:
        stored = self._read()
        derived = [derive_status(inv) for inv in stored]
        flipped = sum(1 for old, new in zip(stored, derived) if old is not new)
        if flipped:
            self._write(derived)
            logger.info("Loaded %d invoices, %d status change(s) persisted", len(derived), flipped)
        else:
            self._invoices = derived
            logger.debug("Loaded %d invoices", len(derived))
        return list(self._invoices)

    def list(self) -> list[Invoice]:
        return list(self._invoices)

    def add(self, invoice: Invoice) -> Invoice:
        if any(inv.id == invoice.id for inv in self._invoices):
            raise DuplicateInvoiceError(f"Invoice id {invoice.id} already exists")
        invoice = derive_status(invoice)
        self._write([*self._invoices, invoice])
        logger.info(
            "Invoice created: id=%s number=%s status=%s total=%.2f",
            invoice.id,
            invoice.invoice_number,
            invoice.status.value,
            invoice.total,
        )
        return invoice

    def update(self, invoice: Invoice) -> Invoice:
        existing = next((inv for inv in self._invoices if inv.id == invoice.id), None)
        if existing is None:
            logger.warning("Update failed: invoice %s not found", invoice.id)
            raise InvoiceNotFoundError(f"Invoice {invoice.id} not found")
        changes = {"created_at": existing.created_at, "updated_at": now_iso()}
        if existing.status == InvoiceStatus.PAID:
            changes.update(status=InvoiceStatus.PAID, paid_date=invoice.paid_date or existing.paid_date)
        updated = derive_status(invoice.model_copy(update=changes))
        self._replace(updated)
        logger.info(
            "Invoice updated: id=%s number=%s status=%s total=%.2f",
            updated.id,
            updated.invoice_number,
            updated.status.value,
            updated.total,
        )
        return updated

    def delete(self, invoice_id: str) -> None:
        remaining = [inv for inv in self._invoices if inv.id != invoice_id]
        if len(remaining) == len(self._invoices):
            logger.debug("delete: invoice %s not found, nothing to do", invoice_id)
            return
        self._write(remaining)
        logger.info("Invoice %s deleted", invoice_id)

    def get(self, invoice_id: str) -> Invoice | None:
        """Fetch from the store with the status re-derived; falls back to the cache."""
        found = next((inv for inv in self._read() if inv.id == invoice_id), None)
        if found is None:
            found = next((inv for inv in self._invoices if inv.id == invoice_id), None)
        logger.debug("get_invoice id=%s found=%s", invoice_id, found is not None)
        if found is None:
            return None
        derived = derive_status(found)
        if derived is found:
            return derived
        if any(inv.id == invoice_id for inv in self._invoices):
            self._replace(derived)
        else:
            stored = [derived if inv.id == invoice_id else inv for inv in self._read()]
            self.gateway.set(INVOICES_KEY, [inv.to_json() for inv in stored])
        logger.info("Invoice %s is now %s", invoice_id, derived.status.value)
        return derived

    def mark_as_paid(self, invoice_id: str) -> Invoice | None:
        invoice = self.get(invoice_id)
        if invoice is None:
            logger.warning("mark_as_paid: invoice %s not found", invoice_id)
            return None
        if invoice.status == InvoiceStatus.PAID:
            return invoice
        paid = invoice.model_copy(
            update={
                "status": InvoiceStatus.PAID,
                "paid_date": today().isoformat(),
                "updated_at": now_iso(),
            }
        )
        self._replace(paid)
        logger.info("Invoice %s marked as paid on %s", invoice_id, paid.paid_date)
        return paid

    def refresh_statuses(self) -> list[Invoice]:
        derived = [derive_status(inv) for inv in self._invoices]
        self._write(derived)
        logger.info("Statuses refreshed for %d invoices", len(derived))
        return list(derived)

    def suggest_invoice_number(self, settings: BusinessSettings) -> str:
        prefs = settings.preferences
        return suggest_invoice_number(
            prefs.invoice_prefix,
            prefs.starting_invoice_number,
            (inv.invoice_number for inv in self._invoices),
        )

    def list_for_client(self, client_id: str) -> list[Invoice]:
        return [inv for inv in self._invoices if inv.client_id == client_id]
