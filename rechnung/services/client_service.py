from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

from rechnung.constants import CLIENTS_KEY
from rechnung.errors import ClientInUseError, ClientNotFoundError, DuplicateClientError
from rechnung.gateway.base import PersistenceGateway
from rechnung.models.client import Client
from rechnung.models.invoice import Invoice, InvoiceStatus

logger = logging.getLogger(__name__)


def totals_by_client(invoices: Iterable[Invoice]) -> dict[str, float]:
    """Sum of ``total`` per client id over every non-draft invoice."""
    sums: dict[str, Decimal] = {}
    for inv in invoices:
        if inv.status == InvoiceStatus.DRAFT:
            continue
        sums[inv.client_id] = sums.get(inv.client_id, Decimal("0")) + Decimal(str(inv.total))
    return {client_id: float(amount) for client_id, amount in sums.items()}


def compute_totals(clients: Iterable[Client], invoices: Iterable[Invoice]) -> list[Client]:
    """Return copies of ``clients`` with ``total_invoiced`` recomputed from ``invoices``."""
    totals = totals_by_client(invoices)
    return [c.model_copy(update={"total_invoiced": totals.get(c.id, 0.0)}) for c in clients]


class ClientService:
    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway
        self._clients: list[Client] = []

    def _write(self, clients: list[Client]) -> None:
        self.gateway.set(CLIENTS_KEY, [c.to_json() for c in clients])
        self._clients = clients

    def load(self) -> list[Client]:
        raw = self.gateway.get(CLIENTS_KEY) or []
        self._clients = [Client.model_validate(item) for item in raw]
        logger.debug("Loaded %d clients", len(self._clients))
        return list(self._clients)

    def list(self) -> list[Client]:
        return list(self._clients)

    def get(self, client_id: str) -> Client | None:
        result = next((c for c in self._clients if c.id == client_id), None)
        logger.debug("get_client id=%s found=%s", client_id, result is not None)
        return result

    def add(self, client: Client) -> Client:
        if any(c.id == client.id for c in self._clients):
            raise DuplicateClientError(f"Client id {client.id} already exists")
        self._write([*self._clients, client])
        logger.info("Client created: id=%s, name=%s", client.id, client.name)
        return client

    def update(self, client: Client) -> Client:
        if not any(c.id == client.id for c in self._clients):
            logger.warning("Update failed: client %s not found", client.id)
            raise ClientNotFoundError(f"Client {client.id} not found")
        self._write([client if c.id == client.id else c for c in self._clients])
        logger.info("Client updated: id=%s, name=%s", client.id, client.name)
        return client

    def delete(self, client_id: str) -> None:
        remaining = [c for c in self._clients if c.id != client_id]
        if len(remaining) == len(self._clients):
            logger.debug("delete: client %s not found, nothing to do", client_id)
            return
        self._write(remaining)
        logger.info("Client %s deleted", client_id)

    def delete_if_unreferenced(self, client_id: str, invoices: Iterable[Invoice]) -> None:
        """Delete a client unless an invoice of any status still points at it."""
        referencing = sum(1 for inv in invoices if inv.client_id == client_id)
        if referencing:
            client = self.get(client_id)
            name = client.name if client else client_id
            logger.warning("Refusing to delete client %s: %d invoice(s) reference it", client_id, referencing)
            raise ClientInUseError(name, referencing)
        self.delete(client_id)

    def recalculate_totals(self, invoices: Iterable[Invoice]) -> list[Client]:
        updated = compute_totals(self._clients, invoices)
        self._write(updated)
        logger.debug("Client totals recalculated for %d clients", len(updated))
        return list(updated)
