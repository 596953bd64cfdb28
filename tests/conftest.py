"""Root conftest: in-memory stores and sample records."""

from __future__ import annotations

import pytest
from sqlalchemy import Connection, create_engine
from sqlalchemy.engine import Engine

from rechnung.gateway.memory import InMemoryGateway
from rechnung.models.business_settings import BankDetails, BusinessSettings, Preferences
from rechnung.models.client import Client
from rechnung.models.invoice import Invoice, InvoiceStatus, LineItem


@pytest.fixture()
def gateway() -> InMemoryGateway:
    return InMemoryGateway()


@pytest.fixture()
def db_engine() -> Engine:
    return create_engine("sqlite:///:memory:")


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    yield conn
    conn.close()


def _sample_client(**overrides) -> Client:
    defaults = dict(
        id="client-acme",
        name="Acme GmbH",
        street="Hauptstraße 1",
        postal_code="10115",
        city="Berlin",
        email="buchhaltung@acme.example",
    )
    defaults.update(overrides)
    return Client(**defaults)


def _sample_line_item(**overrides) -> LineItem:
    defaults = dict(
        id="item-1",
        description="Beratung",
        quantity=1,
        unit="Tage",
        unit_price=100.0,
        total=100.0,
    )
    defaults.update(overrides)
    return LineItem(**defaults)


def _sample_invoice(**overrides) -> Invoice:
    client = overrides.pop("client", None) or _sample_client()
    defaults = dict(
        id="inv-1",
        invoice_number="2025-001",
        date="2025-01-06",
        service_period_start="2025-01-06",
        service_period_end="2025-01-06",
        client_id=client.id,
        client=client,
        line_items=[_sample_line_item()],
        subtotal=100.0,
        vat_rate=0,
        vat_amount=0.0,
        total=100.0,
        payment_terms=14,
        due_date="2025-01-20",
        status=InvoiceStatus.PENDING,
        created_at="2025-01-06T10:00:00+01:00",
        updated_at="2025-01-06T10:00:00+01:00",
    )
    defaults.update(overrides)
    return Invoice(**defaults)


def _sample_settings(**overrides) -> BusinessSettings:
    defaults = dict(
        name="Max Mustermann",
        street="Musterweg 5",
        postal_code="80331",
        city="München",
        tax_number="143/123/45678",
        email="max@example.com",
        phone="+49 89 123456",
        bank_details=BankDetails(
            account_holder="Max Mustermann",
            iban="DE89370400440532013000",
            bic="COBADEFFXXX",
            bank_name="Commerzbank",
        ),
        preferences=Preferences(invoice_prefix="2025-"),
    )
    defaults.update(overrides)
    return BusinessSettings(**defaults)


@pytest.fixture()
def sample_client() -> Client:
    return _sample_client()


@pytest.fixture()
def sample_invoice() -> Invoice:
    return _sample_invoice()


@pytest.fixture()
def sample_settings() -> BusinessSettings:
    return _sample_settings()


@pytest.fixture()
def make_client():
    return _sample_client


@pytest.fixture()
def make_item():
    return _sample_line_item


@pytest.fixture()
def make_invoice():
    return _sample_invoice


@pytest.fixture()
def make_settings():
    return _sample_settings
