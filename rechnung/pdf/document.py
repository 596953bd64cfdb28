"""Printable content of an invoice.

``build_document`` turns an Invoice + BusinessSettings pair into plain,
already-formatted strings. The terminal preview and the PDF both render
only this projection, so they always show the same information.
"""

from __future__ import annotations

from pydantic import BaseModel

from rechnung.constants import KLEINUNTERNEHMER_NOTICE
from rechnung.models import format_date, format_date_range, format_eur, format_iban, format_quantity
from rechnung.models.business_settings import BusinessSettings
from rechnung.models.invoice import Invoice


class DocumentRow(BaseModel):
    description: str
    sub_description: str = ""
    quantity: str
    unit_price: str
    total: str


class AddressBlock(BaseModel):
    label: str
    name: str
    lines: list[str] = []


class InvoiceDocument(BaseModel):
    title: str = "Rechnung"
    number: str
    issuer: AddressBlock
    recipient: AddressBlock
    meta: list[tuple[str, str]]
    rows: list[DocumentRow]
    totals: list[tuple[str, str]]
    grand_total: tuple[str, str]
    vat_notice: str = ""
    notes: str = ""
    bank_label: str = "BANKVERBINDUNG"
    bank: list[tuple[str, str]]

    @property
    def filename_stem(self) -> str:
        date_value = dict(self.meta).get("RECHNUNGSDATUM", "")
        return f"Rechnung-{self.number}-{date_value.replace('.', '-')}"

    def text_lines(self) -> list[str]:
        """Flat list of every visible string, in reading order."""
        lines = [self.title, f"Nr. {self.number}"]
        for block in (self.issuer, self.recipient):
            lines += [block.label, block.name, *block.lines]
        for label, value in self.meta:
            lines += [label, value]
        for row in self.rows:
            lines += [row.description]
            if row.sub_description:
                lines.append(row.sub_description)
            lines += [row.quantity, row.unit_price, row.total]
        for label, value in [*self.totals, self.grand_total]:
            lines += [label, value]
        if self.vat_notice:
            lines.append(self.vat_notice)
        if self.notes:
            lines.append(self.notes)
        lines.append(self.bank_label)
        for label, value in self.bank:
            lines += [label, value]
        return lines


def _issuer_block(settings: BusinessSettings) -> AddressBlock:
    lines = [settings.street, f"{settings.postal_code} {settings.city}".strip()]
    if settings.tax_number:
        lines.append(f"Steuernummer: {settings.tax_number}")
    elif settings.tax_number_pending:
        lines.append("Steuernummer: wird beantragt")
    if settings.email:
        lines.append(settings.email)
    if settings.phone:
        lines.append(settings.phone)
    return AddressBlock(label="VON", name=settings.name, lines=[line for line in lines if line])


def build_document(invoice: Invoice, settings: BusinessSettings) -> InvoiceDocument:
    client = invoice.client
    recipient = AddressBlock(
        label="AN",
        name=client.name,
        lines=[line for line in (client.street, f"{client.postal_code} {client.city}".strip()) if line],
    )

    rows = [
        DocumentRow(
            description=item.description,
            sub_description=item.sub_description or "",
            quantity=f"{format_quantity(item.quantity)} {item.unit}",
            unit_price=format_eur(item.unit_price),
            total=format_eur(item.total),
        )
        for item in invoice.line_items
    ]

    totals: list[tuple[str, str]] = []
    vat_notice = ""
    if invoice.vat_rate:
        totals = [
            ("Zwischensumme", format_eur(invoice.subtotal)),
            (f"USt. {format_quantity(invoice.vat_rate)} %", format_eur(invoice.vat_amount)),
        ]
    else:
        vat_notice = KLEINUNTERNEHMER_NOTICE

    bank = settings.bank_details
    return InvoiceDocument(
        number=invoice.invoice_number,
        issuer=_issuer_block(settings),
        recipient=recipient,
        meta=[
            ("RECHNUNGSDATUM", format_date(invoice.date)),
            ("LEISTUNGSZEITRAUM", format_date_range(invoice.service_period_start, invoice.service_period_end)),
            ("ZAHLUNGSZIEL", f"{invoice.payment_terms} Tage"),
        ],
        rows=rows,
        totals=totals,
        grand_total=("Gesamt", format_eur(invoice.total)),
        vat_notice=vat_notice,
        notes=invoice.notes or "",
        bank=[
            ("Kontoinhaber:", bank.account_holder),
            ("Bank:", bank.bank_name),
            ("IBAN:", format_iban(bank.iban)),
            ("BIC:", bank.bic),
            ("Verwendungszweck:", invoice.invoice_number),
        ],
    )
