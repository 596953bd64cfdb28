from __future__ import annotations

from rich.columns import Columns
from rich.console import Group
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from rechnung.pdf.document import AddressBlock, InvoiceDocument


def _address(block: AddressBlock) -> Text:
    text = Text()
    text.append(f"{block.label}\n", style="dim bold")
    text.append(f"{block.name}\n", style="bold")
    text.append("\n".join(block.lines))
    return text


def render_preview(document: InvoiceDocument) -> Panel:
    """Terminal rendering of the invoice document."""
    header = Text()
    header.append(document.title, style="bold")
    header.append(f"\nNr. {document.number}", style="dim")

    meta = Table.grid(padding=(0, 4))
    for label, _ in document.meta:
        meta.add_column()
    meta.add_row(*[Text(label, style="dim bold") for label, _ in document.meta])
    meta.add_row(*[value for _, value in document.meta])

    items = Table(expand=True, show_edge=False, header_style="dim bold")
    items.add_column("LEISTUNG", ratio=3)
    items.add_column("MENGE", justify="right")
    items.add_column("EINZELPREIS", justify="right")
    items.add_column("BETRAG", justify="right")
    for row in document.rows:
        description = Text(row.description, style="bold")
        if row.sub_description:
            description.append(f"\n{row.sub_description}", style="dim")
        items.add_row(description, row.quantity, row.unit_price, Text(row.total, style="bold"))

    totals = Table.grid(padding=(0, 4))
    totals.add_column(justify="right", style="dim")
    totals.add_column(justify="right")
    for label, value in document.totals:
        totals.add_row(label, value)
    label, value = document.grand_total
    totals.add_row(Text(label, style="bold"), Text(value, style="bold"))

    bank = Table.grid(padding=(0, 2))
    bank.add_column(style="dim")
    bank.add_column()
    for label, value in document.bank:
        bank.add_row(label, value)

    parts = [
        header,
        Rule(),
        Columns([_address(document.issuer), _address(document.recipient)], expand=True, equal=True),
        Text(),
        meta,
        Rule(style="dim"),
        items,
        Columns([totals], align="right", expand=True),
        Text(),
    ]
    if document.vat_notice:
        parts.append(Text(document.vat_notice, style="italic dim"))
    if document.notes:
        parts.append(Text(document.notes))
    parts += [Rule(), Text(document.bank_label, style="dim bold"), bank]
    return Panel(Group(*parts), padding=(1, 2))
