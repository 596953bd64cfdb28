from __future__ import annotations

from typing import TYPE_CHECKING

import questionary
from rich.console import Console
from rich.table import Table
from rich.text import Text

from rechnung.cli.client_menu import create_client_menu
from rechnung.cli.prompts import ask_amount, ask_date, ask_int, ask_number, format_amount_input
from rechnung.clock import today
from rechnung.constants import STATUS_LABELS, STATUS_STYLES, UNIT_LABELS
from rechnung.errors import DocumentGenerationError, InvoiceValidationError
from rechnung.models import format_date, format_eur, format_quantity
from rechnung.models.client import Client
from rechnung.models.invoice import Invoice, InvoiceStatus, LineItem
from rechnung.services.invoice_builder import (
    build_invoice,
    is_business_info_complete,
    make_line_item,
    with_quantity_and_price,
)
from rechnung.services.stats import compute_stats, filter_invoices, recent_invoices, revenue_by_month

if TYPE_CHECKING:
    from rechnung.cli.app import AppServices

console = Console()

SAVE_DRAFT = "Als Entwurf speichern"
SAVE_PENDING = "Speichern (offen)"
SAVE_PAID = "Als bezahlt speichern"
SAVE_AND_EXPORT = "Speichern und PDF exportieren"

ADD_ITEM = "Position hinzufügen"
CHANGE_ITEM = "Position ändern"
REMOVE_ITEM = "Position entfernen"
ITEMS_DONE = "Fertig"

FILTER_INVOICES = "Suchen / Filtern"
SORT_INVOICES = "Sortieren"
SORT_LABELS = {
    "date": "Datum",
    "invoice_number": "Nummer",
    "amount": "Betrag",
    "client": "Kunde",
}


def status_text(status: InvoiceStatus) -> Text:
    return Text(STATUS_LABELS.get(status.value, status.value), style=STATUS_STYLES.get(status.value, ""))


def _invoice_table(invoices: list[Invoice], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", style="dim")
    table.add_column("Nummer", style="bold")
    table.add_column("Datum")
    table.add_column("Kunde")
    table.add_column("Fällig")
    table.add_column("Betrag", justify="right")
    table.add_column("Status", justify="center")
    for i, inv in enumerate(invoices, 1):
        table.add_row(
            str(i),
            inv.invoice_number,
            format_date(inv.date),
            inv.client.name,
            format_date(inv.due_date),
            format_eur(inv.total),
            status_text(inv.status),
        )
    return table


def _revenue_table(invoices: list[Invoice]) -> Table:
    months = revenue_by_month(invoices)
    peak = max((m.paid + m.pending for m in months), default=0)
    table = Table(title="Umsatz der letzten 6 Monate")
    table.add_column("Monat")
    table.add_column("Bezahlt", justify="right")
    table.add_column("Offen", justify="right")
    table.add_column("")
    for m in months:
        year, month = m.month.split("-")
        width = round(20 * (m.paid + m.pending) / peak) if peak else 0
        paid_width = round(20 * m.paid / peak) if peak else 0
        bar = Text("█" * paid_width, style="green").append("█" * (width - paid_width), style="yellow")
        table.add_row(f"{month}.{year}", format_eur(m.paid), format_eur(m.pending), bar)
    return table


def show_dashboard(services: AppServices) -> None:
    invoices = services.invoices.list()
    stats = compute_stats(invoices)

    table = Table(title="Übersicht", show_header=False)
    table.add_column("Kennzahl", style="dim")
    table.add_column("Wert", justify="right", style="bold")
    table.add_row("Umsatz diesen Monat", format_eur(stats.revenue_this_month))
    table.add_row("Offene Rechnungen", f"{stats.open_count} ({format_eur(stats.open_amount)})")
    table.add_row("Davon überfällig", str(stats.overdue_count))
    table.add_row("Bezahlt diesen Monat", str(stats.paid_this_month_count))
    table.add_row("Kunden", str(stats.unique_clients))

    console.print()
    console.print(table)
    console.print(_revenue_table(invoices))
    recent = recent_invoices(invoices)
    if recent:
        console.print(_invoice_table(recent, "Letzte Rechnungen"))


def _ask_filter(query: str) -> tuple[str, InvoiceStatus | None]:
    query = questionary.text("Suche (Nummer oder Kunde):", default=query).ask() or ""
    status = questionary.select(
        "Status:",
        choices=[
            questionary.Choice("Alle", value="all"),
            *(questionary.Choice(label, value=value) for value, label in STATUS_LABELS.items()),
        ],
    ).ask()
    return query, None if status in (None, "all") else InvoiceStatus(status)


def list_invoices_menu(services: AppServices) -> None:
    query, status, sort_field, order = "", None, "date", "desc"
    while True:
        invoices = services.invoices.list()
        if not invoices:
            console.print("[yellow]Noch keine Rechnungen vorhanden.[/yellow]")
            return

        shown = filter_invoices(invoices, query, status, sort_field, order)
        console.print()
        if shown:
            console.print(_invoice_table(shown, "Rechnungen"))
        else:
            console.print("[yellow]Keine Rechnungen für diesen Filter.[/yellow]")
        if query or status:
            label = STATUS_LABELS[status.value] if status else "Alle"
            console.print(f"[dim]Suche: '{query}'  Status: {label}[/dim]")
        console.print()

        invoice_choices = {
            f"{i}. {inv.invoice_number} - {inv.client.name} ({format_eur(inv.total)})": inv
            for i, inv in enumerate(shown, 1)
        }
        choice = questionary.select(
            "Rechnung auswählen:",
            choices=[*invoice_choices.keys(), FILTER_INVOICES, SORT_INVOICES, "Zurück"],
        ).ask()
        if choice is None or choice == "Zurück":
            return
        if choice == FILTER_INVOICES:
            query, status = _ask_filter(query)
        elif choice == SORT_INVOICES:
            field = questionary.select(
                "Sortieren nach:",
                choices=[questionary.Choice(label, value=value) for value, label in SORT_LABELS.items()],
            ).ask()
            if field:
                sort_field = field
                order = "asc" if questionary.confirm("Aufsteigend?", default=False).ask() else "desc"
        else:
            _invoice_detail_menu(invoice_choices[choice].id, services)


def _invoice_detail_menu(invoice_id: str, services: AppServices) -> None:
    while True:
        invoice = services.invoices.get(invoice_id)
        if invoice is None:
            console.print("[red]Rechnung nicht gefunden.[/red]")
            return

        settings = services.settings.get()
        console.print()
        console.print(services.documents.preview(invoice, settings))
        console.print(Text("Status: ").append_text(status_text(invoice.status)))
        if invoice.paid_date:
            console.print(f"Bezahlt am: {format_date(invoice.paid_date)}")
        console.print(f"Fällig am: {format_date(invoice.due_date)}")

        actions = ["Bearbeiten", "PDF exportieren", "Löschen", "Zurück"]
        if invoice.status in (InvoiceStatus.PENDING, InvoiceStatus.OVERDUE):
            actions.insert(0, "Als bezahlt markieren")
        choice = questionary.select("Aktionen:", choices=actions).ask()

        if choice is None or choice == "Zurück":
            return
        if choice == "Als bezahlt markieren":
            services.invoices.mark_as_paid(invoice.id)
            services.clients.recalculate_totals(services.invoices.list())
            console.print("[green]Rechnung als bezahlt markiert.[/green]")
        elif choice == "Bearbeiten":
            invoice_form(services, existing=invoice)
        elif choice == "PDF exportieren":
            _export_pdf(invoice, services)
        elif choice == "Löschen":
            confirm = questionary.confirm(
                f"Rechnung {invoice.invoice_number} wirklich löschen?", default=False
            ).ask()
            if confirm:
                services.invoices.delete(invoice.id)
                services.clients.recalculate_totals(services.invoices.list())
                console.print("[green]Rechnung gelöscht.[/green]")
                return


def _export_pdf(invoice: Invoice, services: AppServices) -> None:
    try:
        path = services.documents.export_pdf(invoice, services.settings.get())
    except (InvoiceValidationError, DocumentGenerationError) as exc:
        console.print(f"[red]{exc}[/red]")
        return
    console.print(f"[green]PDF gespeichert: {path}[/green]")


def _select_client(services: AppServices, existing: Invoice | None) -> Client | None:
    clients = services.clients.list()
    client_choices = {f"{i}. {c.name}": c for i, c in enumerate(clients, 1)}
    default = None
    if existing is not None:
        default = next((label for label, c in client_choices.items() if c.id == existing.client_id), None)
    choice = questionary.select("Kunde:", choices=[*client_choices.keys(), "Neuer Kunde"], default=default).ask()
    if choice is None:
        return None
    if choice == "Neuer Kunde":
        return create_client_menu(services.clients)
    return client_choices[choice]


def _prompt_line_item() -> LineItem | None:
    description = questionary.text("  Leistung:").ask()
    if not description:
        return None
    sub_description = questionary.text("  Zusatzbeschreibung (optional):").ask() or None
    unit = questionary.select(
        "  Einheit:",
        choices=[questionary.Choice(label, value=value) for value, label in UNIT_LABELS.items()],
    ).ask()
    if unit is None:
        return None
    quantity = ask_number("  Menge:", default="1")
    if quantity is None:
        return None
    unit_price = ask_amount("  Einzelpreis (z.B. 650.00):")
    if unit_price is None:
        return None
    return make_line_item(description, quantity, unit_price, unit=unit, sub_description=sub_description)


def _items_table(items: list[LineItem]) -> Table:
    table = Table(title="Positionen")
    table.add_column("#", style="dim")
    table.add_column("Leistung")
    table.add_column("Menge", justify="right")
    table.add_column("Einzelpreis", justify="right")
    table.add_column("Betrag", justify="right")
    for i, item in enumerate(items, 1):
        table.add_row(
            str(i),
            item.description,
            f"{format_quantity(item.quantity)} {item.unit}",
            format_eur(item.unit_price),
            format_eur(item.total),
        )
    return table


def _pick_item(items: list[LineItem], message: str) -> int | None:
    choices = {f"{i}. {item.description} ({format_eur(item.total)})": i - 1 for i, item in enumerate(items, 1)}
    choice = questionary.select(message, choices=list(choices.keys())).ask()
    return None if choice is None else choices[choice]


def _edit_line_items(items: list[LineItem]) -> list[LineItem]:
    items = list(items)
    while True:
        if items:
            console.print(_items_table(items))
        actions = [ADD_ITEM]
        if items:
            actions += [CHANGE_ITEM, REMOVE_ITEM]
        actions.append(ITEMS_DONE)
        action = questionary.select("Positionen:", choices=actions).ask()

        if action is None or action == ITEMS_DONE:
            return items
        if action == ADD_ITEM:
            item = _prompt_line_item()
            if item is not None:
                items.append(item)
                console.print(f"  [green]Position hinzugefügt: {item.description} = {format_eur(item.total)}[/green]")
        elif action == CHANGE_ITEM:
            index = _pick_item(items, "Welche Position?")
            if index is None:
                continue
            item = items[index]
            quantity = ask_number("  Menge:", default=format_quantity(item.quantity).replace(",", "."))
            if quantity is None:
                continue
            unit_price = ask_amount("  Einzelpreis:", default=format_amount_input(item.unit_price))
            if unit_price is None:
                continue
            items[index] = with_quantity_and_price(item, quantity, unit_price)
        elif action == REMOVE_ITEM:
            index = _pick_item(items, "Welche Position entfernen?")
            if index is not None:
                items.pop(index)


def invoice_form(services: AppServices, existing: Invoice | None = None) -> Invoice | None:
    """Create a new invoice, or edit ``existing``. Returns the saved invoice."""
    settings = services.settings.get()
    if not is_business_info_complete(settings):
        console.print(
            "[red]Bitte zuerst die eigenen Geschäftsdaten unter Einstellungen vervollständigen.[/red]"
        )
        return None

    console.print()
    console.print("[bold]Rechnung bearbeiten[/bold]" if existing else "[bold]Neue Rechnung[/bold]", style="cyan")

    suggested = existing.invoice_number if existing else services.invoices.suggest_invoice_number(settings)
    invoice_number = questionary.text("Rechnungsnummer:", default=suggested).ask()
    if not invoice_number:
        console.print("[yellow]Vorgang abgebrochen.[/yellow]")
        return None

    invoice_date = ask_date("Rechnungsdatum (JJJJ-MM-TT):", default=existing.date if existing else today().isoformat())
    if invoice_date is None:
        return None
    period_start = ask_date(
        "Leistungszeitraum von (JJJJ-MM-TT):",
        default=existing.service_period_start if existing else invoice_date,
    )
    if period_start is None:
        return None
    period_end = ask_date(
        "Leistungszeitraum bis (JJJJ-MM-TT):",
        default=existing.service_period_end if existing else invoice_date,
    )
    if period_end is None:
        return None

    client = _select_client(services, existing)
    if client is None:
        console.print("[yellow]Vorgang abgebrochen.[/yellow]")
        return None

    line_items = _edit_line_items(existing.line_items if existing else [])

    kleinunternehmer = questionary.confirm(
        "Kleinunternehmer (§ 19 UStG, keine Umsatzsteuer)?",
        default=existing.vat_rate == 0 if existing else settings.preferences.is_kleinunternehmer,
    ).ask()
    payment_terms = ask_int(
        "Zahlungsziel (Tage):",
        default=existing.payment_terms if existing else settings.preferences.default_payment_terms,
    )
    if payment_terms is None:
        return None
    notes = questionary.text("Notizen (optional):", default=(existing.notes or "") if existing else "").ask() or ""

    already_paid = existing is not None and existing.status == InvoiceStatus.PAID
    if already_paid:
        save_choices = [SAVE_PAID, SAVE_AND_EXPORT]
    else:
        save_choices = [SAVE_DRAFT, SAVE_PENDING, SAVE_PAID, SAVE_AND_EXPORT]
    action = questionary.select("Speichern:", choices=[*save_choices, "Verwerfen"]).ask()
    if action is None or action == "Verwerfen":
        console.print("[yellow]Änderungen verworfen.[/yellow]")
        return None

    if action == SAVE_PAID or already_paid:
        status = InvoiceStatus.PAID
    elif action == SAVE_DRAFT:
        status = InvoiceStatus.DRAFT
    else:
        status = InvoiceStatus.PENDING

    try:
        invoice = build_invoice(
            invoice_number=invoice_number,
            invoice_date=invoice_date,
            client=client,
            line_items=line_items,
            payment_terms=payment_terms,
            is_kleinunternehmer=bool(kleinunternehmer),
            status=status,
            service_period_start=period_start,
            service_period_end=period_end,
            notes=notes,
            existing=existing,
            settings=settings,
        )
    except InvoiceValidationError as exc:
        console.print(f"[red]{exc}[/red]")
        return None

    if existing is None:
        invoice = services.invoices.add(invoice)
        console.print(f"[green bold]Rechnung {invoice.invoice_number} angelegt.[/green bold]")
    else:
        invoice = services.invoices.update(invoice)
        console.print(f"[green bold]Rechnung {invoice.invoice_number} aktualisiert.[/green bold]")
    services.clients.recalculate_totals(services.invoices.list())

    if action == SAVE_AND_EXPORT:
        _export_pdf(invoice, services)
    return invoice
