from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from rechnung.errors import ClientInUseError
from rechnung.models import format_eur
from rechnung.models.client import Client
from rechnung.services.client_service import ClientService, compute_totals
from rechnung.services.invoice_service import InvoiceService

console = Console()


def prompt_client(existing: Client | None = None) -> Client | None:
    """Ask for client fields. Returns None when cancelled or the name is empty."""
    name = questionary.text("Name:", default=existing.name if existing else "").ask()
    if not name:
        console.print("[red]Kundenname ist erforderlich.[/red]")
        return None
    street = questionary.text("Straße:", default=existing.street if existing else "").ask() or ""
    postal_code = questionary.text("PLZ:", default=existing.postal_code if existing else "").ask() or ""
    city = questionary.text("Ort:", default=existing.city if existing else "").ask() or ""
    email = questionary.text("E-Mail (optional):", default=(existing.email or "") if existing else "").ask() or None

    fields = dict(name=name, street=street, postal_code=postal_code, city=city, email=email)
    if existing is not None:
        return existing.model_copy(update=fields)
    return Client(**fields)


def create_client_menu(client_service: ClientService) -> Client | None:
    console.print()
    console.print("[bold]Neuer Kunde[/bold]", style="cyan")
    client = prompt_client()
    if client is None:
        return None
    client = client_service.add(client)
    console.print(f"[green]Kunde '{client.name}' angelegt.[/green]")
    return client


def list_clients_menu(client_service: ClientService, invoice_service: InvoiceService) -> None:
    while True:
        clients = compute_totals(client_service.list(), invoice_service.list())

        console.print()
        if clients:
            table = Table(title="Kunden")
            table.add_column("Name", style="bold")
            table.add_column("Adresse")
            table.add_column("E-Mail")
            table.add_column("Rechnungen", justify="right")
            table.add_column("Umsatz", justify="right")
            for c in clients:
                table.add_row(
                    c.name,
                    f"{c.street}, {c.postal_code} {c.city}".strip(", "),
                    c.email or "",
                    str(len(invoice_service.list_for_client(c.id))),
                    format_eur(c.total_invoiced),
                )
            console.print(table)
        else:
            console.print("[yellow]Noch keine Kunden angelegt.[/yellow]")
        console.print()

        client_choices = {f"{i}. {c.name}": c for i, c in enumerate(clients, 1)}
        choice = questionary.select(
            "Kunden:",
            choices=["Neuer Kunde", *client_choices.keys(), "Zurück"],
        ).ask()

        if choice is None or choice == "Zurück":
            return
        if choice == "Neuer Kunde":
            create_client_menu(client_service)
            continue
        _client_detail_menu(client_choices[choice], client_service, invoice_service)


def _client_detail_menu(client: Client, client_service: ClientService, invoice_service: InvoiceService) -> None:
    action = questionary.select(
        f"Kunde: {client.name}",
        choices=["Bearbeiten", "Löschen", "Zurück"],
    ).ask()

    if action == "Bearbeiten":
        updated = prompt_client(client)
        if updated is not None:
            client_service.update(updated)
            console.print("[green]Kunde aktualisiert.[/green]")
    elif action == "Löschen":
        confirm = questionary.confirm(f"Kunde '{client.name}' wirklich löschen?", default=False).ask()
        if not confirm:
            return
        try:
            client_service.delete_if_unreferenced(client.id, invoice_service.list())
        except ClientInUseError as exc:
            console.print(
                f"[yellow]'{exc.client_name}' kann nicht gelöscht werden: "
                f"{exc.invoice_count} Rechnung(en) verweisen auf diesen Kunden.[/yellow]"
            )
            return
        console.print("[green]Kunde gelöscht.[/green]")
