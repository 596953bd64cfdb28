from __future__ import annotations

import logging
from dataclasses import dataclass

import questionary
from rich.console import Console

from rechnung.cli.client_menu import list_clients_menu
from rechnung.cli.invoice_menu import invoice_form, list_invoices_menu, show_dashboard
from rechnung.cli.settings_menu import data_menu, settings_menu
from rechnung.errors import RechnungError
from rechnung.gateway.factory import get_gateway
from rechnung.services.client_service import ClientService
from rechnung.services.data_service import DataService
from rechnung.services.document_service import DocumentService
from rechnung.services.invoice_service import InvoiceService
from rechnung.services.settings_service import SettingsService
from rechnung.settings import settings as app_settings

logger = logging.getLogger(__name__)

console = Console()


@dataclass
class AppServices:
    invoices: InvoiceService
    clients: ClientService
    settings: SettingsService
    data: DataService
    documents: DocumentService


def _build_services() -> AppServices:
    gateway = get_gateway()
    return AppServices(
        invoices=InvoiceService(gateway),
        clients=ClientService(gateway),
        settings=SettingsService(gateway),
        data=DataService(gateway),
        documents=DocumentService(app_settings.output_dir),
    )


def reload_all(services: AppServices) -> None:
    services.settings.load()
    services.clients.load()
    services.invoices.load()


def start_session(services: AppServices) -> None:
    """Version check, load everything, then bring every status up to date."""
    if services.data.ensure_schema_version():
        console.print("[yellow]Datenformat veraltet, gespeicherte Daten wurden zurückgesetzt.[/yellow]")
    reload_all(services)
    services.invoices.refresh_statuses()


def main_menu() -> None:
    services = _build_services()
    start_session(services)

    console.print()
    console.print("[bold]Rechnungen für Kleinunternehmer[/bold]", style="cyan")
    console.print()

    while True:
        choice = questionary.select(
            "Hauptmenü",
            choices=[
                "Dashboard",
                "Rechnungen",
                "Neue Rechnung",
                "Kunden",
                "Einstellungen",
                "Daten",
                "Beenden",
            ],
        ).ask()

        if choice is None or choice == "Beenden":
            console.print("[bold]Auf Wiedersehen![/bold]")
            break
        try:
            if choice == "Dashboard":
                show_dashboard(services)
            elif choice == "Rechnungen":
                list_invoices_menu(services)
            elif choice == "Neue Rechnung":
                invoice_form(services)
            elif choice == "Kunden":
                list_clients_menu(services.clients, services.invoices)
            elif choice == "Einstellungen":
                settings_menu(services)
            elif choice == "Daten":
                data_menu(services)
        except RechnungError as exc:
            logger.exception("Menu action %r failed", choice)
            console.print(f"[red]Fehler: {exc}[/red]")
