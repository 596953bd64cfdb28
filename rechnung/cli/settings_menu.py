from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import questionary
from rich.console import Console
from rich.table import Table

from rechnung.cli.prompts import ask_int
from rechnung.clock import today
from rechnung.errors import ImportDataError
from rechnung.models import format_iban
from rechnung.models.business_settings import BankDetails, BusinessSettings, Preferences

if TYPE_CHECKING:
    from rechnung.cli.app import AppServices

logger = logging.getLogger(__name__)

console = Console()


def _show_settings(settings: BusinessSettings) -> None:
    table = Table(title="Einstellungen", show_header=False)
    table.add_column("Feld", style="dim")
    table.add_column("Wert")
    table.add_row("Name", settings.name)
    table.add_row("Adresse", f"{settings.street}, {settings.postal_code} {settings.city}".strip(", "))
    tax = settings.tax_number or ("wird beantragt" if settings.tax_number_pending else "-")
    table.add_row("Steuernummer", tax)
    table.add_row("E-Mail", settings.email or "")
    table.add_row("Telefon", settings.phone or "")
    bank = settings.bank_details
    table.add_row("Kontoinhaber", bank.account_holder)
    table.add_row("Bank", bank.bank_name)
    table.add_row("IBAN", format_iban(bank.iban))
    table.add_row("BIC", bank.bic)
    prefs = settings.preferences
    table.add_row("Zahlungsziel", f"{prefs.default_payment_terms} Tage")
    table.add_row("Kleinunternehmer", "ja" if prefs.is_kleinunternehmer else "nein")
    table.add_row("Nummernkreis", f"{prefs.invoice_prefix}{prefs.starting_invoice_number:03d}")
    table.add_row("Währung", prefs.currency)
    console.print()
    console.print(table)


def _edit_business(settings: BusinessSettings) -> BusinessSettings | None:
    name = questionary.text("Name / Firma:", default=settings.name).ask()
    if name is None:
        return None
    street = questionary.text("Straße:", default=settings.street).ask() or ""
    postal_code = questionary.text("PLZ:", default=settings.postal_code).ask() or ""
    city = questionary.text("Ort:", default=settings.city).ask() or ""
    tax_number = questionary.text("Steuernummer:", default=settings.tax_number or "").ask() or ""
    tax_number_pending = False
    if not tax_number:
        tax_number_pending = bool(
            questionary.confirm("Steuernummer beantragt?", default=settings.tax_number_pending).ask()
        )
    email = questionary.text("E-Mail:", default=settings.email or "").ask() or ""
    phone = questionary.text("Telefon:", default=settings.phone or "").ask() or ""
    return settings.model_copy(
        update=dict(
            name=name,
            street=street,
            postal_code=postal_code,
            city=city,
            tax_number=tax_number,
            tax_number_pending=tax_number_pending,
            email=email,
            phone=phone,
        )
    )


def _edit_bank(settings: BusinessSettings) -> BusinessSettings | None:
    bank = settings.bank_details
    account_holder = questionary.text("Kontoinhaber:", default=bank.account_holder).ask()
    if account_holder is None:
        return None
    bank_name = questionary.text("Bank:", default=bank.bank_name).ask() or ""
    iban = questionary.text("IBAN:", default=bank.iban).ask() or ""
    bic = questionary.text("BIC:", default=bank.bic).ask() or ""
    details = BankDetails(account_holder=account_holder, bank_name=bank_name, iban="".join(iban.split()), bic=bic)
    return settings.model_copy(update={"bank_details": details})


def _edit_preferences(settings: BusinessSettings) -> BusinessSettings | None:
    prefs = settings.preferences
    terms = ask_int("Standard-Zahlungsziel (Tage):", default=prefs.default_payment_terms)
    if terms is None:
        return None
    kleinunternehmer = questionary.confirm(
        "Kleinunternehmer nach § 19 UStG?", default=prefs.is_kleinunternehmer
    ).ask()
    prefix = questionary.text("Präfix Rechnungsnummer:", default=prefs.invoice_prefix).ask()
    if prefix is None:
        return None
    starting = ask_int("Erste Rechnungsnummer:", default=prefs.starting_invoice_number)
    if starting is None:
        return None
    new_prefs = Preferences(
        default_payment_terms=terms,
        is_kleinunternehmer=bool(kleinunternehmer),
        invoice_prefix=prefix,
        starting_invoice_number=max(starting, 1),
        currency=prefs.currency,
    )
    return settings.model_copy(update={"preferences": new_prefs})


def settings_menu(services: AppServices) -> None:
    while True:
        _show_settings(services.settings.get())
        choice = questionary.select(
            "Einstellungen:",
            choices=[
                "Geschäftsdaten bearbeiten",
                "Bankverbindung bearbeiten",
                "Voreinstellungen bearbeiten",
                "Auf Standard zurücksetzen",
                "Zurück",
            ],
        ).ask()

        if choice is None or choice == "Zurück":
            return

        current = services.settings.get()
        updated = None
        if choice == "Geschäftsdaten bearbeiten":
            updated = _edit_business(current)
        elif choice == "Bankverbindung bearbeiten":
            updated = _edit_bank(current)
        elif choice == "Voreinstellungen bearbeiten":
            updated = _edit_preferences(current)
        elif choice == "Auf Standard zurücksetzen":
            if questionary.confirm("Alle Einstellungen zurücksetzen?", default=False).ask():
                services.settings.reset()
                console.print("[green]Einstellungen zurückgesetzt.[/green]")
            continue

        if updated is not None:
            services.settings.update(updated)
            console.print("[green]Einstellungen gespeichert.[/green]")


def data_menu(services: AppServices) -> None:
    from rechnung.cli.app import reload_all

    choice = questionary.select(
        "Daten:",
        choices=["Exportieren", "Importieren", "Alle Daten löschen", "Zurück"],
    ).ask()

    if choice == "Exportieren":
        default_name = f"rechnung-export-{today().isoformat()}.json"
        target = questionary.text("Zieldatei:", default=default_name).ask()
        if not target:
            return
        try:
            Path(target).write_text(services.data.export_data(), encoding="utf-8")
        except OSError as exc:
            logger.exception("Export to %s failed", target)
            console.print(f"[red]Export fehlgeschlagen: {exc}[/red]")
            return
        console.print(f"[green]Daten exportiert nach {target}.[/green]")

    elif choice == "Importieren":
        source = questionary.path("Importdatei:").ask()
        if not source:
            return
        try:
            text = Path(source).read_text(encoding="utf-8")
        except OSError as exc:
            console.print(f"[red]Datei kann nicht gelesen werden: {exc}[/red]")
            return
        if not questionary.confirm("Vorhandene Daten werden überschrieben. Fortfahren?", default=False).ask():
            return
        try:
            services.data.import_data(text)
        except ImportDataError as exc:
            console.print(f"[red]Import fehlgeschlagen: {exc}[/red]")
            return
        reload_all(services)
        console.print("[green]Daten importiert.[/green]")

    elif choice == "Alle Daten löschen":
        if questionary.confirm("Wirklich ALLE Daten löschen?", default=False).ask():
            services.data.clear_data()
            reload_all(services)
            console.print("[green]Alle Daten gelöscht.[/green]")
