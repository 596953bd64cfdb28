from __future__ import annotations

import math
from datetime import date

import questionary
from rich.console import Console

from rechnung.models import parse_eur

console = Console()


def ask_date(message: str, default: str = "") -> str | None:
    """Prompt until a 'YYYY-MM-DD' date is entered. None means cancelled."""
    while True:
        value = questionary.text(message, default=default).ask()
        if value is None:
            return None
        value = value.strip()
        try:
            return date.fromisoformat(value).isoformat()
        except ValueError:
            console.print("[red]Ungültiges Datum. Format: JJJJ-MM-TT[/red]")


def ask_amount(message: str, default: str = "") -> float | None:
    while True:
        value = questionary.text(message, default=default).ask()
        if value is None:
            return None
        parsed = parse_eur(value)
        if parsed is not None and parsed >= 0:
            return parsed
        console.print("[red]Ungültiger Betrag. Bitte erneut versuchen.[/red]")


def ask_number(message: str, default: str = "") -> float | None:
    while True:
        value = questionary.text(message, default=default).ask()
        if value is None:
            return None
        try:
            parsed = float(value.strip().replace(",", "."))
        except ValueError:
            parsed = -1
        if math.isfinite(parsed) and parsed >= 0:
            return parsed
        console.print("[red]Bitte eine Zahl ≥ 0 eingeben.[/red]")


def ask_int(message: str, default: int = 0) -> int | None:
    while True:
        value = questionary.text(message, default=str(default)).ask()
        if value is None:
            return None
        try:
            parsed = int(value.strip())
        except ValueError:
            parsed = -1
        if parsed >= 0:
            return parsed
        console.print("[red]Bitte eine ganze Zahl ≥ 0 eingeben.[/red]")


def format_amount_input(amount: float) -> str:
    """Default value for an amount prompt: 85.5 -> '85.50'"""
    return f"{amount:.2f}"
