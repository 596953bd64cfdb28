import math
from datetime import date


def format_eur(amount: float) -> str:
    """Format an amount the German way: 1234.5 -> '1.234,50 €'"""
    formatted = f"{amount:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{formatted} €"


def parse_eur(text: str) -> float | None:
    """Parse an amount string into a float. Returns None on invalid input.

    Accepts formats like '1200', '1200.50', '1.200,50', '1200,5' and an
    optional trailing '€'.
    """
    text = text.strip().rstrip("€").strip()
    if not text:
        return None
    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return round(value, 2)


def format_date(iso_date: str) -> str:
    """'2025-01-20' -> '20.01.2025'. Unparseable input is returned as-is."""
    try:
        return date.fromisoformat(iso_date).strftime("%d.%m.%Y")
    except (TypeError, ValueError):
        return iso_date or ""


def format_date_range(start: str, end: str) -> str:
    return f"{format_date(start)} - {format_date(end)}"


def format_iban(iban: str) -> str:
    """Group an IBAN in blocks of four: 'DE89370400440532013000' -> 'DE89 3704 0044 0532 0130 00'"""
    cleaned = "".join(iban.split())
    if not cleaned:
        return iban
    return " ".join(cleaned[i : i + 4] for i in range(0, len(cleaned), 4))


def format_quantity(quantity: float) -> str:
    """Drop a trailing '.0' and use a decimal comma: 2.0 -> '2', 1.5 -> '1,5'"""
    if float(quantity).is_integer():
        return str(int(quantity))
    return f"{quantity:g}".replace(".", ",")
