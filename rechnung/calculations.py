"""Invoice arithmetic.

Amounts are stored as floats (two decimals) but every computation goes
through ``Decimal`` with half-up rounding so that 0.125 rounds to 0.13 and
sums don't pick up binary noise.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from rechnung.constants import STANDARD_VAT_RATE
from rechnung.models.invoice import LineItem

CENT = Decimal("0.01")


def _dec(value: float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: float | int | Decimal) -> Decimal:
    return _dec(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_item_total(quantity: float, unit_price: float) -> float:
    return float(quantize_money(_dec(quantity) * _dec(unit_price)))


def subtotal(line_items: Iterable[LineItem]) -> float:
    # Sums the stored totals; item totals must already be current.
    return float(sum((_dec(item.total) for item in line_items), Decimal("0")))


def vat(subtotal_amount: float, vat_rate: float) -> float:
    if vat_rate == 0:
        return 0.0
    return float(quantize_money(_dec(subtotal_amount) * _dec(vat_rate) / 100))


def total(subtotal_amount: float, vat_amount: float) -> float:
    return float(quantize_money(_dec(subtotal_amount) + _dec(vat_amount)))


def due_date(invoice_date: str, payment_terms: int) -> str:
    """Invoice date plus ``payment_terms`` calendar days, as 'YYYY-MM-DD'."""
    return (date.fromisoformat(invoice_date) + timedelta(days=payment_terms)).isoformat()


def vat_rate_for(is_kleinunternehmer: bool) -> int:
    return 0 if is_kleinunternehmer else STANDARD_VAT_RATE
