from decimal import Decimal

from rechnung import calculations
from rechnung.models.invoice import LineItem


class TestLineItemTotal:
    def test_days_times_rate(self):
        assert calculations.line_item_total(2, 650) == 1300.0

    def test_fractional_quantity(self):
        assert calculations.line_item_total(1.5, 85.5) == 128.25

    def test_rounds_half_up(self):
        assert calculations.line_item_total(0.5, 0.25) == 0.13

    def test_zero(self):
        assert calculations.line_item_total(0, 650) == 0.0


class TestSubtotal:
    def test_sums_stored_totals(self):
        items = [
            LineItem(description="A", quantity=1, unit_price=0.1, total=0.1),
            LineItem(description="B", quantity=1, unit_price=0.2, total=0.2),
        ]
        assert calculations.subtotal(items) == 0.3

    def test_empty(self):
        assert calculations.subtotal([]) == 0.0


class TestVat:
    def test_standard_rate(self):
        assert calculations.vat(100, 19) == 19.0

    def test_zero_rate(self):
        assert calculations.vat(100, 0) == 0.0

    def test_rounds_to_cents(self):
        # 33.33 * 0.19 = 6.3327
        assert calculations.vat(33.33, 19) == 6.33

    def test_total(self):
        assert calculations.total(100, 19) == 119.0
        assert calculations.total(0.1, 0.2) == 0.3


class TestDueDate:
    def test_adds_calendar_days(self):
        assert calculations.due_date("2025-01-06", 14) == "2025-01-20"

    def test_crosses_leap_day(self):
        assert calculations.due_date("2024-02-20", 10) == "2024-03-01"

    def test_zero_terms(self):
        assert calculations.due_date("2025-03-31", 0) == "2025-03-31"


class TestVatRateFor:
    def test_kleinunternehmer(self):
        assert calculations.vat_rate_for(True) == 0

    def test_regular(self):
        assert calculations.vat_rate_for(False) == 19


def test_quantize_money():
    assert calculations.quantize_money(2.675) == Decimal("2.68")
    assert calculations.quantize_money(Decimal("1.005")) == Decimal("1.01")


def test_due_date_rolls_over_month_and_year():
    assert calculations.due_date("2025-01-20", 14) == "2025-02-03"
    assert calculations.due_date("2024-02-20", 14) == "2024-03-05"
    assert calculations.due_date("2025-12-25", 14) == "2026-01-08"
    assert calculations.line_item_total(2, 50) == 100.0
