from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from pydantic import BaseModel

from rechnung.clock import today
from rechnung.models.invoice import Invoice, InvoiceStatus

OPEN_STATUSES = (InvoiceStatus.PENDING, InvoiceStatus.OVERDUE)


class InvoiceStats(BaseModel):
    revenue_this_month: float = 0
    open_count: int = 0
    open_amount: float = 0
    overdue_count: int = 0
    paid_this_month_count: int = 0
    unique_clients: int = 0


def _in_month(iso_date: str, on: date) -> bool:
    try:
        d = date.fromisoformat(iso_date)
    except ValueError:
        return False
    return (d.year, d.month) == (on.year, on.month)


def compute_stats(invoices: Iterable[Invoice], on: date | None = None) -> InvoiceStats:
    """Dashboard figures. "This month" is judged by the invoice date."""
    on = on or today()
    invoices = list(invoices)
    paid_this_month = [
        inv for inv in invoices if inv.status == InvoiceStatus.PAID and _in_month(inv.date, on)
    ]
    open_invoices = [inv for inv in invoices if inv.status in OPEN_STATUSES]
    return InvoiceStats(
        revenue_this_month=round(sum(inv.total for inv in paid_this_month), 2),
        open_count=len(open_invoices),
        open_amount=round(sum(inv.total for inv in open_invoices), 2),
        overdue_count=sum(1 for inv in open_invoices if inv.status == InvoiceStatus.OVERDUE),
        paid_this_month_count=len(paid_this_month),
        unique_clients=len({inv.client_id for inv in invoices}),
    )


def recent_invoices(invoices: Iterable[Invoice], limit: int = 5) -> list[Invoice]:
    return sorted(invoices, key=lambda inv: (inv.date, inv.created_at), reverse=True)[:limit]


SORT_FIELDS = ("date", "invoice_number", "amount", "client")

_SORT_KEYS = {
    "date": lambda inv: inv.date,
    "invoice_number": lambda inv: inv.invoice_number,
    "amount": lambda inv: inv.total,
    "client": lambda inv: inv.client.name.casefold(),
}


def filter_invoices(
    invoices: Iterable[Invoice],
    query: str = "",
    status: InvoiceStatus | None = None,
    sort_field: str = "date",
    order: str = "desc",
) -> list[Invoice]:
    """Invoice list view: search, status filter, then sort.

    ``query`` matches case-insensitively against the invoice number and the
    client name. ``status=None`` keeps every status.
    """
    if sort_field not in _SORT_KEYS:
        raise ValueError(f"Unknown sort field: {sort_field}")
    if order not in ("asc", "desc"):
        raise ValueError(f"Unknown sort order: {order}")
    needle = query.strip().casefold()
    matches = [
        inv
        for inv in invoices
        if (status is None or inv.status == status)
        and (not needle or needle in inv.invoice_number.casefold() or needle in inv.client.name.casefold())
    ]
    return sorted(matches, key=_SORT_KEYS[sort_field], reverse=order == "desc")


class MonthlyRevenue(BaseModel):
    month: str  # 'YYYY-MM'
    paid: float = 0
    pending: float = 0


def _shift_month(on: date, months_back: int) -> tuple[int, int]:
    index = on.year * 12 + on.month - 1 - months_back
    return index // 12, index % 12 + 1


def revenue_by_month(invoices: Iterable[Invoice], months: int = 6, on: date | None = None) -> list[MonthlyRevenue]:
    """Paid and still-open totals per month, oldest first, ending with ``on``'s month.

    Invoices are bucketed by invoice date; drafts are left out.
    """
    on = on or today()
    buckets: dict[str, list[float]] = {}
    for back in range(months - 1, -1, -1):
        year, month = _shift_month(on, back)
        buckets[f"{year:04d}-{month:02d}"] = [0.0, 0.0]
    for inv in invoices:
        bucket = buckets.get(inv.date[:7])
        if bucket is None:
            continue
        if inv.status == InvoiceStatus.PAID:
            bucket[0] += inv.total
        elif inv.status in OPEN_STATUSES:
            bucket[1] += inv.total
    return [
        MonthlyRevenue(month=month, paid=round(paid, 2), pending=round(pending, 2))
        for month, (paid, pending) in buckets.items()
    ]
