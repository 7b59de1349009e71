"""Invoice arithmetic and numbering"""

import re
from datetime import datetime
from typing import Any, Optional

INVOICE_NUMBER_PATTERN = re.compile(r"INV-(\d+)")


def _num(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def money(value: float) -> float:
    return round(value, 2)


def item_amount(item: dict[str, Any]) -> float:
    """Explicit amount when given, otherwise quantity x unit price"""
    if item.get("amount") not in (None, ""):
        return money(_num(item.get("amount")))
    quantity = _num(item.get("quantity"), 1.0)
    return money(quantity * _num(item.get("unitPrice")))


def calculate_invoice_totals(
    items: list[dict[str, Any]], tax_rate: Any = 0, discount_amount: Any = 0
) -> dict[str, float]:
    """
    Tax applies to taxable items only (items are taxable unless marked otherwise).

    Returns:
        {"subtotal", "taxAmount", "total"} rounded to 2 decimals
    """
    subtotal = 0.0
    taxable_amount = 0.0
    for item in items:
        amount = _num(item.get("quantity"), 1.0) * _num(item.get("unitPrice"))
        subtotal += amount
        if item.get("taxable") is not False:
            taxable_amount += amount

    tax_amount = taxable_amount * _num(tax_rate) / 100
    total = subtotal + tax_amount - _num(discount_amount)
    return {"subtotal": money(subtotal), "taxAmount": money(tax_amount), "total": money(total)}


def calculate_simple_totals(subtotal: float, tax_rate: Any = 0, discount_amount: Any = 0) -> dict[str, float]:
    """Tax on the whole subtotal"""
    tax_amount = subtotal * _num(tax_rate) / 100
    total = subtotal + tax_amount - _num(discount_amount)
    return {"subtotal": money(subtotal), "taxAmount": money(tax_amount), "total": money(total)}


def next_invoice_sequence(last_invoice_number: Optional[str]) -> int:
    """Works for both "INV-0007" and "INV-0007 - Jane Doe - 01-02-2025" """
    if not last_invoice_number:
        return 1
    match = INVOICE_NUMBER_PATTERN.search(last_invoice_number)
    return int(match.group(1)) + 1 if match else 1


def format_invoice_number(
    sequence: int, customer_name: Optional[str] = None, invoice_date: Optional[datetime] = None
) -> str:
    base = f"INV-{sequence:04d}"
    if invoice_date is None:
        return base
    label = (customer_name or "").strip() or "Customer"
    return f"{base} - {label} - {invoice_date.strftime('%d-%m-%Y')}"


def apply_payment_totals(invoice, amount_paid: float, now: datetime) -> None:
    """
    Recompute paid/due amounts and the resulting status.
    A fully paid invoice becomes `paid`; a paid invoice with money due again
    goes back to `sent`.
    """
    invoice.amount_paid = money(amount_paid)
    invoice.amount_due = money(_num(invoice.total) - invoice.amount_paid)
    if invoice.amount_due <= 0:
        invoice.status = "paid"
        invoice.paid_at = invoice.paid_at or now
    elif invoice.status == "paid":
        invoice.status = "sent"
        invoice.paid_at = None
