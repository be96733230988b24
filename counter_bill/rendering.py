"""Rich text helpers for the counter screen."""

from __future__ import annotations

from rich.text import Text

from counter_bill.constant import CURRENCY_SYMBOL
from counter_bill.models import BillSnapshot, CatalogItem, PaymentMode
from counter_bill.receipt import format_money, format_percentage


def badge_style(mode: PaymentMode) -> str:
    """Return a consistent badge style for payment mode tags."""
    if mode is PaymentMode.ELECTRONIC:
        return "bold #ffffff on #2f6db5"
    return "bold #0b1f0f on #5fbf72"


def format_payment_badge(mode: PaymentMode) -> Text:
    return Text(f" {mode.label} ", style=badge_style(mode))


def format_catalog_row(item: CatalogItem, quantity: int) -> Text:
    """Render a catalog row with its price and current quantity."""
    text = Text()
    if quantity > 0:
        text.append(f"[{quantity:>2}]", style="bold #0b1f0f on #5fbf72")
    else:
        text.append("[  ]", style="dim")
    text.append(f" {item.name}")
    text.append(f"  {CURRENCY_SYMBOL}{format_money(item.unit_price)}", style="dim")
    return text


def format_bill_preview(snapshot: BillSnapshot | None) -> Text:
    """Render live bill totals. Labelled as a preview; printing re-snapshots."""
    text = Text()
    if snapshot is None:
        text.append("(nothing selected)", style="dim")
        return text

    for idx, line in enumerate(snapshot.lines):
        if idx > 0:
            text.append("\n")
        text.append(f"{line.quantity} x {line.name}")
        text.append(f"  {format_money(line.line_total)}", style="dim")

    text.append("\n\n")
    text.append(f"Items {snapshot.item_count}  Qty {snapshot.total_quantity}\n")
    text.append(f"Sub Total  {CURRENCY_SYMBOL}{format_money(snapshot.subtotal)}\n")
    if snapshot.tax_amount > 0:
        text.append(
            f"GST {format_percentage(snapshot.gst_percentage)}%  {CURRENCY_SYMBOL}{format_money(snapshot.tax_amount)}\n"
        )
    text.append(f"Total  {CURRENCY_SYMBOL}{format_money(snapshot.grand_total)}", style="bold")
    return text
