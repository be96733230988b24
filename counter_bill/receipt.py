"""Receipt layout for 58mm thermal rolls.

``render`` turns a ``BillSnapshot`` into a ``ReceiptDocument``: a fixed,
top-to-bottom sequence of monospaced lines. Printer backends only decide how
each line is drawn; the section order below is what the counter staff and
the printer hardware rely on:

    business identity
    bill number / date / bill-to
    item table
    item count / total quantity
    subtotal
    tax (only when non-zero)
    grand total (large)
    payment mode
    closing message
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from counter_bill.constant import (
    BILL_TO_LABEL,
    CLOSING_MESSAGE,
    CURRENCY_SYMBOL,
    RECEIPT_DATE_FORMAT,
    RECEIPT_NAME_COLUMN,
    RECEIPT_QTY_COLUMN,
    RECEIPT_RATE_COLUMN,
    RECEIPT_TOTAL_COLUMN,
    RECEIPT_WIDTH_CHARS,
)
from counter_bill.models import BillSnapshot, LineItem
from counter_bill.pricing import round2

_ELLIPSIS = ".."


class LineStyle(Enum):
    NORMAL = "normal"
    BOLD = "bold"
    LARGE = "large"


class Align(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class ReceiptLine:
    text: str
    style: LineStyle = LineStyle.NORMAL
    align: Align = Align.LEFT

    @property
    def is_separator(self) -> bool:
        return bool(self.text) and set(self.text) == {"-"}


@dataclass(frozen=True)
class ReceiptDocument:
    """Printable receipt. ``width`` is the column count of a NORMAL line."""

    lines: tuple[ReceiptLine, ...]
    width: int = RECEIPT_WIDTH_CHARS

    def to_text(self) -> str:
        """Plain monospaced rendition, one receipt line per text line."""
        out: list[str] = []
        for line in self.lines:
            if line.align is Align.CENTER:
                out.append(line.text.center(self.width).rstrip())
            elif line.align is Align.RIGHT:
                out.append(line.text.rjust(self.width))
            else:
                out.append(line.text)
        return "\n".join(out) + "\n"

    def texts(self) -> list[str]:
        return [line.text for line in self.lines]


def format_money(amount: Decimal) -> str:
    return f"{round2(amount):.2f}"


def format_percentage(value: Decimal) -> str:
    """5 -> "5", 2.50 -> "2.5"."""
    normalized = value.normalize()
    if normalized == normalized.to_integral():
        return str(normalized.quantize(Decimal(1)))
    return format(normalized, "f")


def _fit(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: max(0, width - len(_ELLIPSIS))] + _ELLIPSIS


def _separator(width: int) -> ReceiptLine:
    return ReceiptLine("-" * width)


def _label_value(label: str, value: str, width: int) -> str:
    gap = max(1, width - len(label) - len(value))
    return f"{label}{' ' * gap}{value}"


def _column(value: str, width: int) -> str:
    return " " + value.rjust(width - 1)


def _amount_columns(qty: str, rate: str, total: str) -> str:
    return (
        _column(qty, RECEIPT_QTY_COLUMN)
        + _column(rate, RECEIPT_RATE_COLUMN)
        + _column(total, RECEIPT_TOTAL_COLUMN)
    )


def _table_row(name: str, qty: str, rate: str, total: str) -> str:
    return _fit(name, RECEIPT_NAME_COLUMN).ljust(RECEIPT_NAME_COLUMN) + _amount_columns(qty, rate, total)


def _item_rows(line: LineItem, width: int) -> list[ReceiptLine]:
    qty = str(line.quantity)
    rate = format_money(line.unit_price)
    total = format_money(line.line_total)
    row = _table_row(line.name, qty, rate, total)
    if len(row) <= width:
        return [ReceiptLine(row)]
    # Amounts too wide for one row: name first, amounts right-aligned below.
    return [
        ReceiptLine(_fit(line.name, width)),
        ReceiptLine(_amount_columns(qty, rate, total).rjust(width)),
    ]


def render(snapshot: BillSnapshot, width: int = RECEIPT_WIDTH_CHARS) -> ReceiptDocument:
    identity = snapshot.identity.or_default()
    lines: list[ReceiptLine] = [
        ReceiptLine(_fit(identity.name or "", width), LineStyle.BOLD, Align.CENTER),
        ReceiptLine(_fit(identity.address or "", width), align=Align.CENTER),
        ReceiptLine(_fit(f"Phone: {identity.phone}", width), align=Align.CENTER),
        _separator(width),
        ReceiptLine(f"Bill No: {snapshot.bill_number}"),
        ReceiptLine(f"Date: {snapshot.timestamp.strftime(RECEIPT_DATE_FORMAT)}"),
        ReceiptLine(f"Bill To: {BILL_TO_LABEL}"),
        _separator(width),
        ReceiptLine(_table_row("Item", "Qty", "Rate", "Total"), LineStyle.BOLD),
    ]
    for line in snapshot.lines:
        lines.extend(_item_rows(line, width))
    lines.append(_separator(width))
    lines.append(ReceiptLine(f"Total Items: {snapshot.item_count}"))
    lines.append(ReceiptLine(f"Total Quantity: {snapshot.total_quantity}"))
    lines.append(
        ReceiptLine(_label_value("Sub Total:", f"{CURRENCY_SYMBOL}{format_money(snapshot.subtotal)}", width))
    )
    if snapshot.tax_amount > 0:
        label = f"GST {format_percentage(snapshot.gst_percentage)}%:"
        lines.append(ReceiptLine(_label_value(label, f"{CURRENCY_SYMBOL}{format_money(snapshot.tax_amount)}", width)))
    lines.append(_separator(width))
    lines.append(
        ReceiptLine(f"Total {CURRENCY_SYMBOL}{format_money(snapshot.grand_total)}", LineStyle.LARGE, Align.CENTER)
    )
    lines.append(ReceiptLine(_label_value("Mode of Payment:", snapshot.payment_mode.label, width)))
    lines.append(_separator(width))
    lines.append(ReceiptLine(CLOSING_MESSAGE, LineStyle.BOLD, Align.CENTER))
    return ReceiptDocument(lines=tuple(lines), width=width)
