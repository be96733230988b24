"""Bill computation: cart + catalog + tax config -> BillSnapshot."""

from __future__ import annotations

import random
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from counter_bill.cart import CartState
from counter_bill.errors import EmptySelectionError
from counter_bill.models import BillSnapshot, CatalogItem, LineItem, PaymentMode, TaxConfig

TWOPLACES = Decimal("0.01")
HUNDRED = Decimal(100)

BILL_NUMBER_MIN = 1
BILL_NUMBER_MAX = 1000


def to_decimal(value: object) -> Decimal:
    """Convert a stored amount to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def new_bill_number(rng: random.Random | None = None) -> int:
    """Human-readable ticket number. Not unique, not sequential."""
    return (rng or random).randint(BILL_NUMBER_MIN, BILL_NUMBER_MAX)


def compute_snapshot(
    cart: CartState,
    catalog: Iterable[CatalogItem],
    tax_config: TaxConfig,
    payment_mode: PaymentMode,
    bill_number: int,
    timestamp: datetime | None = None,
) -> BillSnapshot:
    """Freeze the current selection into an immutable bill.

    Lines follow catalog order, not selection order. Line totals are exact;
    the only rounding is applied once to ``subtotal * gst / 100``.
    """
    gst = to_decimal(tax_config.gst_percentage)
    if gst < 0 or gst > HUNDRED:
        raise ValueError(f"gst_percentage must be between 0 and 100, got {gst}")

    quantities = cart.quantities()
    lines: list[LineItem] = []
    for item in catalog:
        qty = quantities.get(item.item_id, 0)
        if qty <= 0:
            continue
        unit_price = to_decimal(item.unit_price)
        if unit_price < 0:
            raise ValueError(f"unit_price must be non-negative for {item.item_id!r}")
        lines.append(
            LineItem(
                item_id=item.item_id,
                name=item.name,
                unit_price=unit_price,
                quantity=qty,
                line_total=unit_price * qty,
            )
        )

    if not lines:
        raise EmptySelectionError("No items selected")

    subtotal = sum((line.line_total for line in lines), Decimal(0))
    tax_amount = round2(subtotal * gst / HUNDRED) if gst else Decimal("0.00")

    return BillSnapshot(
        bill_number=bill_number,
        timestamp=timestamp or datetime.now(),
        identity=tax_config.identity,
        payment_mode=payment_mode,
        gst_percentage=gst,
        lines=tuple(lines),
        subtotal=subtotal,
        tax_amount=tax_amount,
        grand_total=subtotal + tax_amount,
    )
