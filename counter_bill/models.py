"""Domain models for counter-bill."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from counter_bill.constant import (
    DEFAULT_BUSINESS_ADDRESS,
    DEFAULT_BUSINESS_NAME,
    DEFAULT_BUSINESS_PHONE,
    PAYMENT_MODE_LABELS,
)


@dataclass(frozen=True)
class CatalogItem:
    """A sellable item as provided by the catalog store."""

    item_id: str
    name: str
    unit_price: Decimal


@dataclass(frozen=True)
class BusinessIdentity:
    """Business name, address and phone printed on top of each receipt."""

    name: str | None = None
    address: str | None = None
    phone: str | None = None

    def or_default(self) -> BusinessIdentity:
        """Fill blank fields from the fixed default identity."""
        return BusinessIdentity(
            name=(self.name or "").strip() or DEFAULT_BUSINESS_NAME,
            address=(self.address or "").strip() or DEFAULT_BUSINESS_ADDRESS,
            phone=(self.phone or "").strip() or DEFAULT_BUSINESS_PHONE,
        )


@dataclass(frozen=True)
class TaxConfig:
    """Flat GST rate plus the business identity it was configured with."""

    gst_percentage: Decimal
    identity: BusinessIdentity = BusinessIdentity()


class PaymentMode(Enum):
    CASH = "cash"
    ELECTRONIC = "electronic"

    @property
    def label(self) -> str:
        return PAYMENT_MODE_LABELS[self.value]


@dataclass(frozen=True)
class LineItem:
    """One selected catalog item at its billed quantity."""

    item_id: str
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal


@dataclass(frozen=True)
class BillSnapshot:
    """Point-in-time, immutable bill. Printing reads only from this."""

    bill_number: int
    timestamp: datetime
    identity: BusinessIdentity
    payment_mode: PaymentMode
    gst_percentage: Decimal
    lines: tuple[LineItem, ...]
    subtotal: Decimal
    tax_amount: Decimal
    grand_total: Decimal

    @property
    def item_count(self) -> int:
        return len(self.lines)

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)
