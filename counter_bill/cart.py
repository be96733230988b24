"""Counter selection state: catalog item id -> selected quantity."""

from __future__ import annotations

from typing import Iterable

from counter_bill.errors import InvalidItemError
from counter_bill.models import CatalogItem, LineItem


class CartState:
    """Mutable working set of quantities for the current transaction.

    Keys are fixed by the loaded catalog. A quantity of 0 means "not
    selected". ``version`` increases on every mutation so callers can tell
    whether the cart changed between two points in time.
    """

    def __init__(self, catalog: Iterable[CatalogItem] = ()) -> None:
        self._quantities: dict[str, int] = {}
        self.version = 0
        self.load(catalog)

    def load(self, catalog: Iterable[CatalogItem]) -> None:
        """Replace known items with ``catalog``, all quantities zero."""
        self._quantities = {item.item_id: 0 for item in catalog}
        self.version += 1

    def _require(self, item_id: str) -> int:
        try:
            return self._quantities[item_id]
        except KeyError:
            raise InvalidItemError(item_id) from None

    def increment(self, item_id: str) -> int:
        qty = self._require(item_id) + 1
        self._quantities[item_id] = qty
        self.version += 1
        return qty

    def decrement(self, item_id: str) -> int:
        qty = max(0, self._require(item_id) - 1)
        self._quantities[item_id] = qty
        self.version += 1
        return qty

    def toggle(self, item_id: str) -> int:
        """Select one unit, or clear the item if it already has a quantity."""
        qty = 0 if self._require(item_id) > 0 else 1
        self._quantities[item_id] = qty
        self.version += 1
        return qty

    def reset(self) -> None:
        for item_id in self._quantities:
            self._quantities[item_id] = 0
        self.version += 1

    def release(self, lines: Iterable[LineItem]) -> None:
        """Subtract billed quantities, keeping anything added on top of them."""
        for line in lines:
            if line.item_id not in self._quantities:
                continue
            self._quantities[line.item_id] = max(0, self._quantities[line.item_id] - line.quantity)
        self.version += 1

    def quantity(self, item_id: str) -> int:
        return self._require(item_id)

    def quantities(self) -> dict[str, int]:
        return dict(self._quantities)

    def has_any_selection(self) -> bool:
        return any(qty > 0 for qty in self._quantities.values())

    def selected_count(self) -> int:
        return sum(1 for qty in self._quantities.values() if qty > 0)

    def total_quantity(self) -> int:
        return sum(self._quantities.values())

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._quantities

    def __len__(self) -> int:
        return len(self._quantities)
