"""Error taxonomy for the billing core."""

from __future__ import annotations


class InvalidItemError(KeyError):
    """A caller referenced an item id that is not in the loaded catalog."""

    def __init__(self, item_id: str) -> None:
        super().__init__(item_id)
        self.item_id = item_id

    def __str__(self) -> str:
        return f"Unknown catalog item: {self.item_id!r}"


class EmptySelectionError(ValueError):
    """Billing was attempted with no item quantity above zero."""


class PrintDispatchError(RuntimeError):
    """The print sink could not deliver the receipt."""


class ConfigFetchError(RuntimeError):
    """Tax rate or business identity could not be read."""


class CatalogFetchError(RuntimeError):
    """The product catalog could not be read."""
