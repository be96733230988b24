"""Create-bill orchestration: snapshot -> render -> print -> settle the cart."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Awaitable, Callable

from counter_bill.cart import CartState
from counter_bill.config import DEFAULT_GST_PERCENTAGE
from counter_bill.debug_log import log_debug
from counter_bill.errors import CatalogFetchError, ConfigFetchError, EmptySelectionError, PrintDispatchError
from counter_bill.models import BillSnapshot, BusinessIdentity, CatalogItem, PaymentMode, TaxConfig
from counter_bill.pricing import compute_snapshot, new_bill_number
from counter_bill.printer import PrintDispatcher
from counter_bill.receipt import render

CatalogFetcher = Callable[[], Awaitable[list[CatalogItem]]]
TaxConfigFetcher = Callable[[], Awaitable[TaxConfig]]


class CommitState(Enum):
    IDLE = "idle"
    COMMITTING = "committing"


class CommitStatus(Enum):
    PRINTED = "printed"
    PRINT_FAILED = "print_failed"
    EMPTY = "empty"
    BUSY = "busy"


@dataclass(frozen=True)
class CommitOutcome:
    status: CommitStatus
    message: str
    bill_number: int | None = None
    snapshot: BillSnapshot | None = None

    @property
    def ok(self) -> bool:
        return self.status is CommitStatus.PRINTED


def default_tax_config() -> TaxConfig:
    return TaxConfig(gst_percentage=Decimal(DEFAULT_GST_PERCENTAGE), identity=BusinessIdentity())


class CommitController:
    """Owns the create-bill transaction for one counter.

    Each commit refreshes the tax settings, then checks the selection and
    builds the snapshot from the cart with no ``await`` in between, so edits
    that arrive while the printer is busy can never change what gets
    printed. Only this class settles the cart after a print attempt.
    """

    def __init__(
        self,
        cart: CartState,
        dispatcher: PrintDispatcher,
        fetch_catalog: CatalogFetcher | None = None,
        fetch_tax_config: TaxConfigFetcher | None = None,
        bill_number_factory: Callable[[], int] = new_bill_number,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.cart = cart
        self.dispatcher = dispatcher
        self._fetch_catalog = fetch_catalog
        self._fetch_tax_config = fetch_tax_config
        self._bill_number_factory = bill_number_factory
        self._clock = clock
        self.catalog: list[CatalogItem] = []
        self.tax_config = default_tax_config()
        self.state = CommitState.IDLE

    async def load(self) -> None:
        """Fetch catalog and settings, and start a fresh all-zero cart.

        Raises CatalogFetchError when the catalog cannot be read; the
        previous catalog and cart are kept in that case.
        """
        if self._fetch_catalog is not None:
            catalog = await self._fetch_catalog()
            if self.state is CommitState.COMMITTING:
                raise CatalogFetchError("Cannot reload the catalog while a bill is printing")
            self.catalog = list(catalog)
            self.cart.load(self.catalog)
            log_debug(f"catalog_loaded items={len(self.catalog)}")
        await self.refresh_tax_config()

    async def refresh_tax_config(self) -> TaxConfig:
        """Refetch settings; on failure keep the last good config."""
        if self._fetch_tax_config is None:
            return self.tax_config
        try:
            self.tax_config = await self._fetch_tax_config()
        except ConfigFetchError as exc:
            log_debug(f"config_fetch_failed error={exc!r} gst={self.tax_config.gst_percentage}")
        return self.tax_config

    def preview(self, payment_mode: PaymentMode = PaymentMode.CASH) -> BillSnapshot | None:
        """Live totals for display. Never printed."""
        try:
            return compute_snapshot(self.cart, self.catalog, self.tax_config, payment_mode, 0, self._clock())
        except EmptySelectionError:
            return None

    async def create_bill(self, payment_mode: PaymentMode = PaymentMode.CASH) -> CommitOutcome:
        if self.state is CommitState.COMMITTING:
            log_debug("create_bill_blocked reason=busy")
            return CommitOutcome(CommitStatus.BUSY, "A bill is already printing")

        self.state = CommitState.COMMITTING
        try:
            # Settings edited in the back office apply from the next bill on.
            await self.refresh_tax_config()
            return await self._commit(payment_mode)
        finally:
            self.state = CommitState.IDLE

    async def _commit(self, payment_mode: PaymentMode) -> CommitOutcome:
        if not self.cart.has_any_selection():
            log_debug("create_bill_blocked reason=no_items")
            return CommitOutcome(CommitStatus.EMPTY, "No items selected")

        # Nothing below may await until the snapshot exists.
        try:
            snapshot = compute_snapshot(
                self.cart,
                self.catalog,
                self.tax_config,
                payment_mode,
                self._bill_number_factory(),
                self._clock(),
            )
        except EmptySelectionError as exc:
            log_debug("create_bill_blocked reason=no_catalog_lines")
            return CommitOutcome(CommitStatus.EMPTY, str(exc))
        cart_version = self.cart.version
        document = render(snapshot)

        log_debug(
            f"commit_start bill={snapshot.bill_number} lines={snapshot.item_count} "
            f"total={snapshot.grand_total} mode={payment_mode.value}"
        )
        try:
            await self.dispatcher.dispatch(document)
        except Exception as exc:
            # Unwrapped transport errors count as PrintDispatchError too.
            if not isinstance(exc, PrintDispatchError):
                exc = PrintDispatchError(str(exc))
            log_debug(f"commit_print_failed bill={snapshot.bill_number} error={exc!r}")
            return CommitOutcome(
                CommitStatus.PRINT_FAILED,
                f"Bill {snapshot.bill_number} failed to print: {exc}",
                snapshot.bill_number,
                snapshot,
            )
        self._settle(snapshot, cart_version)
        log_debug(f"commit_printed bill={snapshot.bill_number}")
        return CommitOutcome(
            CommitStatus.PRINTED,
            f"Bill {snapshot.bill_number} printed",
            snapshot.bill_number,
            snapshot,
        )

    def _settle(self, snapshot: BillSnapshot, cart_version: int) -> None:
        """Clear the cart after a successful print.

        An untouched cart is reset to all-zero. If it was edited while the
        printer was busy, only the billed quantities are subtracted. Any
        quantity of a billed item that is present after the print counts
        against the bill first, so toggling a billed item off and back on
        mid-print leaves it at zero.
        """
        if self.cart.version == cart_version:
            self.cart.reset()
            return
        log_debug(f"commit_settle_partial bill={snapshot.bill_number}")
        self.cart.release(snapshot.lines)
