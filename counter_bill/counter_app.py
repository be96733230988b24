"""Main Textual app class."""

from __future__ import annotations

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.widgets import Header, Static

from counter_bill.cart import CartState
from counter_bill.commit import CommitController, CommitOutcome, CommitState, CommitStatus
from counter_bill.debug_log import log_debug
from counter_bill.errors import CatalogFetchError
from counter_bill.models import CatalogItem, PaymentMode
from counter_bill.payment_modal import PaymentModal
from counter_bill.persistence import bootstrap_schema, fetch_catalog, fetch_tax_config
from counter_bill.printer import check_printer_dependencies, make_dispatcher
from counter_bill.rendering import format_bill_preview, format_catalog_row, format_payment_badge


def build_default_controller() -> CommitController:
    """Controller wired to the SQLite settings and the configured printer."""
    return CommitController(
        cart=CartState(),
        dispatcher=make_dispatcher(),
        fetch_catalog=fetch_catalog,
        fetch_tax_config=fetch_tax_config,
    )


class CounterApp(App):
    """A Textual app for selecting items and printing counter bills."""

    TITLE = "Counter Bill"
    SUB_TITLE = "Select items, Ctrl+S to bill"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #catalog-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #bill-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #status-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #bill-preview {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #catalog-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    selected_index = reactive(0)

    BINDINGS = [
        ("up", "move_cursor(-1)", "Previous item"),
        ("down", "move_cursor(1)", "Next item"),
        Binding("ctrl+s", "create_bill", "Create Bill", priority=True),
        ("ctrl+r", "reload", "Reload catalog"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, controller: CommitController | None = None, bootstrap: bool = True) -> None:
        super().__init__()
        self.controller = controller or build_default_controller()
        self._bootstrap_schema = bootstrap
        self.payment_mode = PaymentMode.CASH
        self.system_status = ""
        log_debug("app_init")

    @property
    def cart(self) -> CartState:
        return self.controller.cart

    @property
    def catalog(self) -> list[CatalogItem]:
        return self.controller.catalog

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="catalog-pane"):
                yield Static("Products", classes="pane-title")
                yield Static("(loading)", id="catalog-list")
            with Vertical(id="bill-pane"):
                yield Static(id="status-bar")
                yield Static("Bill preview", classes="pane-title")
                yield Static(id="bill-preview")

    def on_mount(self) -> None:
        if self._bootstrap_schema:
            bootstrap_schema()
        _, msg = check_printer_dependencies()
        self.system_status = msg
        log_debug(f"on_mount printer_status={msg!r}")
        self._refresh_all()
        self.run_worker(self._load(), group="load")

    async def _load(self) -> None:
        try:
            await self.controller.load()
        except CatalogFetchError as exc:
            self.system_status = str(exc)
            log_debug(f"catalog_load_failed error={exc!r}")
        else:
            self.selected_index = 0
            if not self.catalog:
                self.system_status = "No products yet"
        self._refresh_all()

    def on_key(self, event: Key) -> None:
        if isinstance(self.screen, PaymentModal):
            return

        char = event.character or ""
        if event.key == "space":
            self._mutate_selected("toggle")
        elif char in {"+", "="}:
            self._mutate_selected("increment")
        elif char in {"-", "_"}:
            self._mutate_selected("decrement")
        elif char == "j":
            self.action_move_cursor(1)
        elif char == "k":
            self.action_move_cursor(-1)
        elif char == "p":
            modes = list(PaymentMode)
            self.payment_mode = modes[(modes.index(self.payment_mode) + 1) % len(modes)]
            self._refresh_status()
        else:
            return
        event.stop()

    def _selected_item(self) -> CatalogItem | None:
        if not (0 <= self.selected_index < len(self.catalog)):
            return None
        return self.catalog[self.selected_index]

    def _mutate_selected(self, operation: str) -> None:
        item = self._selected_item()
        if item is None:
            return
        qty = getattr(self.cart, operation)(item.item_id)
        log_debug(f"cart_{operation} item={item.item_id!r} qty={qty}")
        self._refresh_catalog()
        self._refresh_preview()
        self._refresh_status()

    def action_move_cursor(self, delta: int) -> None:
        if isinstance(self.screen, PaymentModal):
            return
        if not self.catalog:
            self.selected_index = 0
            return
        self.selected_index = (self.selected_index + delta) % len(self.catalog)
        self._refresh_catalog()

    def action_reload(self) -> None:
        if self.controller.state is CommitState.COMMITTING:
            self.system_status = "Wait for the printer before reloading"
            self._refresh_status()
            return
        self.system_status = "Reloading products"
        self._refresh_status()
        self.run_worker(self._load(), group="load")

    def action_create_bill(self) -> None:
        log_debug(
            f"create_bill_enter selected={self.cart.selected_count()} screen={type(self.screen).__name__}"
        )
        if isinstance(self.screen, PaymentModal):
            return
        if not self.cart.has_any_selection():
            self.system_status = "No items selected"
            self._refresh_status()
            return
        self.push_screen(PaymentModal(self.payment_mode), self._on_payment_chosen)

    def _on_payment_chosen(self, mode: PaymentMode | None) -> None:
        if mode is None:
            self.system_status = "Bill cancelled"
            self._refresh_status()
            return
        self.payment_mode = mode
        self.run_worker(self._commit(mode), group="commit")

    async def _commit(self, mode: PaymentMode) -> CommitOutcome:
        self.system_status = "Printing..."
        self._refresh_status()
        outcome = await self.controller.create_bill(mode)
        if outcome.status is CommitStatus.PRINT_FAILED:
            self.system_status = f"{outcome.message}. Items kept, Ctrl+S to retry."
        else:
            self.system_status = outcome.message
        self._refresh_all()
        return outcome

    def _refresh_all(self) -> None:
        self._refresh_catalog()
        self._refresh_preview()
        self._refresh_status()

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            start = max(0, selected - rows // 2)
            start = min(start, total - rows)

        return (start, start + rows)

    def _refresh_catalog(self) -> None:
        try:
            catalog_widget = self.query_one("#catalog-list", Static)
        except NoMatches:
            return
        if not self.catalog:
            catalog_widget.update("(no products yet)")
            return

        visible_rows = self._visible_rows(catalog_widget)
        start, end = self._window_bounds(len(self.catalog), visible_rows, self.selected_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")

        quantities = self.cart.quantities()
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            item = self.catalog[idx]
            lines.append("➤ " if idx == self.selected_index else "  ")
            lines.append_text(format_catalog_row(item, quantities.get(item.item_id, 0)))

        if end < len(self.catalog):
            lines.append("\n⋮", style="dim")

        catalog_widget.update(lines)

    def _refresh_preview(self) -> None:
        try:
            preview_widget = self.query_one("#bill-preview", Static)
        except NoMatches:
            return
        preview_widget.update(format_bill_preview(self.controller.preview(self.payment_mode)))

    def _refresh_status(self) -> None:
        try:
            bar = self.query_one("#status-bar", Static)
        except NoMatches:
            return
        text = Text()
        text.append("+/- qty, space select, p payment, Ctrl+S bill. Payment: ")
        text.append_text(format_payment_badge(self.payment_mode))
        text.append(f"\n{self.system_status or 'Ready'}")
        bar.update(text)
