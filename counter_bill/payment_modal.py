"""Payment mode picker shown before a bill is printed."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from counter_bill.models import PaymentMode
from counter_bill.rendering import badge_style

_MODES = list(PaymentMode)


class PaymentModal(ModalScreen[PaymentMode | None]):
    """Prompt for cash or electronic payment before create-bill."""

    CSS = """
    PaymentModal {
        align: center middle;
        background: $background 60%;
    }

    #payment-dialog {
        width: 48;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #payment-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #payment-options {
        color: white;
        margin-bottom: 1;
    }

    #payment-help {
        color: #dddddd;
    }
    """

    def __init__(self, initial: PaymentMode = PaymentMode.CASH) -> None:
        super().__init__()
        self.cursor = _MODES.index(initial)

    def compose(self) -> ComposeResult:
        with Container(id="payment-dialog"):
            yield Static("Mode of Payment", id="payment-title")
            yield Static(id="payment-options")
            yield Static("c cash, e electronic, j/k move. Enter print. Esc/q cancel.", id="payment-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "q", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self.dismiss(_MODES[self.cursor])
            event.stop()
            return

        if event.key == "c":
            self.dismiss(PaymentMode.CASH)
            event.stop()
            return

        if event.key == "e":
            self.dismiss(PaymentMode.ELECTRONIC)
            event.stop()
            return

        if event.key in {"j", "down", "tab"}:
            self.cursor = (self.cursor + 1) % len(_MODES)
        elif event.key in {"k", "up"}:
            self.cursor = (self.cursor - 1) % len(_MODES)
        else:
            return
        self._refresh_content()
        event.stop()

    def _refresh_content(self) -> None:
        lines = Text()
        for idx, mode in enumerate(_MODES):
            if idx > 0:
                lines.append("\n")
            lines.append("➤ " if idx == self.cursor else "  ")
            lines.append(f" {mode.label} ", style=badge_style(mode) if idx == self.cursor else "")
        self.query_one("#payment-options", Static).update(lines)
