"""Entry point for the counter-bill Textual app."""

from __future__ import annotations

from counter_bill.counter_app import CounterApp


def main() -> None:
    """Run the Textual application."""
    CounterApp().run()


if __name__ == "__main__":
    main()
