"""Append-only debug log shared by the app, controller, persistence and printers."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from counter_bill.config import debug_log_path


def log_debug(message: str) -> None:
    """Write one timestamped line to the debug log."""
    try:
        ts = datetime.now(timezone.utc).isoformat()
        path = Path(debug_log_path())
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(f"{ts} {message}\n")
    except Exception:
        # Logging must never interfere with billing.
        return
