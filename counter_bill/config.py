"""Runtime configuration defaults for persistence, logging and printing."""

from __future__ import annotations

import os

DB_PATH = "data/counter.db"
DB_PATH_ENV = "COUNTER_BILL_DB_PATH"

DEBUG_LOG_PATH = "/tmp/counter-bill-debug.log"
DEBUG_LOG_PATH_ENV = "COUNTER_BILL_DEBUG_LOG"

# "usb" talks to the thermal printer, "spool" writes text receipts to SPOOL_DIR.
PRINTER_BACKEND = "usb"
PRINTER_BACKEND_ENV = "COUNTER_BILL_PRINTER"
SPOOL_DIR = "data/spool"

# 58mm roll: 384 dots at 203 dpi.
PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 20
PRINTER_LARGE_FONT_SIZE = 34
PRINTER_FONT_PATH = "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf"
PRINTER_FONT_PATH_ENV = "COUNTER_BILL_PRINTER_FONT_PATH"
PRINTER_LEFT_INDENT_PX = 4
PRINTER_TAIL_SPACER_PX = 60

# Used until the settings table has been read once.
DEFAULT_GST_PERCENTAGE = "0"


def _env_or(name: str, default: str) -> str:
    value = os.environ.get(name, "").strip()
    return value or default


def db_path() -> str:
    return _env_or(DB_PATH_ENV, DB_PATH)


def debug_log_path() -> str:
    return _env_or(DEBUG_LOG_PATH_ENV, DEBUG_LOG_PATH)


def printer_backend() -> str:
    return _env_or(PRINTER_BACKEND_ENV, PRINTER_BACKEND).lower()
