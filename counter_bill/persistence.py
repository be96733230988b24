"""SQLite access for the product catalog and business/tax settings.

The billing core only reads from here. Rows are maintained by the back
office tooling that owns these tables.
"""

from __future__ import annotations

import asyncio
import sqlite3
from decimal import Decimal, InvalidOperation
from pathlib import Path

from counter_bill.config import db_path
from counter_bill.debug_log import log_debug
from counter_bill.errors import CatalogFetchError, ConfigFetchError
from counter_bill.models import BusinessIdentity, CatalogItem, TaxConfig


def _connect(path: str | None = None) -> sqlite3.Connection:
    db_file = Path(path or db_path())
    db_file.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_file)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def bootstrap_schema(path: str | None = None) -> None:
    """Create the settings and catalog tables if they do not already exist."""
    with _connect(path) as conn:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS products (
                id TEXT PRIMARY KEY,
                product_name TEXT NOT NULL,
                price TEXT NOT NULL,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS gst (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                percentage TEXT NOT NULL,
                updated_at TEXT
            );

            CREATE TABLE IF NOT EXISTS business_settings (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                business_name TEXT,
                address TEXT,
                phone_number TEXT,
                updated_at TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_products_created_at
                ON products(created_at);
            """
        )


def _parse_amount(raw: object, what: str) -> Decimal:
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid {what}: {raw!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid {what}: {raw!r}")
    return value


def load_catalog(path: str | None = None) -> list[CatalogItem]:
    """Return products newest first, the order the counter screen lists them."""
    try:
        with _connect(path) as conn:
            rows = conn.execute(
                "SELECT id, product_name, price FROM products ORDER BY created_at DESC, rowid DESC"
            ).fetchall()
        items = []
        for item_id, name, price in rows:
            unit_price = _parse_amount(price, f"price for product {item_id}")
            if unit_price < 0:
                raise ValueError(f"Negative price for product {item_id}: {unit_price}")
            items.append(CatalogItem(item_id=str(item_id), name=str(name), unit_price=unit_price))
    except (sqlite3.Error, ValueError) as exc:
        log_debug(f"catalog_fetch_failed error={exc!r}")
        raise CatalogFetchError(f"Failed to fetch products: {exc}") from exc
    return items


def load_tax_config(path: str | None = None) -> TaxConfig:
    """Read the GST row and business settings row (id = 1 in both tables)."""
    try:
        with _connect(path) as conn:
            gst_row = conn.execute("SELECT percentage FROM gst WHERE id = 1").fetchone()
            business_row = conn.execute(
                "SELECT business_name, address, phone_number FROM business_settings WHERE id = 1"
            ).fetchone()
        gst = _parse_amount(gst_row[0], "GST percentage") if gst_row is not None else Decimal(0)
    except (sqlite3.Error, ValueError) as exc:
        log_debug(f"settings_fetch_failed error={exc!r}")
        raise ConfigFetchError(f"Failed to fetch settings: {exc}") from exc

    if not (0 <= gst <= 100):
        log_debug(f"settings_fetch_failed gst={gst}")
        raise ConfigFetchError(f"GST percentage must be between 0 and 100, got {gst}")

    identity = BusinessIdentity()
    if business_row is not None:
        name, address, phone = business_row
        identity = BusinessIdentity(name=name, address=address, phone=phone)
    return TaxConfig(gst_percentage=gst, identity=identity)


async def fetch_catalog(path: str | None = None) -> list[CatalogItem]:
    return await asyncio.to_thread(load_catalog, path)


async def fetch_tax_config(path: str | None = None) -> TaxConfig:
    return await asyncio.to_thread(load_tax_config, path)
