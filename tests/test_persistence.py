import sqlite3
from decimal import Decimal

import pytest

from counter_bill.errors import CatalogFetchError, ConfigFetchError
from counter_bill.models import BusinessIdentity
from counter_bill.persistence import (
    bootstrap_schema,
    fetch_catalog,
    fetch_tax_config,
    load_catalog,
    load_tax_config,
)


@pytest.fixture
def db(tmp_path):
    path = str(tmp_path / "data" / "counter.db")
    bootstrap_schema(path)
    return path


def _execute(path, sql, params=()):
    conn = sqlite3.connect(path)
    try:
        with conn:
            conn.execute(sql, params)
    finally:
        conn.close()


def _add_product(path, item_id, name, price, created_at):
    _execute(
        path,
        "INSERT INTO products (id, product_name, price, created_at) VALUES (?, ?, ?, ?)",
        (item_id, name, price, created_at),
    )


def test_bootstrap_is_repeatable(db):
    bootstrap_schema(db)
    assert load_catalog(db) == []


def test_catalog_is_newest_first(db):
    _add_product(db, "a", "Samosa", "12.50", "2024-01-01T10:00:00")
    _add_product(db, "b", "Masala Chai", "50", "2024-02-01T10:00:00")

    items = load_catalog(db)

    assert [item.item_id for item in items] == ["b", "a"]
    assert items[1].unit_price == Decimal("12.50")


def test_catalog_with_bad_price_fails(db):
    _add_product(db, "a", "Samosa", "twelve", "2024-01-01T10:00:00")
    with pytest.raises(CatalogFetchError):
        load_catalog(db)


def test_catalog_with_negative_price_fails(db):
    _add_product(db, "a", "Samosa", "-1", "2024-01-01T10:00:00")
    with pytest.raises(CatalogFetchError):
        load_catalog(db)


def test_missing_tables_raise_catalog_error(tmp_path):
    with pytest.raises(CatalogFetchError):
        load_catalog(str(tmp_path / "empty.db"))


def test_tax_config_defaults_when_rows_missing(db):
    config = load_tax_config(db)
    assert config.gst_percentage == 0
    assert config.identity == BusinessIdentity()


def test_tax_config_reads_settings(db):
    _execute(db, "INSERT INTO gst (id, percentage) VALUES (1, ?)", ("5",))
    _execute(
        db,
        "INSERT INTO business_settings (id, business_name, address, phone_number) VALUES (1, ?, ?, ?)",
        ("Chai Point", "14 Station Rd", None),
    )

    config = load_tax_config(db)

    assert config.gst_percentage == Decimal("5")
    assert config.identity == BusinessIdentity(name="Chai Point", address="14 Station Rd", phone=None)


@pytest.mark.parametrize("percentage", ["101", "-2", "abc"])
def test_invalid_gst_raises_config_error(db, percentage):
    _execute(db, "INSERT INTO gst (id, percentage) VALUES (1, ?)", (percentage,))
    with pytest.raises(ConfigFetchError):
        load_tax_config(db)


def test_unreadable_settings_raise_config_error(tmp_path):
    with pytest.raises(ConfigFetchError):
        load_tax_config(str(tmp_path / "empty.db"))


async def test_async_fetchers(db):
    _add_product(db, "a", "Samosa", "12.50", "2024-01-01T10:00:00")
    _execute(db, "INSERT INTO gst (id, percentage) VALUES (1, ?)", ("2.5",))

    items = await fetch_catalog(db)
    config = await fetch_tax_config(db)

    assert [item.name for item in items] == ["Samosa"]
    assert config.gst_percentage == Decimal("2.5")


def test_db_path_env_override(tmp_path, monkeypatch):
    path = tmp_path / "env" / "counter.db"
    monkeypatch.setenv("COUNTER_BILL_DB_PATH", str(path))
    bootstrap_schema()
    assert path.is_file()
    assert load_catalog() == []


@pytest.mark.parametrize("price", ["NaN", "sNaN", "Infinity"])
def test_catalog_with_non_finite_price_fails(db, price):
    _add_product(db, "a", "Samosa", price, "2024-01-01T10:00:00")
    with pytest.raises(CatalogFetchError):
        load_catalog(db)


@pytest.mark.parametrize("percentage", ["NaN", "sNaN", "-Infinity"])
def test_non_finite_gst_raises_config_error(db, percentage):
    _execute(db, "INSERT INTO gst (id, percentage) VALUES (1, ?)", (percentage,))
    with pytest.raises(ConfigFetchError):
        load_tax_config(db)


def test_fetch_failures_are_logged(db, tmp_path):
    _add_product(db, "a", "Samosa", "twelve", "2024-01-01T10:00:00")
    _execute(db, "INSERT INTO gst (id, percentage) VALUES (1, ?)", ("101",))

    with pytest.raises(CatalogFetchError):
        load_catalog(db)
    with pytest.raises(ConfigFetchError):
        load_tax_config(db)

    log = (tmp_path / "debug.log").read_text(encoding="utf-8")
    assert "catalog_fetch_failed" in log
    assert "settings_fetch_failed" in log
