from decimal import Decimal

import pytest

from counter_bill.cart import CartState
from counter_bill.constant import (
    CLOSING_MESSAGE,
    DEFAULT_BUSINESS_ADDRESS,
    DEFAULT_BUSINESS_NAME,
    DEFAULT_BUSINESS_PHONE,
)
from counter_bill.models import BusinessIdentity, CatalogItem, PaymentMode, TaxConfig
from counter_bill.pricing import compute_snapshot
from counter_bill.receipt import Align, LineStyle, format_money, format_percentage, render

from conftest import FIXED_NOW


@pytest.fixture
def snapshot5(cart, catalog, gst5):
    cart.increment("p1")
    cart.increment("p1")
    cart.increment("p2")
    return compute_snapshot(cart, catalog, gst5, PaymentMode.CASH, 417, FIXED_NOW)


def _index_of(texts, needle):
    for idx, text in enumerate(texts):
        if needle in text:
            return idx
    raise AssertionError(f"{needle!r} not in receipt")


def test_sections_are_in_fixed_order(snapshot5):
    texts = render(snapshot5).texts()
    order = [
        "Chai Point",
        "14 Station Rd",
        "Phone: 020-5550101",
        "Bill No: 417",
        "Date: 09/03/2024 02:05 PM",
        "Bill To:",
        "Item",
        "Paneer Roll",
        "Masala Chai",
        "Total Items: 2",
        "Total Quantity: 3",
        "Sub Total:",
        "GST 5%:",
        "Total ₹262.50",
        "Mode of Payment:",
        CLOSING_MESSAGE,
    ]
    positions = [_index_of(texts, needle) for needle in order]
    assert positions == sorted(positions)


def test_item_rows_carry_quantity_rate_and_total(snapshot5):
    texts = render(snapshot5).texts()
    row = texts[_index_of(texts, "Paneer Roll")]
    assert row.split()[-3:] == ["2", "100.00", "200.00"]


def test_totals_lines(snapshot5):
    texts = render(snapshot5).texts()
    assert texts[_index_of(texts, "Sub Total:")].endswith("₹250.00")
    assert texts[_index_of(texts, "GST 5%:")].endswith("₹12.50")
    assert texts[_index_of(texts, "Mode of Payment:")].endswith("Cash")


def test_grand_total_is_the_only_large_line(snapshot5):
    document = render(snapshot5)
    large = [line for line in document.lines if line.style is LineStyle.LARGE]
    assert [line.text for line in large] == ["Total ₹262.50"]
    assert large[0].align is Align.CENTER


def test_tax_line_omitted_when_zero(cart, catalog, gst0):
    cart.increment("p1")
    cart.increment("p1")
    cart.increment("p2")
    snapshot = compute_snapshot(cart, catalog, gst0, PaymentMode.ELECTRONIC, 3, FIXED_NOW)
    texts = render(snapshot).texts()

    assert not any(text.startswith("GST") for text in texts)
    assert "Total ₹250.00" in texts
    assert texts[_index_of(texts, "Mode of Payment:")].endswith("Electronic")


def test_missing_identity_falls_back_to_default(cart, catalog):
    cart.increment("p2")
    config = TaxConfig(gst_percentage=Decimal("5"), identity=BusinessIdentity(name="  ", phone=None))
    texts = render(compute_snapshot(cart, catalog, config, PaymentMode.CASH, 1, FIXED_NOW)).texts()
    assert texts[0] == DEFAULT_BUSINESS_NAME[:32]
    assert DEFAULT_BUSINESS_ADDRESS[:20] in texts[1]
    assert texts[2] == f"Phone: {DEFAULT_BUSINESS_PHONE}"


def test_lines_fit_the_roll_width(cart, catalog, gst5):
    cart.increment("p1")
    snapshot = compute_snapshot(cart, catalog, gst5, PaymentMode.CASH, 1000, FIXED_NOW)
    document = render(snapshot)
    assert all(len(line.text) <= document.width for line in document.lines)
    assert all(len(text) <= document.width for text in document.to_text().splitlines())


def test_long_names_are_truncated(gst5):
    items = [CatalogItem("x", "Extra Large Family Pizza Combo", Decimal("899"))]
    cart = CartState(items)
    cart.increment("x")
    texts = render(compute_snapshot(cart, items, gst5, PaymentMode.CASH, 1, FIXED_NOW)).texts()
    row = next(text for text in texts if text.startswith("Extra"))
    assert row.startswith("Extra Lar..")
    assert len(row) == 32


def test_four_digit_rate_keeps_columns_apart(gst5):
    items = [CatalogItem("a", "Thali", Decimal("1000"))]
    cart = CartState(items)
    cart.increment("a")
    cart.increment("a")
    texts = render(compute_snapshot(cart, items, gst5, PaymentMode.CASH, 1, FIXED_NOW)).texts()

    row = texts[_index_of(texts, "Thali")]
    assert row.split() == ["Thali", "2", "1000.00", "2000.00"]
    assert len(row) == 32


def test_wide_amounts_move_below_the_name(gst5):
    items = [CatalogItem("a", "Wedding Platter", Decimal("1000"))]
    cart = CartState(items)
    for _ in range(150):
        cart.increment("a")
    texts = render(compute_snapshot(cart, items, gst5, PaymentMode.CASH, 1, FIXED_NOW)).texts()

    idx = _index_of(texts, "Wedding Platter")
    assert texts[idx] == "Wedding Platter"
    assert texts[idx + 1].split() == ["150", "1000.00", "150000.00"]
    assert len(texts[idx + 1]) == 32


def test_to_text_centers_and_ends_with_newline(snapshot5):
    text = render(snapshot5).to_text()
    assert text.endswith("THANK YOU VISIT AGAIN\n")
    first = text.splitlines()[0]
    assert first.strip() == "Chai Point"
    assert first.startswith(" ")


@pytest.mark.parametrize(
    "value, expected",
    [("5", "5"), ("18.00", "18"), ("2.50", "2.5"), ("10", "10"), ("0.25", "0.25")],
)
def test_format_percentage(value, expected):
    assert format_percentage(Decimal(value)) == expected


def test_format_money():
    assert format_money(Decimal("250")) == "250.00"
    assert format_money(Decimal("0.005")) == "0.01"
