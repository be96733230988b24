"""Shared fixtures for counter-bill tests."""

from __future__ import annotations

import asyncio
from datetime import datetime
from decimal import Decimal

import pytest

from counter_bill.cart import CartState
from counter_bill.errors import PrintDispatchError
from counter_bill.models import BusinessIdentity, CatalogItem, TaxConfig
from counter_bill.receipt import ReceiptDocument

FIXED_NOW = datetime(2024, 3, 9, 14, 5)


class FakeDispatcher:
    """In-memory print sink. Optionally fails or waits for a gate."""

    def __init__(self, fail: bool = False, gate: asyncio.Event | None = None) -> None:
        self.fail = fail
        self.gate = gate
        self.started = asyncio.Event()
        self.documents: list[ReceiptDocument] = []

    async def dispatch(self, document: ReceiptDocument) -> None:
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise PrintDispatchError("printer offline")
        self.documents.append(document)


@pytest.fixture(autouse=True)
def _debug_log_to_tmp(tmp_path, monkeypatch):
    monkeypatch.setenv("COUNTER_BILL_DEBUG_LOG", str(tmp_path / "debug.log"))


@pytest.fixture
def catalog() -> list[CatalogItem]:
    return [
        CatalogItem("p1", "Paneer Roll", Decimal("100")),
        CatalogItem("p2", "Masala Chai", Decimal("50")),
        CatalogItem("p3", "Samosa", Decimal("12.50")),
    ]


@pytest.fixture
def cart(catalog) -> CartState:
    return CartState(catalog)


@pytest.fixture
def identity() -> BusinessIdentity:
    return BusinessIdentity(name="Chai Point", address="14 Station Rd", phone="020-5550101")


@pytest.fixture
def gst5(identity) -> TaxConfig:
    return TaxConfig(gst_percentage=Decimal("5"), identity=identity)


@pytest.fixture
def gst0(identity) -> TaxConfig:
    return TaxConfig(gst_percentage=Decimal("0"), identity=identity)
