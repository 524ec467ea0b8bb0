"""Integration tests for the stock movement, reservation and query handlers."""

from datetime import datetime, timezone

import pytest

from ims.application.record_stock_movement import RecordStockMovementHandler
from ims.application.reserve_stock import ReserveStockHandler
from ims.application.set_thresholds import SetThresholdsHandler
from ims.application.show_stock import ShowStockHandler
from ims.application.show_transactions import ShowTransactionsHandler
from ims.domain.exceptions import InsufficientStock, ValidationError
from ims.domain.model.catalog import Product, Warehouse
from ims.domain.service.stock_ledger import StockLedger
from tests.fakes import (
    FakeClock,
    FakeProductRepository,
    FakeStockBalanceRepository,
    FakeStockTransactionRepository,
    FakeWarehouseRepository,
)

START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def _ledger():
    return StockLedger(
        FakeStockBalanceRepository(),
        FakeStockTransactionRepository(),
        FakeProductRepository([Product(id="1", sku="W-1", name="Widget")]),
        FakeWarehouseRepository([Warehouse(id="MAIN", code="MAIN", name="Main")]),
        clock=FakeClock(START),
    )


class TestRecordStockMovement:

    def test_stock_in_returns_formatted_movement(self):
        handler = RecordStockMovementHandler(_ledger())
        handler.stock_in("1", "MAIN", "10", "5", "alice")
        dto = handler.stock_in("1", "MAIN", "10", "7", "alice", remark="second lot")

        assert dto.transaction.transaction_no == "IN202403010002"
        assert dto.transaction.type == "IN"
        assert dto.transaction.total_amount == "70"
        assert dto.transaction.created_at == "2024-03-01 09:01 UTC"
        assert dto.balance.current == "20"
        assert dto.balance.avg_cost == "6"
        assert dto.balance.value == "120"

    def test_stock_out_and_adjust(self):
        handler = RecordStockMovementHandler(_ledger())
        handler.stock_in("1", "MAIN", "10", "5", "alice")
        out = handler.stock_out("1", "MAIN", "4", "9", "bob")
        adjusted = handler.adjust("1", "MAIN", "5", "5", "carol")

        assert out.transaction.quantity == "-4"
        assert adjusted.transaction.type == "ADJUST"
        assert adjusted.transaction.quantity == "-1"
        assert adjusted.transaction.reference == "ADJUSTMENT"
        assert adjusted.balance.current == "5"

    def test_stock_out_too_much(self):
        handler = RecordStockMovementHandler(_ledger())
        with pytest.raises(InsufficientStock):
            handler.stock_out("1", "MAIN", "1", "9", "bob")


class TestReserveStock:

    def test_reserve_and_release(self):
        ledger = _ledger()
        ledger.stock_in("1", "MAIN", "10", "5", operator="alice")
        handler = ReserveStockHandler(ledger)

        reserved = handler.reserve("1", "MAIN", "3")
        assert (reserved.current, reserved.reserved, reserved.available) == ("10", "3", "7")
        released = handler.release("1", "MAIN", "3")
        assert (released.current, released.reserved, released.available) == ("10", "0", "10")



class TestSetThresholds:

    def test_override_is_formatted(self):
        ledger = _ledger()
        ledger.stock_in("1", "MAIN", "10", "5", operator="alice")
        dto = SetThresholdsHandler(ledger).handle("1", "MAIN", "2.50", "80")
        assert (dto.min_stock, dto.max_stock) == ("2.5", "80")
        assert dto.current == "10"

class TestQueries:

    def test_show_stock(self):
        ledger = _ledger()
        ledger.stock_in("1", "MAIN", "10", "5", operator="alice")
        rows = ShowStockHandler(ledger).handle()
        assert len(rows) == 1
        assert rows[0].min_stock == "10"
        assert ShowStockHandler(ledger).handle(warehouse_id="EAST") == []

    def test_show_transactions_by_type(self):
        ledger = _ledger()
        ledger.stock_in("1", "MAIN", "10", "5", operator="alice")
        ledger.stock_out("1", "MAIN", "1", "5", operator="bob")
        handler = ShowTransactionsHandler(ledger)

        assert [t.type for t in handler.handle(type="out")] == ["OUT"]
        assert len(handler.handle(product_id="1")) == 2

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError, match="Unknown transaction type"):
            ShowTransactionsHandler(_ledger()).handle(type="MOVE")
