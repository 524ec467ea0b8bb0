"""Tests for the reporting service."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from ims.application.inventory_report import InventoryReportService
from ims.domain.model.catalog import Product, Warehouse
from ims.domain.model.document import DocumentKind, DocumentStatus
from ims.domain.model.order import Order, OrderKind, OrderLine
from ims.domain.service.fulfillment_tracker import FulfillmentTracker
from ims.domain.service.fulfillment_workflow import ReceivingWorkflow
from ims.domain.service.stock_ledger import StockLedger
from tests.fakes import (
    FakeClock,
    FakeDocumentRepository,
    FakeOrderRepository,
    FakeProductRepository,
    FakeStockBalanceRepository,
    FakeStockTransactionRepository,
    FakeWarehouseRepository,
)

START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def _setup():
    clock = FakeClock(START)
    ledger = StockLedger(
        FakeStockBalanceRepository(),
        FakeStockTransactionRepository(),
        FakeProductRepository([
            Product(id="1", sku="W-1", name="Widget", min_stock=Decimal("5")),
            Product(id="2", sku="G-1", name="Gadget", min_stock=Decimal("5")),
        ]),
        FakeWarehouseRepository([Warehouse(id="MAIN", code="MAIN", name="Main")]),
        clock=clock,
    )
    documents = FakeDocumentRepository()
    return InventoryReportService(ledger, documents), ledger, documents, clock


class TestSummary:

    def test_empty_ledger(self):
        service, _, _, _ = _setup()
        summary = service.summary()
        assert summary.total_balances == 0
        assert summary.total_value == Decimal("0")
        assert service.top_products_by_value() == []

    def test_figures(self):
        service, ledger, _, _ = _setup()
        ledger.stock_in("1", "MAIN", "10", "2", operator="alice")   # value 20
        ledger.stock_in("2", "MAIN", "3", "10", operator="alice")   # value 30, low
        ledger.stock_out("2", "MAIN", "3", "10", operator="bob")    # now empty

        summary = service.summary()
        assert summary.total_balances == 2
        assert summary.total_value == Decimal("20")
        assert summary.low_stock_count == 1
        assert summary.out_of_stock_count == 1
        assert summary.total_transactions == 3
        assert [b.product_id for b in service.low_stock()] == ["2"]
        assert [b.product_id for b in service.out_of_stock()] == ["2"]


class TestMovementReport:

    def test_window_totals(self):
        service, ledger, _, _ = _setup()
        ledger.stock_in("1", "MAIN", "10", "2", operator="alice")   # 09:00, outside
        ledger.stock_in("1", "MAIN", "5", "4", operator="alice")    # 09:01
        ledger.stock_out("1", "MAIN", "3", "6", operator="bob")     # 09:02
        ledger.stock_adjust("1", "MAIN", "10", "0", operator="carol")  # 09:03, -2

        report = service.movement_report(START + timedelta(minutes=1), START + timedelta(minutes=3))

        assert len(report.transactions) == 3
        assert report.summary.total_in == Decimal("5")
        assert report.summary.value_in == Decimal("20")
        assert report.summary.total_out == Decimal("3")
        assert report.summary.value_out == Decimal("18")
        assert report.summary.total_adjust == Decimal("2")


class TestDocumentStats:

    def test_counts_by_status(self):
        service, ledger, documents, clock = _setup()
        order_repo = FakeOrderRepository()
        order_repo.save(
            Order.create(
                id=1,
                kind=OrderKind.PURCHASE,
                counterparty_id="SUP-1",
                lines=[OrderLine(id="1-1", order_id=1, product_id="1", quantity=Decimal("100"), unit_price=Decimal("2"))],
            )
        )
        workflow = ReceivingWorkflow(documents, order_repo, ledger, FulfillmentTracker(order_repo), clock=clock)
        for quantity in ("10", "20", "5"):
            doc = workflow.create_document(1, "MAIN", "bob")
            workflow.add_line(doc.id, "1", "1-1", quantity, "2")
        workflow.confirm(1)
        workflow.confirm(2)
        workflow.cancel(3)

        stats = service.document_stats(DocumentKind.RECEIPT)
        assert stats.total == 3
        assert stats.by_status == {DocumentStatus.CONFIRMED: 2, DocumentStatus.CANCELLED: 1}
        assert stats.total_quantity == Decimal("35")
        assert stats.total_value == Decimal("70")
        assert service.document_stats(DocumentKind.DELIVERY).total == 0
        assert service.document_stats(DocumentKind.DELIVERY).average_value == Decimal("0")
