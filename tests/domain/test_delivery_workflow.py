"""Tests for the sales delivery workflow, including all-or-nothing completion."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ims.domain.exceptions import InsufficientStock, InvalidDocumentState, UnknownDocument
from ims.domain.model.catalog import Product, Warehouse
from ims.domain.model.document import DocumentStatus
from ims.domain.model.order import Order, OrderKind, OrderLine, OrderLineStatus, OrderStatus
from ims.domain.model.stock import ReferenceType, TransactionType
from ims.domain.service.fulfillment_tracker import FulfillmentTracker
from ims.domain.service.fulfillment_workflow import DeliveryWorkflow, ReceivingWorkflow
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
    """Widget: 10 on hand @4, Gadget: 5 on hand @6. One sales order for 10 + 10."""
    clock = FakeClock(START)
    products = FakeProductRepository([
        Product(id="1", sku="W-1", name="Widget"),
        Product(id="2", sku="G-1", name="Gadget"),
    ])
    warehouses = FakeWarehouseRepository([Warehouse(id="MAIN", code="MAIN", name="Main")])
    log = FakeStockTransactionRepository()
    ledger = StockLedger(FakeStockBalanceRepository(), log, products, warehouses, clock=clock)
    ledger.stock_in("1", "MAIN", "10", "4", operator="setup")
    ledger.stock_in("2", "MAIN", "5", "6", operator="setup")

    order_repo = FakeOrderRepository()
    order = Order.create(
        id=1,
        kind=OrderKind.SALES,
        counterparty_id="CUS-1",
        lines=[
            OrderLine(id="1-1", order_id=1, product_id="1", quantity=Decimal("10"), unit_price=Decimal("9")),
            OrderLine(id="1-2", order_id=1, product_id="2", quantity=Decimal("10"), unit_price=Decimal("12")),
        ],
        created_at=START,
    )
    order_repo.save(order)
    documents = FakeDocumentRepository()
    tracker = FulfillmentTracker(order_repo)
    workflow = DeliveryWorkflow(documents, order_repo, ledger, tracker, clock=clock)
    return workflow, ledger, log, order_repo, documents


class TestCompleteDelivery:

    def test_complete_issues_stock_and_fulfills_lines(self):
        workflow, ledger, log, order_repo, _ = _setup()
        doc = workflow.create_document(1, "MAIN", "dave")
        assert doc.document_no == "SD202403010001"
        workflow.add_line(doc.id, "1", "1-1", "4", "9")

        done = workflow.confirm(doc.id)

        assert done.status is DocumentStatus.COMPLETED
        balance = ledger.find_balance("1", "MAIN")
        assert balance.current_stock == Decimal("6")
        assert balance.avg_cost == Decimal("4")
        out = log.list_all()[-1]
        assert out.type is TransactionType.OUT
        assert out.quantity == Decimal("-4")
        assert out.reference_type == ReferenceType.DELIVERY
        assert out.remark == f"Sales delivery {doc.document_no}"
        line = order_repo.get_by_id(1).find_line("1-1")
        assert line.status is OrderLineStatus.PARTIAL

    def test_ship_then_complete(self):
        workflow, ledger, _, order_repo, _ = _setup()
        doc = workflow.create_document(1, "MAIN", "dave")
        workflow.add_line(doc.id, "1", "1-1", "10", "9")

        shipped = workflow.ship(doc.id)
        assert shipped.status is DocumentStatus.SHIPPED
        assert ledger.find_balance("1", "MAIN").current_stock == Decimal("10")

        workflow.confirm(doc.id)
        assert ledger.find_balance("1", "MAIN").current_stock == Decimal("0")
        assert order_repo.get_by_id(1).find_line("1-1").status is OrderLineStatus.COMPLETED
        assert order_repo.get_by_id(1).status is OrderStatus.PARTIAL

    def test_shipped_delivery_is_locked_for_edits(self):
        workflow, _, _, _, _ = _setup()
        doc = workflow.create_document(1, "MAIN", "dave")
        workflow.add_line(doc.id, "1", "1-1", "1", "9")
        workflow.ship(doc.id)
        with pytest.raises(InvalidDocumentState):
            workflow.add_line(doc.id, "1", "1-1", "1", "9")
        with pytest.raises(InvalidDocumentState):
            workflow.ship(doc.id)

    def test_cancel_shipped_delivery_moves_no_stock(self):
        workflow, ledger, log, _, _ = _setup()
        doc = workflow.create_document(1, "MAIN", "dave")
        workflow.add_line(doc.id, "1", "1-1", "3", "9")
        workflow.ship(doc.id)
        workflow.cancel(doc.id)
        assert ledger.find_balance("1", "MAIN").current_stock == Decimal("10")
        assert len(log.list_all()) == 2


class TestAtomicity:

    def test_one_short_line_blocks_the_whole_delivery(self):
        workflow, ledger, log, order_repo, _ = _setup()
        doc = workflow.create_document(1, "MAIN", "dave")
        workflow.add_line(doc.id, "1", "1-1", "5", "9")
        workflow.add_line(doc.id, "2", "1-2", "8", "12")

        with pytest.raises(InsufficientStock, match="product '2'"):
            workflow.confirm(doc.id)

        assert ledger.find_balance("1", "MAIN").current_stock == Decimal("10")
        assert ledger.find_balance("2", "MAIN").current_stock == Decimal("5")
        assert len(log.list_all()) == 2
        order = order_repo.get_by_id(1)
        assert all(line.fulfilled_quantity == 0 for line in order.lines)
        assert workflow.get_document(doc.id).status is DocumentStatus.DRAFT

    def test_lines_for_one_product_are_checked_together(self):
        workflow, ledger, log, _, _ = _setup()
        doc = workflow.create_document(1, "MAIN", "dave")
        workflow.add_line(doc.id, "1", None, "6", "9")
        workflow.add_line(doc.id, "1", None, "6", "9")

        with pytest.raises(InsufficientStock, match="need 12"):
            workflow.confirm(doc.id)
        assert ledger.find_balance("1", "MAIN").current_stock == Decimal("10")
        assert len(log.list_all()) == 2

    def test_reserved_stock_is_not_delivered(self):
        workflow, ledger, _, _, _ = _setup()
        ledger.reserve("1", "MAIN", "8")
        doc = workflow.create_document(1, "MAIN", "dave")
        workflow.add_line(doc.id, "1", "1-1", "5", "9")

        with pytest.raises(InsufficientStock):
            workflow.confirm(doc.id)
        assert ledger.find_balance("1", "MAIN").current_stock == Decimal("10")


class TestDocumentKinds:

    def test_delivery_workflow_does_not_see_receipts(self):
        workflow, ledger, _, order_repo, documents = _setup()
        purchase = Order.create(
            id=2,
            kind=OrderKind.PURCHASE,
            counterparty_id="SUP-1",
            lines=[OrderLine(id="2-1", order_id=2, product_id="1", quantity=Decimal("1"), unit_price=Decimal("1"))],
        )
        order_repo.save(purchase)
        receiving = ReceivingWorkflow(documents, order_repo, ledger, FulfillmentTracker(order_repo))
        receipt = receiving.create_document(2, "MAIN", "bob")

        with pytest.raises(UnknownDocument):
            workflow.get_document(receipt.id)
        assert workflow.find_documents() == []
