"""Tests for the purchase receiving workflow."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from ims.domain.exceptions import (
    InvalidDocumentState,
    OverFulfillment,
    UnknownDocument,
    UnknownOrder,
    UnknownProduct,
    UnknownWarehouse,
    ValidationError,
)
from ims.domain.model.catalog import Product, Warehouse
from ims.domain.model.document import DocumentStatus
from ims.domain.model.order import Order, OrderKind, OrderLine, OrderStatus
from ims.domain.model.stock import ReferenceType
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


def _place(order_repo, kind, lines):
    """Helper: save an order with ``(product_id, quantity, price)`` lines."""
    order_id = order_repo.next_id()
    order = Order.create(
        id=order_id,
        kind=kind,
        counterparty_id="SUP-1" if kind is OrderKind.PURCHASE else "CUS-1",
        lines=[
            OrderLine(
                id=f"{order_id}-{i}",
                order_id=order_id,
                product_id=product_id,
                quantity=Decimal(quantity),
                unit_price=Decimal(price),
            )
            for i, (product_id, quantity, price) in enumerate(lines, start=1)
        ],
        created_at=START,
    )
    order_repo.save(order)
    return order


def _setup(allow_over=False):
    clock = FakeClock(START)
    products = FakeProductRepository([
        Product(id="1", sku="W-1", name="Widget"),
        Product(id="2", sku="G-1", name="Gadget"),
    ])
    warehouses = FakeWarehouseRepository([Warehouse(id="MAIN", code="MAIN", name="Main")])
    log = FakeStockTransactionRepository()
    ledger = StockLedger(FakeStockBalanceRepository(), log, products, warehouses, clock=clock)
    order_repo = FakeOrderRepository()
    tracker = FulfillmentTracker(order_repo, allow_over_fulfillment=allow_over)
    workflow = ReceivingWorkflow(FakeDocumentRepository(), order_repo, ledger, tracker, clock=clock)
    order = _place(order_repo, OrderKind.PURCHASE, [("1", "100", "5"), ("2", "10", "8")])
    return workflow, ledger, log, order_repo, order


# ── Drafting ─────────────────────────────────────────────────────────────────


class TestCreateReceipt:

    def test_new_receipt_is_an_empty_draft(self):
        workflow, _, _, _, order = _setup()
        doc = workflow.create_document(order.id, "MAIN", "bob")

        assert doc.document_no == "PR202403010001"
        assert doc.status is DocumentStatus.DRAFT
        assert doc.counterparty_id == "SUP-1"
        assert doc.document_date == date(2024, 3, 1)
        assert doc.total_quantity == Decimal("0")
        assert doc.total_amount == Decimal("0")

    def test_sales_order_rejected(self):
        workflow, _, _, order_repo, _ = _setup()
        sales = _place(order_repo, OrderKind.SALES, [("1", "1", "1")])
        with pytest.raises(ValidationError, match="needs a purchase order"):
            workflow.create_document(sales.id, "MAIN", "bob")

    def test_unknown_references(self):
        workflow, _, _, _, order = _setup()
        with pytest.raises(UnknownOrder):
            workflow.create_document(42, "MAIN", "bob")
        with pytest.raises(UnknownWarehouse):
            workflow.create_document(order.id, "WEST", "bob")

    def test_operator_required(self):
        workflow, _, _, _, order = _setup()
        with pytest.raises(ValidationError, match="Operator is required"):
            workflow.create_document(order.id, "MAIN", "  ")


class TestReceiptLines:

    def test_line_must_match_order_line_product(self):
        workflow, _, _, _, order = _setup()
        doc = workflow.create_document(order.id, "MAIN", "bob")
        with pytest.raises(ValidationError, match="is for product '1'"):
            workflow.add_line(doc.id, "2", "1-1", "5", "5")

    def test_line_must_belong_to_the_order(self):
        workflow, _, _, order_repo, order = _setup()
        other = _place(order_repo, OrderKind.PURCHASE, [("1", "5", "5")])
        doc = workflow.create_document(order.id, "MAIN", "bob")
        with pytest.raises(ValidationError, match="does not belong"):
            workflow.add_line(doc.id, "1", f"{other.id}-1", "1", "5")

    def test_unknown_product(self):
        workflow, _, _, _, order = _setup()
        doc = workflow.create_document(order.id, "MAIN", "bob")
        with pytest.raises(UnknownProduct):
            workflow.add_line(doc.id, "99", None, "1", "1")

    def test_draft_lines_cannot_exceed_outstanding(self):
        workflow, _, _, _, order = _setup()
        doc = workflow.create_document(order.id, "MAIN", "bob")
        workflow.add_line(doc.id, "2", "1-2", "6", "8")
        with pytest.raises(OverFulfillment):
            workflow.add_line(doc.id, "2", "1-2", "5", "8")

    def test_update_line_checks_outstanding_excluding_itself(self):
        workflow, _, _, _, order = _setup()
        doc = workflow.create_document(order.id, "MAIN", "bob")
        line = workflow.add_line(doc.id, "2", "1-2", "6", "8")
        workflow.update_line(doc.id, line.id, quantity="10")
        assert workflow.get_document(doc.id).total_quantity == Decimal("10")
        with pytest.raises(OverFulfillment):
            workflow.update_line(doc.id, line.id, quantity="11")

    def test_over_receipt_allowed_by_policy(self):
        workflow, _, _, _, order = _setup(allow_over=True)
        doc = workflow.create_document(order.id, "MAIN", "bob")
        workflow.add_line(doc.id, "2", "1-2", "12", "8")
        confirmed = workflow.confirm(doc.id)
        assert confirmed.status is DocumentStatus.CONFIRMED

    def test_remove_line(self):
        workflow, _, _, _, order = _setup()
        doc = workflow.create_document(order.id, "MAIN", "bob")
        line = workflow.add_line(doc.id, "1", "1-1", "2", "25")
        workflow.add_line(doc.id, "2", "1-2", "3", "10")
        workflow.remove_line(doc.id, line.id)
        doc = workflow.get_document(doc.id)
        assert doc.total_quantity == Decimal("3")
        assert doc.total_amount == Decimal("30")


# ── Confirmation ─────────────────────────────────────────────────────────────


class TestConfirmReceipt:

    def test_confirm_posts_stock_and_fulfillment(self):
        workflow, ledger, log, order_repo, order = _setup()
        doc = workflow.create_document(order.id, "MAIN", "bob")
        workflow.add_line(doc.id, "1", "1-1", "40", "5")
        workflow.add_line(doc.id, "2", "1-2", "10", "8")

        confirmed = workflow.confirm(doc.id)

        assert confirmed.status is DocumentStatus.CONFIRMED
        assert confirmed.confirmed_at is not None
        assert ledger.find_balance("1", "MAIN").current_stock == Decimal("40")
        assert ledger.find_balance("2", "MAIN").avg_cost == Decimal("8")
        transactions = log.list_all()
        assert len(transactions) == 2
        assert all(t.reference_type == ReferenceType.RECEIPT for t in transactions)
        assert all(t.reference_id == str(doc.id) for t in transactions)
        assert all(t.operator == "bob" for t in transactions)
        saved = order_repo.get_by_id(order.id)
        assert saved.find_line("1-1").fulfilled_quantity == Decimal("40")
        assert saved.status is OrderStatus.PARTIAL

    def test_two_receipts_complete_the_order(self):
        workflow, ledger, _, order_repo, order = _setup()
        for quantity, price in (("40", "5"), ("60", "7.5")):
            doc = workflow.create_document(order.id, "MAIN", "bob")
            workflow.add_line(doc.id, "1", "1-1", quantity, price)
            workflow.confirm(doc.id)
        doc = workflow.create_document(order.id, "MAIN", "bob")
        workflow.add_line(doc.id, "2", "1-2", "10", "8")
        workflow.confirm(doc.id)

        assert order_repo.get_by_id(order.id).status is OrderStatus.COMPLETED
        assert ledger.find_balance("1", "MAIN").avg_cost == Decimal("6.5")

    def test_confirm_applies_effects_exactly_once(self):
        workflow, ledger, log, _, order = _setup()
        doc = workflow.create_document(order.id, "MAIN", "bob")
        workflow.add_line(doc.id, "1", "1-1", "10", "5")
        workflow.confirm(doc.id)

        with pytest.raises(InvalidDocumentState, match="is CONFIRMED"):
            workflow.confirm(doc.id)
        assert ledger.find_balance("1", "MAIN").current_stock == Decimal("10")
        assert len(log.list_all()) == 1

    def test_confirmed_receipt_lines_are_frozen(self):
        workflow, _, _, _, order = _setup()
        doc = workflow.create_document(order.id, "MAIN", "bob")
        line = workflow.add_line(doc.id, "1", "1-1", "100", "5")
        workflow.confirm(doc.id)

        with pytest.raises(InvalidDocumentState, match="is CONFIRMED"):
            workflow.add_line(doc.id, "1", "1-1", "1", "5")
        with pytest.raises(InvalidDocumentState, match="is CONFIRMED"):
            workflow.update_line(doc.id, line.id, quantity="200")
        with pytest.raises(InvalidDocumentState, match="is CONFIRMED"):
            workflow.remove_line(doc.id, line.id)

    def test_empty_receipt_cannot_be_confirmed(self):
        workflow, _, _, _, order = _setup()
        doc = workflow.create_document(order.id, "MAIN", "bob")
        with pytest.raises(ValidationError, match="has no lines"):
            workflow.confirm(doc.id)

    def test_competing_drafts_cannot_both_over_receive(self):
        workflow, ledger, log, order_repo, order = _setup()
        first = workflow.create_document(order.id, "MAIN", "bob")
        second = workflow.create_document(order.id, "MAIN", "eve")
        workflow.add_line(first.id, "1", "1-1", "60", "5")
        workflow.add_line(second.id, "1", "1-1", "60", "5")
        workflow.add_line(second.id, "2", "1-2", "5", "8")
        workflow.confirm(first.id)

        with pytest.raises(OverFulfillment):
            workflow.confirm(second.id)

        assert workflow.get_document(second.id).status is DocumentStatus.DRAFT
        assert ledger.find_balance("1", "MAIN").current_stock == Decimal("60")
        assert ledger.find_balance("2", "MAIN") is None
        assert len(log.list_all()) == 1
        assert order_repo.get_by_id(order.id).find_line("1-2").fulfilled_quantity == Decimal("0")


class TestCancelReceipt:

    def test_cancelled_receipt_never_posts(self):
        workflow, _, log, _, order = _setup()
        doc = workflow.create_document(order.id, "MAIN", "bob")
        workflow.add_line(doc.id, "1", "1-1", "10", "5")
        assert workflow.cancel(doc.id).status is DocumentStatus.CANCELLED

        with pytest.raises(InvalidDocumentState):
            workflow.confirm(doc.id)
        assert log.list_all() == []

    def test_confirmed_receipt_cannot_be_cancelled(self):
        workflow, _, _, _, order = _setup()
        doc = workflow.create_document(order.id, "MAIN", "bob")
        workflow.add_line(doc.id, "1", "1-1", "10", "5")
        workflow.confirm(doc.id)
        with pytest.raises(InvalidDocumentState):
            workflow.cancel(doc.id)


class TestQueries:

    def test_find_documents_by_order_and_status(self):
        workflow, _, _, order_repo, order = _setup()
        other = _place(order_repo, OrderKind.PURCHASE, [("1", "5", "5")])
        a = workflow.create_document(order.id, "MAIN", "bob")
        workflow.create_document(order.id, "MAIN", "bob")
        workflow.create_document(other.id, "MAIN", "bob")
        workflow.cancel(a.id)

        assert len(workflow.find_documents(order_id=order.id)) == 2
        assert [d.id for d in workflow.find_documents(status=DocumentStatus.CANCELLED)] == [a.id]

    def test_unknown_document(self):
        workflow, _, _, _, _ = _setup()
        with pytest.raises(UnknownDocument, match="Document #3 not found"):
            workflow.get_document(3)
