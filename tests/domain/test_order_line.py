"""Unit tests for the Order aggregate and its line fulfillment."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ims.domain.exceptions import InvalidQuantity, OverFulfillment, UnknownOrderLine, ValidationError
from ims.domain.model.order import (
    MAX_ORDER_LINES,
    Order,
    OrderKind,
    OrderLine,
    OrderLineStatus,
    OrderStatus,
)


def _line(line_id="7-1", product_id="1", quantity="100", price="5", discount="0") -> OrderLine:
    return OrderLine(
        id=line_id,
        order_id=7,
        product_id=product_id,
        quantity=Decimal(quantity),
        unit_price=Decimal(price),
        discount_rate=Decimal(discount),
    )


def _order(*lines: OrderLine, kind=OrderKind.PURCHASE) -> Order:
    return Order.create(
        id=7,
        kind=kind,
        counterparty_id="SUP-1",
        lines=list(lines) or [_line()],
        created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
    )


class TestOrderCreate:

    def test_order_numbers_carry_kind_date_and_id(self):
        assert _order().order_no == "PO202403010007"
        assert _order(kind=OrderKind.SALES).order_no == "SO202403010007"

    def test_counterparty_required(self):
        with pytest.raises(ValidationError, match="Supplier is required"):
            Order.create(id=1, kind=OrderKind.PURCHASE, counterparty_id=" ", lines=[_line()])
        with pytest.raises(ValidationError, match="Customer is required"):
            Order.create(id=1, kind=OrderKind.SALES, counterparty_id="", lines=[_line()])

    def test_lines_required(self):
        with pytest.raises(ValidationError, match="at least one line"):
            Order.create(id=1, kind=OrderKind.PURCHASE, counterparty_id="S", lines=[])

    def test_too_many_lines(self):
        lines = [_line(line_id=f"7-{i}") for i in range(MAX_ORDER_LINES + 1)]
        with pytest.raises(ValidationError, match="Maximum"):
            Order.create(id=7, kind=OrderKind.PURCHASE, counterparty_id="S", lines=lines)

    def test_zero_quantity_line(self):
        with pytest.raises(InvalidQuantity):
            _order(_line(quantity="0"))

    def test_discount_must_be_a_fraction(self):
        with pytest.raises(ValidationError, match="Discount rate"):
            _order(_line(discount="1"))

    def test_amount_applies_discount(self):
        order = _order(_line(quantity="10", price="5", discount="0.1"), _line(line_id="7-2", quantity="2", price="3"))
        assert order.lines[0].amount == Decimal("45")
        assert order.total == Decimal("51")


class TestFulfillment:

    def test_partial_then_complete(self):
        order = _order(_line(quantity="100"))
        line = order.apply_fulfillment("7-1", Decimal("40"))
        assert line.status is OrderLineStatus.PARTIAL
        assert line.outstanding_quantity == Decimal("60")
        assert order.status is OrderStatus.PARTIAL

        order.apply_fulfillment("7-1", Decimal("60"))
        assert line.status is OrderLineStatus.COMPLETED
        assert line.outstanding_quantity == Decimal("0")
        assert order.status is OrderStatus.COMPLETED

    def test_new_order_is_open(self):
        order = _order(_line(), _line(line_id="7-2"))
        assert all(line.status is OrderLineStatus.PENDING for line in order.lines)
        assert order.status is OrderStatus.OPEN

    def test_order_partial_while_any_line_open(self):
        order = _order(_line(quantity="5"), _line(line_id="7-2", quantity="5"))
        order.apply_fulfillment("7-1", Decimal("5"))
        assert order.status is OrderStatus.PARTIAL

    def test_over_fulfillment_rejected_by_default(self):
        order = _order(_line(quantity="10"))
        order.apply_fulfillment("7-1", Decimal("8"))
        with pytest.raises(OverFulfillment, match="already fulfilled 8"):
            order.apply_fulfillment("7-1", Decimal("3"))
        assert order.lines[0].fulfilled_quantity == Decimal("8")

    def test_over_fulfillment_allowed_by_policy(self):
        order = _order(_line(quantity="10"))
        line = order.apply_fulfillment("7-1", Decimal("12"), allow_over=True)
        assert line.status is OrderLineStatus.COMPLETED
        assert line.outstanding_quantity == Decimal("0")

    def test_non_positive_delta_rejected(self):
        order = _order()
        with pytest.raises(InvalidQuantity):
            order.apply_fulfillment("7-1", Decimal("0"))

    def test_unknown_line(self):
        with pytest.raises(UnknownOrderLine, match="7-9"):
            _order().apply_fulfillment("7-9", Decimal("1"))
