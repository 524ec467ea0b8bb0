"""Domain service: Order Line Fulfillment Tracker.

Receiving and delivery workflows report fulfilled quantities here, per
order line. The tracker resolves the owning order, applies the delta on
the aggregate (which derives the line and order status) and saves it.

Whether a line may be fulfilled beyond its ordered quantity is a policy
decision (over-shipment, supplier bonus units); it defaults to reject.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from ims.domain.exceptions import InvalidQuantity, UnknownOrder, UnknownOrderLine
from ims.domain.model.order import Order, OrderLine
from ims.domain.model.value_objects import ZERO, positive_quantity
from ims.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class FulfillmentTracker:

    def __init__(self, order_repo: OrderRepository, allow_over_fulfillment: bool = False) -> None:
        self._order_repo = order_repo
        self._allow_over = allow_over_fulfillment

    @property
    def allow_over_fulfillment(self) -> bool:
        return self._allow_over

    def find_line(self, order_line_id: str) -> OrderLine:
        return self._load(order_line_id).find_line(order_line_id)

    def apply_fulfillment(self, order_line_id: str, delta: Decimal | int | str) -> OrderLine:
        """Add *delta* to the line's fulfilled quantity and persist the order."""
        qty = positive_quantity(delta, "Fulfillment quantity")
        order = self._load(order_line_id)
        line = order.apply_fulfillment(order_line_id, qty, self._allow_over)
        self._order_repo.save(order)
        logger.info(
            "Order %s line %s fulfilled %s/%s (%s)",
            order.order_no,
            line.id,
            line.fulfilled_quantity,
            line.quantity,
            line.status.value,
        )
        return line

    def validate_fulfillments(self, deltas: dict[str, Decimal]) -> None:
        """Check that every ``{order_line_id: delta}`` would be accepted.

        Side-effect free; used before any document effect is applied.
        """
        for order_line_id, delta in deltas.items():
            if delta <= ZERO:
                raise InvalidQuantity(f"Fulfillment quantity must be positive, got {delta}", delta)
            line = self.find_line(order_line_id)
            line.check_fulfillment(delta, self._allow_over)

    def outstanding_lines(self, order_id: int) -> list[OrderLine]:
        """Lines of *order_id* that still have something left to fulfill."""
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise UnknownOrder(order_id)
        return [line for line in order.lines if line.outstanding_quantity > ZERO]

    def _load(self, order_line_id: str) -> Order:
        order = self._order_repo.get_by_line_id(order_line_id)
        if order is None:
            raise UnknownOrderLine(order_line_id)
        return order
