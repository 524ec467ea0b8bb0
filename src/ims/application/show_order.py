"""Application service: Show Order use case (query)."""

from __future__ import annotations

from ims.application.dto import OrderDTO, OrderLineDTO, order_line_to_dto, order_to_dto
from ims.domain.exceptions import UnknownOrder
from ims.domain.repository.order_repository import OrderRepository
from ims.domain.service.fulfillment_tracker import FulfillmentTracker


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository, tracker: FulfillmentTracker) -> None:
        self._order_repo = order_repo
        self._tracker = tracker

    def handle(self, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise UnknownOrder(order_id)
        return order_to_dto(order)

    def outstanding(self, order_id: int) -> list[OrderLineDTO]:
        """Lines that can still be received or delivered."""
        return [order_line_to_dto(line) for line in self._tracker.outstanding_lines(order_id)]
