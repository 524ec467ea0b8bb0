"""Application service: Place Order use case.

Creates a purchase or sales order. Each line captures the product's
*current* catalog price (purchase price for purchase orders, sale price
for sales orders) unless an explicit price is given.
"""

from __future__ import annotations

from ims.application.dto import OrderDTO, OrderLineSpec, order_to_dto
from ims.domain.exceptions import UnknownProduct
from ims.domain.model.order import Order, OrderKind, OrderLine
from ims.domain.model.value_objects import to_decimal
from ims.domain.repository.catalog_repository import ProductRepository
from ims.domain.repository.order_repository import OrderRepository


class PlaceOrderHandler:

    def __init__(self, order_repo: OrderRepository, product_repo: ProductRepository) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo

    def handle(
        self,
        kind: OrderKind,
        counterparty_id: str,
        line_specs: list[OrderLineSpec],
        creator: str = "",
    ) -> OrderDTO:
        order_id = self._order_repo.next_id()
        lines: list[OrderLine] = []

        for index, spec in enumerate(line_specs, start=1):
            product = self._product_repo.get_by_id(spec.product_id)
            if product is None:
                raise UnknownProduct(spec.product_id)

            if spec.unit_price is not None:
                unit_price = to_decimal(spec.unit_price, "unit price")
            elif kind is OrderKind.PURCHASE:
                unit_price = product.purchase_price
            else:
                unit_price = product.sale_price

            lines.append(
                OrderLine(
                    id=f"{order_id}-{index}",
                    order_id=order_id,
                    product_id=product.id,
                    quantity=to_decimal(spec.quantity, "quantity"),
                    unit_price=unit_price,
                    discount_rate=to_decimal(spec.discount_rate, "discount rate"),
                )
            )

        order = Order.create(
            id=order_id,
            kind=kind,
            counterparty_id=counterparty_id,
            lines=lines,
            creator=creator,
        )
        self._order_repo.save(order)
        return order_to_dto(order)
