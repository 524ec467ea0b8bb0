"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from ims.domain.model.order import Order, OrderKind, OrderLine
from ims.domain.repository.order_repository import OrderRepository
from ims.infrastructure.persistence.json_file import JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        orders = self._file.load()
        if not orders:
            return 1
        return max(o["id"] for o in orders) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._file.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_line_id(self, order_line_id: str) -> Order | None:
        for raw in self._file.load():
            if any(line["id"] == order_line_id for line in raw["lines"]):
                return self._to_domain(raw)
        return None

    def save(self, order: Order) -> None:
        orders = self._file.load()

        # Upsert: replace if exists, otherwise append
        replaced = False
        for i, raw in enumerate(orders):
            if raw["id"] == order.id:
                orders[i] = self._to_raw(order)
                replaced = True
                break
        if not replaced:
            orders.append(self._to_raw(order))

        self._file.persist(orders)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "order_no": order.order_no,
            "kind": order.kind.value,
            "counterparty_id": order.counterparty_id,
            "creator": order.creator,
            "created_at": order.created_at.isoformat(),
            "lines": [
                {
                    "id": line.id,
                    "product_id": line.product_id,
                    "quantity": str(line.quantity),
                    "unit_price": str(line.unit_price),
                    "discount_rate": str(line.discount_rate),
                    "fulfilled_quantity": str(line.fulfilled_quantity),
                }
                for line in order.lines
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        lines = [
            OrderLine(
                id=line["id"],
                order_id=raw["id"],
                product_id=line["product_id"],
                quantity=Decimal(line["quantity"]),
                unit_price=Decimal(line["unit_price"]),
                discount_rate=Decimal(line.get("discount_rate", "0")),
                fulfilled_quantity=Decimal(line.get("fulfilled_quantity", "0")),
            )
            for line in raw["lines"]
        ]
        return Order(
            id=raw["id"],
            order_no=raw["order_no"],
            kind=OrderKind(raw["kind"]),
            counterparty_id=raw["counterparty_id"],
            lines=lines,
            creator=raw.get("creator", ""),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
