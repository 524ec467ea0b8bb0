"""Application service: manual stock movements (stock-in, stock-out, count adjustment).

Receipts and deliveries post through their workflows; this handler is
the entry point for movements entered by hand.
"""

from __future__ import annotations

from ims.application.dto import MovementDTO, balance_to_dto, transaction_to_dto
from ims.domain.model.stock import StockMovement
from ims.domain.service.stock_ledger import StockLedger


class RecordStockMovementHandler:

    def __init__(self, ledger: StockLedger) -> None:
        self._ledger = ledger

    def stock_in(
        self,
        product_id: str,
        warehouse_id: str,
        quantity: str,
        unit_price: str,
        operator: str,
        remark: str | None = None,
    ) -> MovementDTO:
        movement = self._ledger.stock_in(
            product_id, warehouse_id, quantity, unit_price, operator=operator, remark=remark
        )
        return self._to_dto(movement)

    def stock_out(
        self,
        product_id: str,
        warehouse_id: str,
        quantity: str,
        unit_price: str,
        operator: str,
        remark: str | None = None,
    ) -> MovementDTO:
        movement = self._ledger.stock_out(
            product_id, warehouse_id, quantity, unit_price, operator=operator, remark=remark
        )
        return self._to_dto(movement)

    def adjust(
        self,
        product_id: str,
        warehouse_id: str,
        new_quantity: str,
        unit_price: str,
        operator: str,
        remark: str | None = None,
    ) -> MovementDTO:
        movement = self._ledger.stock_adjust(
            product_id, warehouse_id, new_quantity, unit_price, operator=operator, remark=remark
        )
        return self._to_dto(movement)

    @staticmethod
    def _to_dto(movement: StockMovement) -> MovementDTO:
        return MovementDTO(
            transaction=transaction_to_dto(movement.transaction),
            balance=balance_to_dto(movement.balance),
        )
