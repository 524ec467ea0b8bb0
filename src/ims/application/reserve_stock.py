"""Application service: Reserve / Release stock use case."""

from __future__ import annotations

from ims.application.dto import BalanceDTO, balance_to_dto
from ims.domain.service.stock_ledger import StockLedger


class ReserveStockHandler:

    def __init__(self, ledger: StockLedger) -> None:
        self._ledger = ledger

    def reserve(self, product_id: str, warehouse_id: str, quantity: str) -> BalanceDTO:
        return balance_to_dto(self._ledger.reserve(product_id, warehouse_id, quantity))

    def release(self, product_id: str, warehouse_id: str, quantity: str) -> BalanceDTO:
        return balance_to_dto(self._ledger.release(product_id, warehouse_id, quantity))
