"""Application service: Set Stock Thresholds use case."""

from __future__ import annotations

from ims.application.dto import BalanceDTO, balance_to_dto
from ims.domain.service.stock_ledger import StockLedger


class SetThresholdsHandler:

    def __init__(self, ledger: StockLedger) -> None:
        self._ledger = ledger

    def handle(
        self,
        product_id: str,
        warehouse_id: str,
        min_stock: str | None = None,
        max_stock: str | None = None,
    ) -> BalanceDTO:
        balance = self._ledger.set_thresholds(product_id, warehouse_id, min_stock, max_stock)
        return balance_to_dto(balance)
