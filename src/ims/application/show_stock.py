"""Application service: Show Stock use case (query)."""

from __future__ import annotations

from ims.application.dto import BalanceDTO, balance_to_dto
from ims.domain.service.stock_ledger import StockLedger


class ShowStockHandler:

    def __init__(self, ledger: StockLedger) -> None:
        self._ledger = ledger

    def handle(
        self, product_id: str | None = None, warehouse_id: str | None = None
    ) -> list[BalanceDTO]:
        return [balance_to_dto(b) for b in self._ledger.list_balances(product_id, warehouse_id)]
