"""Application service: Show Transactions use case (query)."""

from __future__ import annotations

from datetime import datetime

from ims.application.dto import TransactionDTO, transaction_to_dto
from ims.domain.exceptions import ValidationError
from ims.domain.model.stock import TransactionType
from ims.domain.service.stock_ledger import StockLedger, TransactionFilter


class ShowTransactionsHandler:

    def __init__(self, ledger: StockLedger) -> None:
        self._ledger = ledger

    def handle(
        self,
        product_id: str | None = None,
        warehouse_id: str | None = None,
        type: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[TransactionDTO]:
        try:
            transaction_type = TransactionType(type.upper()) if type else None
        except ValueError as exc:
            raise ValidationError(f"Unknown transaction type: {type!r}") from exc

        filters = TransactionFilter(
            product_id=product_id,
            warehouse_id=warehouse_id,
            type=transaction_type,
            start=start,
            end=end,
        )
        return [transaction_to_dto(t) for t in self._ledger.list_transactions(filters)]
