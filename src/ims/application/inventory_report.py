"""Reporting façade — read-only aggregates over the ledger for dashboards.

Nothing here mutates state; every figure is derived from the balances,
the transaction log and the document repository at call time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from ims.domain.model.document import DocumentKind, DocumentStatus
from ims.domain.model.stock import StockBalance, StockTransaction, TransactionType
from ims.domain.model.value_objects import ZERO
from ims.domain.repository.document_repository import DocumentRepository
from ims.domain.service.stock_ledger import StockLedger, TransactionFilter


@dataclass(frozen=True)
class InventorySummary:
    total_balances: int
    total_value: Decimal
    low_stock_count: int
    out_of_stock_count: int
    total_transactions: int


@dataclass(frozen=True)
class MovementSummary:
    total_in: Decimal = ZERO
    total_out: Decimal = ZERO
    total_adjust: Decimal = ZERO
    value_in: Decimal = ZERO
    value_out: Decimal = ZERO


@dataclass(frozen=True)
class MovementReport:
    transactions: list[StockTransaction]
    summary: MovementSummary


@dataclass(frozen=True)
class DocumentStats:
    kind: DocumentKind
    total: int
    by_status: dict[DocumentStatus, int] = field(default_factory=dict)
    total_quantity: Decimal = ZERO
    total_value: Decimal = ZERO

    @property
    def average_value(self) -> Decimal:
        if self.total == 0:
            return ZERO
        return self.total_value / self.total


class InventoryReportService:

    def __init__(self, ledger: StockLedger, document_repo: DocumentRepository) -> None:
        self._ledger = ledger
        self._document_repo = document_repo

    def summary(self) -> InventorySummary:
        balances = self._ledger.list_balances()
        return InventorySummary(
            total_balances=len(balances),
            total_value=sum((b.stock_value for b in balances), ZERO),
            low_stock_count=len(self._ledger.list_low_stock()),
            out_of_stock_count=len(self._ledger.list_out_of_stock()),
            total_transactions=len(self._ledger.list_transactions()),
        )

    def low_stock(self) -> list[StockBalance]:
        return self._ledger.list_low_stock()

    def out_of_stock(self) -> list[StockBalance]:
        return self._ledger.list_out_of_stock()

    def top_products_by_value(self, n: int = 10) -> list[StockBalance]:
        return self._ledger.top_products_by_value(n)

    def movement_report(self, start: datetime, end: datetime) -> MovementReport:
        """Transactions between *start* and *end* (inclusive) with in/out/adjust totals."""
        transactions = self._ledger.list_transactions(TransactionFilter(start=start, end=end))

        total_in = total_out = total_adjust = value_in = value_out = ZERO
        for t in transactions:
            if t.type is TransactionType.IN:
                total_in += t.quantity
                value_in += t.total_amount
            elif t.type is TransactionType.OUT:
                total_out += abs(t.quantity)
                value_out += abs(t.total_amount)
            else:
                total_adjust += abs(t.quantity)

        return MovementReport(
            transactions=transactions,
            summary=MovementSummary(
                total_in=total_in,
                total_out=total_out,
                total_adjust=total_adjust,
                value_in=value_in,
                value_out=value_out,
            ),
        )

    def document_stats(self, kind: DocumentKind) -> DocumentStats:
        documents = self._document_repo.list_by_kind(kind)
        by_status: dict[DocumentStatus, int] = {}
        for document in documents:
            by_status[document.status] = by_status.get(document.status, 0) + 1
        return DocumentStats(
            kind=kind,
            total=len(documents),
            by_status=by_status,
            total_quantity=sum((d.total_quantity for d in documents), ZERO),
            total_value=sum((d.total_amount for d in documents), ZERO),
        )
