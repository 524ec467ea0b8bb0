"""Abstract repositories for the stock ledger.

Balances are a key-value map over ``StockKey``; transactions are an
append-only log. Swapping the JSON files for a transactional store only
means implementing these two interfaces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.stock import StockBalance, StockTransaction, TransactionType
from ims.domain.model.value_objects import StockKey


class StockBalanceRepository(ABC):

    @abstractmethod
    def get(self, key: StockKey) -> StockBalance | None:
        """Return the balance for a (product, warehouse) pair, or None."""

    @abstractmethod
    def list_all(self) -> list[StockBalance]:
        """Return every balance."""

    @abstractmethod
    def save(self, balance: StockBalance) -> None:
        """Persist a new or updated balance."""


class StockTransactionRepository(ABC):

    @abstractmethod
    def append(self, transaction: StockTransaction) -> None:
        """Append a transaction to the log. Existing entries never change."""

    @abstractmethod
    def list_all(self) -> list[StockTransaction]:
        """Return the whole log in append order."""

    @abstractmethod
    def next_sequence(self, type: TransactionType) -> int:
        """Return the next sequence number for transactions of *type*."""
