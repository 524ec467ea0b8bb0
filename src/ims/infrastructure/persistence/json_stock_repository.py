"""JSON-file-backed implementations of the stock ledger repositories."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from ims.domain.model.stock import StockBalance, StockTransaction, TransactionType
from ims.domain.model.value_objects import StockKey
from ims.domain.repository.stock_repository import (
    StockBalanceRepository,
    StockTransactionRepository,
)
from ims.infrastructure.persistence.json_file import JsonFile, dt, dt_str


class JsonStockBalanceRepository(StockBalanceRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- StockBalanceRepository interface -------------------------------------

    def get(self, key: StockKey) -> StockBalance | None:
        for raw in self._file.load():
            if raw["product_id"] == key.product_id and raw["warehouse_id"] == key.warehouse_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[StockBalance]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, balance: StockBalance) -> None:
        records = self._file.load()
        replaced = False
        for i, raw in enumerate(records):
            if (
                raw["product_id"] == balance.product_id
                and raw["warehouse_id"] == balance.warehouse_id
            ):
                records[i] = self._to_raw(balance)
                replaced = True
                break
        if not replaced:
            records.append(self._to_raw(balance))
        self._file.persist(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(balance: StockBalance) -> dict:
        return {
            "product_id": balance.product_id,
            "warehouse_id": balance.warehouse_id,
            "current_stock": str(balance.current_stock),
            "reserved_stock": str(balance.reserved_stock),
            "avg_cost": str(balance.avg_cost),
            "min_stock": str(balance.min_stock),
            "max_stock": str(balance.max_stock),
            "last_in_at": dt_str(balance.last_in_at),
            "last_out_at": dt_str(balance.last_out_at),
            "updated_at": dt_str(balance.updated_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> StockBalance:
        return StockBalance(
            product_id=raw["product_id"],
            warehouse_id=raw["warehouse_id"],
            current_stock=Decimal(raw["current_stock"]),
            reserved_stock=Decimal(raw.get("reserved_stock", "0")),
            avg_cost=Decimal(raw.get("avg_cost", "0")),
            min_stock=Decimal(raw.get("min_stock", "0")),
            max_stock=Decimal(raw.get("max_stock", "0")),
            last_in_at=dt(raw.get("last_in_at")),
            last_out_at=dt(raw.get("last_out_at")),
            updated_at=dt(raw.get("updated_at")),
        )


class JsonStockTransactionRepository(StockTransactionRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    def append(self, transaction: StockTransaction) -> None:
        records = self._file.load()
        records.append(self._to_raw(transaction))
        self._file.persist(records)

    def list_all(self) -> list[StockTransaction]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def next_sequence(self, type: TransactionType) -> int:
        return sum(1 for raw in self._file.load() if raw["type"] == type.value) + 1

    @staticmethod
    def _to_raw(transaction: StockTransaction) -> dict:
        return {
            "id": transaction.id,
            "transaction_no": transaction.transaction_no,
            "product_id": transaction.product_id,
            "warehouse_id": transaction.warehouse_id,
            "type": transaction.type.value,
            "quantity": str(transaction.quantity),
            "unit_price": str(transaction.unit_price),
            "operator": transaction.operator,
            "created_at": transaction.created_at.isoformat(),
            "reference_type": transaction.reference_type,
            "reference_id": transaction.reference_id,
            "remark": transaction.remark,
        }

    @staticmethod
    def _to_domain(raw: dict) -> StockTransaction:
        return StockTransaction(
            id=raw["id"],
            transaction_no=raw["transaction_no"],
            product_id=raw["product_id"],
            warehouse_id=raw["warehouse_id"],
            type=TransactionType(raw["type"]),
            quantity=Decimal(raw["quantity"]),
            unit_price=Decimal(raw["unit_price"]),
            operator=raw["operator"],
            created_at=dt(raw["created_at"]),
            reference_type=raw.get("reference_type"),
            reference_id=raw.get("reference_id"),
            remark=raw.get("remark"),
        )
