"""Domain service: Stock Ledger.

The ledger owns every StockBalance and the append-only transaction log.
Each mutating operation runs as one critical section under a re-entrant
lock: look up the catalog, load (or lazily create) the balance, validate,
mutate, append the transaction, save. Validation always happens before
the first write, so a failed call leaves no trace.

Workflows that apply several movements as one unit (document
confirmation) hold ``locked()`` around their own validate-then-apply
phases; the lock is re-entrant so the per-movement calls nest inside it.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from ims.domain.exceptions import (
    LedgerConsistencyError,
    UnknownProduct,
    UnknownWarehouse,
    ValidationError,
)
from ims.domain.model.catalog import Product
from ims.domain.model.stock import (
    ReferenceType,
    StockBalance,
    StockMovement,
    StockTransaction,
    TransactionType,
)
from ims.domain.model.value_objects import (
    ZERO,
    StockKey,
    non_negative_price,
    positive_quantity,
    to_decimal,
)
from ims.domain.repository.catalog_repository import ProductRepository, WarehouseRepository
from ims.domain.repository.stock_repository import (
    StockBalanceRepository,
    StockTransactionRepository,
)

logger = logging.getLogger(__name__)

Number = str | int | float | Decimal


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TransactionFilter:
    """Query filter for the transaction log. ``None`` means "any"."""

    product_id: str | None = None
    warehouse_id: str | None = None
    type: TransactionType | None = None
    start: datetime | None = None
    end: datetime | None = None

    def matches(self, transaction: StockTransaction) -> bool:
        if self.product_id is not None and transaction.product_id != self.product_id:
            return False
        if self.warehouse_id is not None and transaction.warehouse_id != self.warehouse_id:
            return False
        if self.type is not None and transaction.type is not self.type:
            return False
        if self.start is not None and transaction.created_at < self.start:
            return False
        if self.end is not None and transaction.created_at > self.end:
            return False
        return True


class StockLedger:

    def __init__(
        self,
        balance_repo: StockBalanceRepository,
        transaction_repo: StockTransactionRepository,
        product_repo: ProductRepository,
        warehouse_repo: WarehouseRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._balance_repo = balance_repo
        self._transaction_repo = transaction_repo
        self._product_repo = product_repo
        self._warehouse_repo = warehouse_repo
        self._clock = clock
        self._lock = threading.RLock()

    def locked(self) -> threading.RLock:
        """The ledger's serialization point, usable as a context manager."""
        return self._lock

    # --- Movements ------------------------------------------------------------

    def stock_in(
        self,
        product_id: str,
        warehouse_id: str,
        quantity: Number,
        unit_price: Number,
        *,
        operator: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
        remark: str | None = None,
    ) -> StockMovement:
        """Receive stock, recomputing the moving-average cost."""
        qty = positive_quantity(quantity, "Stock-in quantity")
        price = non_negative_price(unit_price)
        with self._lock:
            product = self._require_product(product_id)
            self._require_warehouse(warehouse_id)
            balance = self._load_or_new(product, warehouse_id)
            now = self._clock()
            balance.receive(qty, price, now)
            return self._commit(
                balance, TransactionType.IN, qty, price, operator, now,
                reference_type, reference_id, remark,
            )

    def stock_out(
        self,
        product_id: str,
        warehouse_id: str,
        quantity: Number,
        unit_price: Number,
        *,
        operator: str,
        reference_type: str | None = None,
        reference_id: str | None = None,
        remark: str | None = None,
    ) -> StockMovement:
        """Issue unreserved stock. The cost basis does not change."""
        qty = positive_quantity(quantity, "Stock-out quantity")
        price = non_negative_price(unit_price)
        with self._lock:
            product = self._require_product(product_id)
            self._require_warehouse(warehouse_id)
            balance = self._load_or_new(product, warehouse_id)
            now = self._clock()
            balance.issue(qty, now)
            return self._commit(
                balance, TransactionType.OUT, -qty, price, operator, now,
                reference_type, reference_id, remark,
            )

    def stock_adjust(
        self,
        product_id: str,
        warehouse_id: str,
        new_quantity: Number,
        unit_price: Number,
        *,
        operator: str,
        remark: str | None = None,
    ) -> StockMovement:
        """Set the absolute stock level (stock count correction)."""
        target = to_decimal(new_quantity, "quantity")
        price = non_negative_price(unit_price)
        with self._lock:
            product = self._require_product(product_id)
            self._require_warehouse(warehouse_id)
            balance = self._load_or_new(product, warehouse_id)
            now = self._clock()
            delta = balance.adjust_to(target, price, now)
            return self._commit(
                balance, TransactionType.ADJUST, delta, price, operator, now,
                ReferenceType.ADJUSTMENT, None, remark,
            )

    # --- Reservations ---------------------------------------------------------

    def reserve(self, product_id: str, warehouse_id: str, quantity: Number) -> StockBalance:
        """Move *quantity* from available to reserved. Current stock is unchanged."""
        qty = positive_quantity(quantity, "Reservation quantity")
        with self._lock:
            product = self._require_product(product_id)
            self._require_warehouse(warehouse_id)
            balance = self._load_or_new(product, warehouse_id)
            balance.reserve(qty)
            balance.updated_at = self._clock()
            self._save(balance)
            logger.info("Reserved %s of %s (reserved now %s)", qty, balance.key, balance.reserved_stock)
            return balance

    def release(self, product_id: str, warehouse_id: str, quantity: Number) -> StockBalance:
        """Move *quantity* back from reserved to available."""
        qty = positive_quantity(quantity, "Release quantity")
        with self._lock:
            product = self._require_product(product_id)
            self._require_warehouse(warehouse_id)
            balance = self._load_or_new(product, warehouse_id)
            balance.release(qty)
            balance.updated_at = self._clock()
            self._save(balance)
            logger.info("Released %s of %s (reserved now %s)", qty, balance.key, balance.reserved_stock)
            return balance

    # --- Thresholds -----------------------------------------------------------

    def set_thresholds(
        self,
        product_id: str,
        warehouse_id: str,
        min_stock: Number | None = None,
        max_stock: Number | None = None,
    ) -> StockBalance:
        """Override the reorder thresholds a balance copied from its product.

        Either bound may be omitted to keep its current value. Stock levels
        and the transaction log are not touched.
        """
        new_min = None if min_stock is None else to_decimal(min_stock, "min stock")
        new_max = None if max_stock is None else to_decimal(max_stock, "max stock")
        with self._lock:
            product = self._require_product(product_id)
            self._require_warehouse(warehouse_id)
            balance = self._load_or_new(product, warehouse_id)
            low = balance.min_stock if new_min is None else new_min
            high = balance.max_stock if new_max is None else new_max
            if low < ZERO or high < ZERO:
                raise ValidationError(f"Stock thresholds cannot be negative, got {low}/{high}")
            if low > high:
                raise ValidationError(f"Min stock {low} exceeds max stock {high}")
            balance.min_stock = low
            balance.max_stock = high
            balance.updated_at = self._clock()
            self._save(balance)
            logger.info("Thresholds of %s set to min %s, max %s", balance.key, low, high)
            return balance

    # --- Pre-validation helpers -----------------------------------------------

    def ensure_known(self, product_id: str, warehouse_id: str) -> None:
        """Raise UnknownProduct / UnknownWarehouse without touching any balance."""
        self._require_product(product_id)
        self._require_warehouse(warehouse_id)

    def ensure_warehouse(self, warehouse_id: str) -> None:
        self._require_warehouse(warehouse_id)

    def ensure_available(self, product_id: str, warehouse_id: str, quantity: Decimal) -> None:
        """Raise InsufficientStock if a stock-out of *quantity* would fail."""
        product = self._require_product(product_id)
        self._require_warehouse(warehouse_id)
        self._load_or_new(product, warehouse_id).check_issue(quantity)

    # --- Queries --------------------------------------------------------------

    def find_balance(self, product_id: str, warehouse_id: str) -> StockBalance | None:
        return self._balance_repo.get(StockKey(product_id, warehouse_id))

    def list_balances(
        self, product_id: str | None = None, warehouse_id: str | None = None
    ) -> list[StockBalance]:
        balances = [
            b
            for b in self._balance_repo.list_all()
            if (product_id is None or b.product_id == product_id)
            and (warehouse_id is None or b.warehouse_id == warehouse_id)
        ]
        return sorted(balances, key=lambda b: (b.product_id, b.warehouse_id))

    def list_low_stock(self) -> list[StockBalance]:
        """Balances at or below their product's minimum stock."""
        low: list[StockBalance] = []
        for balance in self.list_balances():
            product = self._product_repo.get_by_id(balance.product_id)
            if product is not None and balance.current_stock <= product.min_stock:
                low.append(balance)
        return low

    def list_out_of_stock(self) -> list[StockBalance]:
        return [b for b in self.list_balances() if b.current_stock <= ZERO]

    def list_transactions(self, filters: TransactionFilter | None = None) -> list[StockTransaction]:
        filters = filters or TransactionFilter()
        matched = [t for t in self._transaction_repo.list_all() if filters.matches(t)]
        # sorted() is stable: equal timestamps keep log order
        return sorted(matched, key=lambda t: t.created_at)

    def top_products_by_value(self, n: int = 10) -> list[StockBalance]:
        """Balances ranked by ``current_stock * avg_cost``, highest first."""
        if n <= 0:
            return []
        ranked = sorted(
            self._balance_repo.list_all(),
            key=lambda b: (-b.stock_value, b.product_id, b.warehouse_id),
        )
        return ranked[:n]

    def verify_consistency(
        self, product_id: str | None = None, warehouse_id: str | None = None
    ) -> None:
        """Replay the log against the balances and fail loudly on any drift."""
        replayed: dict[StockKey, Decimal] = {}
        for t in self._transaction_repo.list_all():
            replayed[t.key] = replayed.get(t.key, ZERO) + t.quantity

        problems: list[str] = []
        seen: set[StockKey] = set()
        for balance in self.list_balances(product_id, warehouse_id):
            seen.add(balance.key)
            expected = replayed.get(balance.key, ZERO)
            if expected != balance.current_stock:
                problems.append(
                    f"{balance.key}: balance says {balance.current_stock}, "
                    f"transactions sum to {expected}"
                )
            problems.extend(f"{balance.key}: {p}" for p in balance.violations())
        for key, total in replayed.items():
            if key in seen:
                continue
            if (product_id is None or key.product_id == product_id) and (
                warehouse_id is None or key.warehouse_id == warehouse_id
            ):
                problems.append(f"{key}: transactions sum to {total} but no balance exists")

        if problems:
            for problem in problems:
                logger.critical("Ledger inconsistency: %s", problem)
            raise LedgerConsistencyError("; ".join(problems))

    # --- Internal helpers -----------------------------------------------------

    def _require_product(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise UnknownProduct(product_id)
        return product

    def _require_warehouse(self, warehouse_id: str) -> None:
        if self._warehouse_repo.get_by_id(warehouse_id) is None:
            raise UnknownWarehouse(warehouse_id)

    def _load_or_new(self, product: Product, warehouse_id: str) -> StockBalance:
        """Return the stored balance, or an unsaved zero balance for a new pair."""
        balance = self._balance_repo.get(StockKey(product.id, warehouse_id))
        if balance is not None:
            return balance
        return StockBalance(
            product_id=product.id,
            warehouse_id=warehouse_id,
            min_stock=product.min_stock,
            max_stock=product.max_stock,
        )

    def _commit(
        self,
        balance: StockBalance,
        type: TransactionType,
        quantity: Decimal,
        unit_price: Decimal,
        operator: str,
        at: datetime,
        reference_type: str | None,
        reference_id: str | None,
        remark: str | None,
    ) -> StockMovement:
        sequence = self._transaction_repo.next_sequence(type)
        transaction = StockTransaction(
            id=uuid.uuid4().hex,
            transaction_no=f"{type.prefix}{at:%Y%m%d}{sequence:04d}",
            product_id=balance.product_id,
            warehouse_id=balance.warehouse_id,
            type=type,
            quantity=quantity,
            unit_price=unit_price,
            operator=operator,
            created_at=at,
            reference_type=reference_type,
            reference_id=reference_id,
            remark=remark,
        )
        self._save(balance)
        self._transaction_repo.append(transaction)
        logger.info(
            "%s %s %s @ %s -> current %s, available %s, avg cost %s",
            transaction.transaction_no,
            balance.key,
            quantity,
            unit_price,
            balance.current_stock,
            balance.available_stock,
            balance.avg_cost,
        )
        return StockMovement(balance=balance, transaction=transaction)

    def _save(self, balance: StockBalance) -> None:
        problems = balance.violations()
        if problems:
            for problem in problems:
                logger.critical("Refusing to save %s: %s", balance.key, problem)
            raise LedgerConsistencyError(f"{balance.key}: " + "; ".join(problems))
        self._balance_repo.save(balance)
