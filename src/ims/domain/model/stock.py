"""StockBalance aggregate and the immutable StockTransaction record.

There is one StockBalance per (product, warehouse) pair. It knows how
much is physically owned at that location, how much of it is earmarked
for in-flight orders, and the moving-average unit cost of what is on
hand. Every change to ``current_stock`` is mirrored by exactly one
StockTransaction appended to the log.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ims.domain.exceptions import (
    InsufficientAvailableStock,
    InsufficientReservedStock,
    InsufficientStock,
    InvalidQuantity,
    NoOpAdjustment,
)
from ims.domain.model.value_objects import ZERO, StockKey, moving_average


class TransactionType(Enum):
    IN = "IN"
    OUT = "OUT"
    ADJUST = "ADJUST"

    @property
    def prefix(self) -> str:
        return {"IN": "IN", "OUT": "OUT", "ADJUST": "ADJ"}[self.value]


class ReferenceType:
    RECEIPT = "RECEIPT"
    DELIVERY = "DELIVERY"
    ADJUSTMENT = "ADJUSTMENT"


@dataclass
class StockBalance:
    """Aggregate root for stock at one location.

    Invariants:
    - ``available_stock + reserved_stock == current_stock`` (available is
      derived, so this holds by construction)
    - ``reserved_stock`` is never negative
    - ``avg_cost`` only moves on inbound movements
    """

    product_id: str
    warehouse_id: str
    current_stock: Decimal = ZERO
    reserved_stock: Decimal = ZERO
    avg_cost: Decimal = ZERO
    min_stock: Decimal = ZERO
    max_stock: Decimal = ZERO
    last_in_at: datetime | None = None
    last_out_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def key(self) -> StockKey:
        return StockKey(self.product_id, self.warehouse_id)

    @property
    def available_stock(self) -> Decimal:
        return self.current_stock - self.reserved_stock

    @property
    def stock_value(self) -> Decimal:
        return self.current_stock * self.avg_cost

    # --- Movements ------------------------------------------------------------

    def receive(self, quantity: Decimal, unit_price: Decimal, at: datetime) -> None:
        """Add *quantity* at *unit_price*, folding it into the moving average."""
        if quantity <= ZERO:
            raise InvalidQuantity(f"Stock-in quantity must be positive, got {quantity}", quantity)
        self.avg_cost = moving_average(self.avg_cost, self.current_stock, quantity, unit_price)
        self.current_stock += quantity
        self.last_in_at = at
        self.updated_at = at

    def issue(self, quantity: Decimal, at: datetime) -> None:
        """Remove *quantity* from unreserved stock. Cost basis is unchanged."""
        self.check_issue(quantity)
        self.current_stock -= quantity
        self.last_out_at = at
        self.updated_at = at

    def check_issue(self, quantity: Decimal) -> None:
        if quantity <= ZERO:
            raise InvalidQuantity(f"Stock-out quantity must be positive, got {quantity}", quantity)
        if self.available_stock < quantity:
            raise InsufficientStock(
                self.product_id, self.warehouse_id, quantity, self.available_stock
            )

    def adjust_to(self, new_quantity: Decimal, unit_price: Decimal, at: datetime) -> Decimal:
        """Set the absolute stock level and return the signed delta applied."""
        if new_quantity < ZERO:
            raise InvalidQuantity(
                f"Adjusted stock cannot be negative, got {new_quantity}", new_quantity
            )
        delta = new_quantity - self.current_stock
        if delta == ZERO:
            raise NoOpAdjustment(self.product_id, self.warehouse_id, self.current_stock)
        if new_quantity < self.reserved_stock:
            raise InsufficientStock(
                self.product_id,
                self.warehouse_id,
                -delta,
                self.available_stock,
                message=(
                    f"Cannot adjust product '{self.product_id}' in warehouse "
                    f"'{self.warehouse_id}' to {new_quantity} - {self.reserved_stock} "
                    f"is reserved; release it first"
                ),
            )
        if delta > ZERO:
            self.avg_cost = moving_average(self.avg_cost, self.current_stock, delta, unit_price)
        self.current_stock = new_quantity
        self.updated_at = at
        return delta

    # --- Reservations ---------------------------------------------------------

    def reserve(self, quantity: Decimal) -> None:
        """Earmark available stock for an order."""
        if quantity <= ZERO:
            raise InvalidQuantity(f"Reservation quantity must be positive, got {quantity}", quantity)
        if quantity > self.available_stock:
            raise InsufficientAvailableStock(
                self.product_id, self.warehouse_id, quantity, self.available_stock
            )
        self.reserved_stock += quantity

    def release(self, quantity: Decimal) -> None:
        """Return previously reserved stock to the available pool."""
        if quantity <= ZERO:
            raise InvalidQuantity(f"Release quantity must be positive, got {quantity}", quantity)
        if quantity > self.reserved_stock:
            raise InsufficientReservedStock(
                self.product_id, self.warehouse_id, quantity, self.reserved_stock
            )
        self.reserved_stock -= quantity

    def violations(self) -> list[str]:
        """Describe every broken invariant; empty when the balance is sound."""
        problems: list[str] = []
        if self.reserved_stock < ZERO:
            problems.append(f"reserved stock {self.reserved_stock} is negative")
        if self.available_stock < ZERO:
            problems.append(f"available stock {self.available_stock} is negative")
        return problems


@dataclass(frozen=True)
class StockTransaction:
    """One immutable line of the stock log.

    ``quantity`` is signed: positive for IN and upward ADJUST, negative
    for OUT and downward ADJUST.
    """

    id: str
    transaction_no: str
    product_id: str
    warehouse_id: str
    type: TransactionType
    quantity: Decimal
    unit_price: Decimal
    operator: str
    created_at: datetime
    reference_type: str | None = None
    reference_id: str | None = None
    remark: str | None = None

    @property
    def key(self) -> StockKey:
        return StockKey(self.product_id, self.warehouse_id)

    @property
    def total_amount(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class StockMovement:
    """Result of a ledger movement: the updated balance and its log line."""

    balance: StockBalance
    transaction: StockTransaction
