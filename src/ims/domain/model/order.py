"""Order aggregate — purchase and sales orders share one shape.

An order owns its lines. Each line tracks how much of its ordered
quantity has been fulfilled (received for purchase lines, delivered for
sales lines). Fulfilled quantities only ever grow; there is no
"un-receive".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from ims.domain.exceptions import (
    InvalidQuantity,
    OverFulfillment,
    UnknownOrderLine,
    ValidationError,
)
from ims.domain.model.value_objects import ZERO


class OrderKind(Enum):
    PURCHASE = "PURCHASE"
    SALES = "SALES"

    @property
    def prefix(self) -> str:
        return "PO" if self is OrderKind.PURCHASE else "SO"


class OrderLineStatus(Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    COMPLETED = "COMPLETED"


class OrderStatus(Enum):
    OPEN = "OPEN"
    PARTIAL = "PARTIAL"
    COMPLETED = "COMPLETED"


@dataclass
class OrderLine:
    """A product, quantity and locked price on an order."""

    id: str
    order_id: int
    product_id: str
    quantity: Decimal
    unit_price: Decimal
    discount_rate: Decimal = ZERO
    fulfilled_quantity: Decimal = ZERO

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.unit_price * (Decimal("1") - self.discount_rate)

    @property
    def outstanding_quantity(self) -> Decimal:
        return max(self.quantity - self.fulfilled_quantity, ZERO)

    @property
    def status(self) -> OrderLineStatus:
        if self.fulfilled_quantity >= self.quantity:
            return OrderLineStatus.COMPLETED
        if self.fulfilled_quantity > ZERO:
            return OrderLineStatus.PARTIAL
        return OrderLineStatus.PENDING

    def check_fulfillment(self, delta: Decimal, allow_over: bool = False) -> None:
        if delta <= ZERO:
            raise InvalidQuantity(f"Fulfillment quantity must be positive, got {delta}", delta)
        if not allow_over and self.fulfilled_quantity + delta > self.quantity:
            raise OverFulfillment(self.id, self.quantity, self.fulfilled_quantity, delta)

    def fulfill(self, delta: Decimal, allow_over: bool = False) -> None:
        """Record that *delta* more units were received or delivered."""
        self.check_fulfillment(delta, allow_over)
        self.fulfilled_quantity += delta


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_ORDER_LINES = 50


@dataclass
class Order:
    """Aggregate root for purchase and sales orders.

    Use ``Order.create()`` for new orders; ``__init__`` stays simple so
    repositories can reconstitute persisted orders without re-validating.
    """

    id: int
    order_no: str
    kind: OrderKind
    counterparty_id: str
    lines: list[OrderLine]
    creator: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(
        id: int,
        kind: OrderKind,
        counterparty_id: str,
        lines: list[OrderLine],
        creator: str = "",
        created_at: datetime | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        if not counterparty_id or not counterparty_id.strip():
            raise ValidationError(
                "Supplier is required" if kind is OrderKind.PURCHASE else "Customer is required"
            )
        if not lines:
            raise ValidationError("Order must contain at least one line")
        if len(lines) > MAX_ORDER_LINES:
            raise ValidationError(f"Maximum {MAX_ORDER_LINES} lines per order")

        for line in lines:
            if line.quantity <= ZERO:
                raise InvalidQuantity(
                    f"Ordered quantity must be positive, got {line.quantity}", line.quantity
                )
            if line.unit_price < ZERO:
                raise ValidationError(f"Unit price cannot be negative, got {line.unit_price}")
            if not ZERO <= line.discount_rate < Decimal("1"):
                raise ValidationError(
                    f"Discount rate must be in [0, 1), got {line.discount_rate}"
                )

        created_at = created_at or datetime.now(timezone.utc)
        return Order(
            id=id,
            order_no=f"{kind.prefix}{created_at:%Y%m%d}{id:04d}",
            kind=kind,
            counterparty_id=counterparty_id.strip(),
            lines=list(lines),
            creator=creator,
            created_at=created_at,
        )

    # --- Fulfillment ----------------------------------------------------------

    def apply_fulfillment(
        self, order_line_id: str, delta: Decimal, allow_over: bool = False
    ) -> OrderLine:
        line = self.find_line(order_line_id)
        line.fulfill(delta, allow_over)
        return line

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Decimal:
        return sum((line.amount for line in self.lines), ZERO)

    @property
    def status(self) -> OrderStatus:
        statuses = {line.status for line in self.lines}
        if statuses == {OrderLineStatus.COMPLETED}:
            return OrderStatus.COMPLETED
        if statuses == {OrderLineStatus.PENDING}:
            return OrderStatus.OPEN
        return OrderStatus.PARTIAL

    def find_line(self, order_line_id: str) -> OrderLine:
        for line in self.lines:
            if line.id == order_line_id:
                return line
        raise UnknownOrderLine(order_line_id)
