"""Domain-level exceptions.

All ledger and workflow errors are subclasses of DomainException so the
CLI layer can catch them uniformly and display user-friendly messages.

    DomainException
    |
    +-- ValidationError              caller mistake
    |   +-- InvalidQuantity
    |   +-- InvalidDocumentState
    |   +-- OverFulfillment
    |
    +-- EntityNotFoundError          unknown reference
    |   +-- UnknownProduct
    |   +-- UnknownWarehouse
    |   +-- UnknownOrder
    |   +-- UnknownOrderLine
    |   +-- UnknownDocument
    |
    +-- BusinessRuleError            state conflict
    |   +-- InsufficientStock
    |   +-- InsufficientAvailableStock
    |   +-- InsufficientReservedStock
    |   +-- NoOpAdjustment
    |
    +-- LedgerConsistencyError       broken invariant (a bug)
"""

from __future__ import annotations

from decimal import Decimal


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated by the caller's input."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class BusinessRuleError(DomainException):
    """The request is well-formed but conflicts with the current state."""


class LedgerConsistencyError(DomainException):
    """Ledger state no longer satisfies its invariants."""


# --- Validation ---------------------------------------------------------------


class InvalidQuantity(ValidationError):

    def __init__(self, message: str, quantity: Decimal | None = None) -> None:
        self.quantity = quantity
        super().__init__(message)


class InvalidDocumentState(ValidationError):

    def __init__(self, document_no: str, status: str, expected: str) -> None:
        self.document_no = document_no
        self.status = status
        self.expected = expected
        super().__init__(
            f"Document {document_no} is {status}, expected {expected}"
        )


class OverFulfillment(ValidationError):

    def __init__(
        self, order_line_id: str, ordered: Decimal, fulfilled: Decimal, delta: Decimal
    ) -> None:
        self.order_line_id = order_line_id
        self.ordered = ordered
        self.fulfilled = fulfilled
        self.delta = delta
        super().__init__(
            f"Order line {order_line_id}: fulfilling {delta} more would exceed "
            f"the ordered quantity {ordered} (already fulfilled {fulfilled})"
        )


# --- Not found ----------------------------------------------------------------


class UnknownProduct(EntityNotFoundError):

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product '{product_id}' not found")


class UnknownWarehouse(EntityNotFoundError):

    def __init__(self, warehouse_id: str) -> None:
        self.warehouse_id = warehouse_id
        super().__init__(f"Warehouse '{warehouse_id}' not found")


class UnknownOrder(EntityNotFoundError):

    def __init__(self, order_id: int) -> None:
        self.order_id = order_id
        super().__init__(f"Order #{order_id} not found")


class UnknownOrderLine(EntityNotFoundError):

    def __init__(self, order_line_id: str) -> None:
        self.order_line_id = order_line_id
        super().__init__(f"Order line '{order_line_id}' not found")


class UnknownDocument(EntityNotFoundError):

    def __init__(self, document_id: int) -> None:
        self.document_id = document_id
        super().__init__(f"Document #{document_id} not found")


# --- Business rules -----------------------------------------------------------


class InsufficientStock(BusinessRuleError):
    """Stock-out (or downward adjustment) exceeds what is available."""

    def __init__(
        self,
        product_id: str,
        warehouse_id: str,
        requested: Decimal,
        available: Decimal,
        message: str | None = None,
    ) -> None:
        self.product_id = product_id
        self.warehouse_id = warehouse_id
        self.requested = requested
        self.available = available
        super().__init__(
            message
            or f"Insufficient stock for product '{product_id}' in warehouse "
            f"'{warehouse_id}' (need {requested}, have {available} available)"
        )


class InsufficientAvailableStock(BusinessRuleError):

    def __init__(
        self, product_id: str, warehouse_id: str, requested: Decimal, available: Decimal
    ) -> None:
        self.product_id = product_id
        self.warehouse_id = warehouse_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot reserve {requested} of product '{product_id}' in warehouse "
            f"'{warehouse_id}' - only {available} available"
        )


class InsufficientReservedStock(BusinessRuleError):

    def __init__(
        self, product_id: str, warehouse_id: str, requested: Decimal, reserved: Decimal
    ) -> None:
        self.product_id = product_id
        self.warehouse_id = warehouse_id
        self.requested = requested
        self.reserved = reserved
        super().__init__(
            f"Cannot release {requested} of product '{product_id}' in warehouse "
            f"'{warehouse_id}' - only {reserved} currently reserved"
        )


class NoOpAdjustment(BusinessRuleError):

    def __init__(self, product_id: str, warehouse_id: str, quantity: Decimal) -> None:
        self.product_id = product_id
        self.warehouse_id = warehouse_id
        self.quantity = quantity
        super().__init__(
            f"Product '{product_id}' in warehouse '{warehouse_id}' already has "
            f"{quantity} in stock - nothing to adjust"
        )
