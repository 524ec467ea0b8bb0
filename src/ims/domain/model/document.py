"""FulfillmentDocument aggregate — purchase receipts and sales deliveries.

A document is drafted line by line against an order and then confirmed
once. Confirmation is the only moment its lines touch the stock ledger
and the order; that orchestration lives in the workflow service, the
document itself only guards its own state machine and totals:

    receipt:   DRAFT -> CONFIRMED
    delivery:  DRAFT -> [SHIPPED ->] COMPLETED
    both:      DRAFT | SHIPPED -> CANCELLED
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from ims.domain.exceptions import InvalidDocumentState, InvalidQuantity, ValidationError
from ims.domain.model.value_objects import ZERO


class DocumentKind(Enum):
    RECEIPT = "RECEIPT"
    DELIVERY = "DELIVERY"

    @property
    def prefix(self) -> str:
        return "PR" if self is DocumentKind.RECEIPT else "SD"

    @property
    def final_status(self) -> DocumentStatus:
        if self is DocumentKind.RECEIPT:
            return DocumentStatus.CONFIRMED
        return DocumentStatus.COMPLETED


class DocumentStatus(Enum):
    DRAFT = "DRAFT"
    SHIPPED = "SHIPPED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


@dataclass
class DocumentLine:
    id: int
    product_id: str
    order_line_id: str | None
    quantity: Decimal
    unit_price: Decimal

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass
class FulfillmentDocument:
    """Aggregate root for receipts and deliveries.

    ``total_quantity`` and ``total_amount`` are stored, not computed on
    read, and are recalculated after every line change.
    """

    id: int
    document_no: str
    kind: DocumentKind
    order_id: int
    counterparty_id: str
    warehouse_id: str
    operator: str
    document_date: date
    status: DocumentStatus = DocumentStatus.DRAFT
    lines: list[DocumentLine] = field(default_factory=list)
    total_quantity: Decimal = ZERO
    total_amount: Decimal = ZERO
    remark: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    confirmed_at: datetime | None = None
    next_line_id: int = 1

    # --- Line editing (DRAFT only) --------------------------------------------

    def add_line(
        self,
        product_id: str,
        order_line_id: str | None,
        quantity: Decimal,
        unit_price: Decimal,
    ) -> DocumentLine:
        self.ensure_draft()
        self._validate_line_values(quantity, unit_price)
        line = DocumentLine(
            id=self.next_line_id,
            product_id=product_id,
            order_line_id=order_line_id,
            quantity=quantity,
            unit_price=unit_price,
        )
        self.next_line_id += 1
        self.lines.append(line)
        self._recalculate_totals()
        return line

    def update_line(
        self,
        line_id: int,
        quantity: Decimal | None = None,
        unit_price: Decimal | None = None,
    ) -> DocumentLine:
        self.ensure_draft()
        line = self.find_line(line_id)
        new_quantity = line.quantity if quantity is None else quantity
        new_price = line.unit_price if unit_price is None else unit_price
        self._validate_line_values(new_quantity, new_price)
        line.quantity = new_quantity
        line.unit_price = new_price
        self._recalculate_totals()
        return line

    def remove_line(self, line_id: int) -> None:
        self.ensure_draft()
        line = self.find_line(line_id)
        self.lines.remove(line)
        self._recalculate_totals()

    def find_line(self, line_id: int) -> DocumentLine:
        for line in self.lines:
            if line.id == line_id:
                return line
        raise ValidationError(f"Line {line_id} not found on document {self.document_no}")

    def quantity_for_order_line(self, order_line_id: str, exclude_line: int | None = None) -> Decimal:
        """Sum of quantities this document already holds for an order line."""
        return sum(
            (
                line.quantity
                for line in self.lines
                if line.order_line_id == order_line_id and line.id != exclude_line
            ),
            ZERO,
        )

    # --- State transitions ----------------------------------------------------

    @property
    def is_final(self) -> bool:
        return self.status in (
            DocumentStatus.CONFIRMED,
            DocumentStatus.COMPLETED,
            DocumentStatus.CANCELLED,
        )

    def ensure_draft(self) -> None:
        if self.status is not DocumentStatus.DRAFT:
            raise InvalidDocumentState(self.document_no, self.status.value, "DRAFT")

    def ensure_confirmable(self) -> None:
        allowed = [DocumentStatus.DRAFT]
        if self.kind is DocumentKind.DELIVERY:
            allowed.append(DocumentStatus.SHIPPED)
        if self.status not in allowed:
            raise InvalidDocumentState(
                self.document_no,
                self.status.value,
                " or ".join(s.value for s in allowed),
            )
        if not self.lines:
            raise ValidationError(f"Document {self.document_no} has no lines")

    def mark_confirmed(self, at: datetime) -> None:
        """Transition to the kind's final status.

        Ledger and order effects must already have been applied by the
        workflow before calling this.
        """
        self.ensure_confirmable()
        self.status = self.kind.final_status
        self.confirmed_at = at

    def mark_shipped(self) -> None:
        """Transition DRAFT -> SHIPPED (deliveries only)."""
        if self.kind is not DocumentKind.DELIVERY:
            raise InvalidDocumentState(self.document_no, self.status.value, "a delivery")
        self.ensure_draft()
        if not self.lines:
            raise ValidationError(f"Document {self.document_no} has no lines")
        self.status = DocumentStatus.SHIPPED

    def cancel(self) -> None:
        if self.status not in (DocumentStatus.DRAFT, DocumentStatus.SHIPPED):
            raise InvalidDocumentState(self.document_no, self.status.value, "DRAFT or SHIPPED")
        self.status = DocumentStatus.CANCELLED

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _validate_line_values(quantity: Decimal, unit_price: Decimal) -> None:
        if quantity <= ZERO:
            raise InvalidQuantity(f"Line quantity must be positive, got {quantity}", quantity)
        if unit_price < ZERO:
            raise ValidationError(f"Unit price cannot be negative, got {unit_price}")

    def _recalculate_totals(self) -> None:
        self.total_quantity = sum((line.quantity for line in self.lines), ZERO)
        self.total_amount = sum((line.amount for line in self.lines), ZERO)
