"""Domain service: Receiving and Delivery workflows.

Both workflows draft a FulfillmentDocument against an order and, on
confirmation, push every line through the stock ledger and the order
line fulfillment tracker. They differ only in the ledger call (stock-in
for receipts, stock-out for deliveries) and in what has to be checked
before any line is applied.

Confirmation is all-or-nothing and uses the same two-phase approach as
the rest of the domain:
  Phase 1 — validate: every product and the warehouse exist, every
            delivery product has enough available stock for the summed
            quantity of its lines, every order line accepts its summed
            delta. Fails before any mutation.
  Phase 2 — apply: ledger movements, order line fulfillment, status.
Both phases run under the ledger lock, so nothing can change the
balances between validation and application.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import date, datetime, timezone
from decimal import Decimal

from ims.domain.exceptions import (
    DomainException,
    LedgerConsistencyError,
    OverFulfillment,
    UnknownDocument,
    UnknownOrder,
    ValidationError,
)
from ims.domain.model.document import (
    DocumentKind,
    DocumentLine,
    DocumentStatus,
    FulfillmentDocument,
)
from ims.domain.model.order import Order, OrderKind, OrderLine
from ims.domain.model.stock import ReferenceType
from ims.domain.model.value_objects import ZERO, non_negative_price, positive_quantity
from ims.domain.repository.document_repository import DocumentRepository
from ims.domain.repository.order_repository import OrderRepository
from ims.domain.service.fulfillment_tracker import FulfillmentTracker
from ims.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FulfillmentWorkflow(ABC):
    """Shared lifecycle of receipts and deliveries."""

    kind: DocumentKind
    order_kind: OrderKind
    reference_type: str

    def __init__(
        self,
        document_repo: DocumentRepository,
        order_repo: OrderRepository,
        ledger: StockLedger,
        tracker: FulfillmentTracker,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._document_repo = document_repo
        self._order_repo = order_repo
        self._ledger = ledger
        self._tracker = tracker
        self._clock = clock

    # --- Drafting -------------------------------------------------------------

    def create_document(
        self,
        order_id: int,
        warehouse_id: str,
        operator: str,
        document_date: date | None = None,
        remark: str | None = None,
    ) -> FulfillmentDocument:
        """Open a DRAFT document against *order_id* with zero totals."""
        order = self._get_order(order_id)
        if order.kind is not self.order_kind:
            raise ValidationError(
                f"Order {order.order_no} is a {order.kind.value.lower()} order; "
                f"a {self.kind.value.lower()} needs a {self.order_kind.value.lower()} order"
            )
        self._ledger.ensure_warehouse(warehouse_id)
        if not operator or not operator.strip():
            raise ValidationError("Operator is required")

        now = self._clock()
        document_id = self._document_repo.next_id()
        document = FulfillmentDocument(
            id=document_id,
            document_no=f"{self.kind.prefix}{now:%Y%m%d}{document_id:04d}",
            kind=self.kind,
            order_id=order.id,
            counterparty_id=order.counterparty_id,
            warehouse_id=warehouse_id,
            operator=operator.strip(),
            document_date=document_date or now.date(),
            remark=remark,
            created_at=now,
        )
        self._document_repo.save(document)
        logger.info("Created %s %s for order %s", self.kind.value, document.document_no, order.order_no)
        return document

    def add_line(
        self,
        document_id: int,
        product_id: str,
        order_line_id: str | None,
        quantity: Decimal | int | str,
        unit_price: Decimal | int | str,
    ) -> DocumentLine:
        document = self.get_document(document_id)
        document.ensure_draft()
        qty = positive_quantity(quantity, "Line quantity")
        price = non_negative_price(unit_price)
        self._ledger.ensure_known(product_id, document.warehouse_id)
        if order_line_id is not None:
            order_line = self._check_order_line(document, order_line_id, product_id)
            self._check_outstanding(document, order_line, qty)

        line = document.add_line(product_id, order_line_id, qty, price)
        self._document_repo.save(document)
        return line

    def update_line(
        self,
        document_id: int,
        line_id: int,
        quantity: Decimal | int | str | None = None,
        unit_price: Decimal | int | str | None = None,
    ) -> DocumentLine:
        document = self.get_document(document_id)
        document.ensure_draft()
        line = document.find_line(line_id)
        qty = None if quantity is None else positive_quantity(quantity, "Line quantity")
        price = None if unit_price is None else non_negative_price(unit_price)
        if qty is not None and line.order_line_id is not None:
            order_line = self._tracker.find_line(line.order_line_id)
            self._check_outstanding(document, order_line, qty, exclude_line=line.id)

        updated = document.update_line(line_id, qty, price)
        self._document_repo.save(document)
        return updated

    def remove_line(self, document_id: int, line_id: int) -> None:
        document = self.get_document(document_id)
        document.remove_line(line_id)
        self._document_repo.save(document)

    # --- Confirmation ---------------------------------------------------------

    def confirm(self, document_id: int) -> FulfillmentDocument:
        """Apply the document to the ledger and its order, exactly once."""
        with self._ledger.locked():
            document = self.get_document(document_id)
            try:
                document.ensure_confirmable()
                self._validate(document)
            except DomainException as exc:
                logger.warning("%s rejected: %s", document.document_no, exc)
                raise

            try:
                for line in document.lines:
                    self._apply_movement(document, line)
                for line in document.lines:
                    if line.order_line_id is not None:
                        self._tracker.apply_fulfillment(line.order_line_id, line.quantity)
                document.mark_confirmed(self._clock())
            except DomainException as exc:
                logger.critical(
                    "%s failed after validation; ledger may be partially applied: %s",
                    document.document_no,
                    exc,
                )
                raise LedgerConsistencyError(
                    f"Confirmation of {document.document_no} failed after validation: {exc}"
                ) from exc

            self._document_repo.save(document)

        logger.info(
            "%s %s: %s lines, quantity %s, amount %s",
            document.document_no,
            document.status.value,
            len(document.lines),
            document.total_quantity,
            document.total_amount,
        )
        return document

    def cancel(self, document_id: int) -> FulfillmentDocument:
        document = self.get_document(document_id)
        document.cancel()
        self._document_repo.save(document)
        logger.info("%s cancelled", document.document_no)
        return document

    # --- Queries --------------------------------------------------------------

    def get_document(self, document_id: int) -> FulfillmentDocument:
        document = self._document_repo.get_by_id(document_id)
        if document is None or document.kind is not self.kind:
            raise UnknownDocument(document_id)
        return document

    def find_documents(
        self, order_id: int | None = None, status: DocumentStatus | None = None
    ) -> list[FulfillmentDocument]:
        return [
            d
            for d in self._document_repo.list_by_kind(self.kind)
            if (order_id is None or d.order_id == order_id)
            and (status is None or d.status is status)
        ]

    # --- Subclass hooks -------------------------------------------------------

    @abstractmethod
    def _apply_movement(self, document: FulfillmentDocument, line: DocumentLine) -> None:
        """Post one line to the stock ledger."""

    def _validate_stock(self, document: FulfillmentDocument) -> None:
        """Check ledger feasibility of every line. Receipts only need the references."""

    # --- Internal helpers -----------------------------------------------------

    def _validate(self, document: FulfillmentDocument) -> None:
        for line in document.lines:
            self._ledger.ensure_known(line.product_id, document.warehouse_id)
        self._validate_stock(document)

        deltas: dict[str, Decimal] = {}
        for line in document.lines:
            if line.order_line_id is not None:
                deltas[line.order_line_id] = deltas.get(line.order_line_id, ZERO) + line.quantity
        self._tracker.validate_fulfillments(deltas)

    def _get_order(self, order_id: int) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise UnknownOrder(order_id)
        return order

    def _check_order_line(
        self, document: FulfillmentDocument, order_line_id: str, product_id: str
    ) -> OrderLine:
        order_line = self._tracker.find_line(order_line_id)
        if order_line.order_id != document.order_id:
            raise ValidationError(
                f"Order line {order_line_id} does not belong to order #{document.order_id}"
            )
        if order_line.product_id != product_id:
            raise ValidationError(
                f"Order line {order_line_id} is for product '{order_line.product_id}', "
                f"not '{product_id}'"
            )
        return order_line

    def _check_outstanding(
        self,
        document: FulfillmentDocument,
        order_line: OrderLine,
        quantity: Decimal,
        exclude_line: int | None = None,
    ) -> None:
        if self._tracker.allow_over_fulfillment:
            return
        drafted = document.quantity_for_order_line(order_line.id, exclude_line) + quantity
        if drafted > order_line.outstanding_quantity:
            raise OverFulfillment(
                order_line.id, order_line.quantity, order_line.fulfilled_quantity, drafted
            )


class ReceivingWorkflow(FulfillmentWorkflow):
    """Purchase receipts: DRAFT -> CONFIRMED, stock-in per line."""

    kind = DocumentKind.RECEIPT
    order_kind = OrderKind.PURCHASE
    reference_type = ReferenceType.RECEIPT

    def _apply_movement(self, document: FulfillmentDocument, line: DocumentLine) -> None:
        self._ledger.stock_in(
            line.product_id,
            document.warehouse_id,
            line.quantity,
            line.unit_price,
            operator=document.operator,
            reference_type=self.reference_type,
            reference_id=str(document.id),
            remark=f"Purchase receipt {document.document_no}",
        )


class DeliveryWorkflow(FulfillmentWorkflow):
    """Sales deliveries: DRAFT -> [SHIPPED ->] COMPLETED, stock-out per line."""

    kind = DocumentKind.DELIVERY
    order_kind = OrderKind.SALES
    reference_type = ReferenceType.DELIVERY

    def ship(self, document_id: int) -> FulfillmentDocument:
        """Mark the goods as dispatched. Stock only leaves on completion."""
        document = self.get_document(document_id)
        document.mark_shipped()
        self._document_repo.save(document)
        logger.info("%s shipped", document.document_no)
        return document

    def _validate_stock(self, document: FulfillmentDocument) -> None:
        needed: dict[str, Decimal] = {}
        for line in document.lines:
            needed[line.product_id] = needed.get(line.product_id, ZERO) + line.quantity
        for product_id, quantity in needed.items():
            self._ledger.ensure_available(product_id, document.warehouse_id, quantity)

    def _apply_movement(self, document: FulfillmentDocument, line: DocumentLine) -> None:
        self._ledger.stock_out(
            line.product_id,
            document.warehouse_id,
            line.quantity,
            line.unit_price,
            operator=document.operator,
            reference_type=self.reference_type,
            reference_id=str(document.id),
            remark=f"Sales delivery {document.document_no}",
        )
