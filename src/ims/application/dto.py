"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals. Decimals are pre-formatted as strings.
"""

from __future__ import annotations

from dataclasses import dataclass

from ims.domain.model.document import FulfillmentDocument
from ims.domain.model.order import Order, OrderLine
from ims.domain.model.stock import StockBalance, StockTransaction
from ims.domain.model.value_objects import format_decimal


@dataclass(frozen=True)
class OrderLineSpec:
    """Input: one line of a new order. ``unit_price`` defaults to the catalog price."""

    product_id: str
    quantity: str
    unit_price: str | None = None
    discount_rate: str = "0"


@dataclass(frozen=True)
class BalanceDTO:
    product_id: str
    warehouse_id: str
    current: str
    reserved: str
    available: str
    avg_cost: str
    value: str
    min_stock: str
    max_stock: str


@dataclass(frozen=True)
class TransactionDTO:
    transaction_no: str
    type: str
    product_id: str
    warehouse_id: str
    quantity: str
    unit_price: str
    total_amount: str
    reference: str
    operator: str
    created_at: str


@dataclass(frozen=True)
class MovementDTO:
    """Output: a ledger movement — the log line plus the resulting balance."""

    transaction: TransactionDTO
    balance: BalanceDTO


@dataclass(frozen=True)
class OrderLineDTO:
    id: str
    product_id: str
    quantity: str
    fulfilled: str
    outstanding: str
    unit_price: str
    discount_rate: str
    amount: str
    status: str


@dataclass(frozen=True)
class OrderDTO:
    id: int
    order_no: str
    kind: str
    counterparty_id: str
    status: str
    lines: list[OrderLineDTO]
    total: str
    created_at: str


@dataclass(frozen=True)
class DocumentLineDTO:
    id: int
    product_id: str
    order_line_id: str
    quantity: str
    unit_price: str
    amount: str


@dataclass(frozen=True)
class DocumentDTO:
    id: int
    document_no: str
    kind: str
    order_id: int
    counterparty_id: str
    warehouse_id: str
    operator: str
    status: str
    document_date: str
    lines: list[DocumentLineDTO]
    total_quantity: str
    total_amount: str


# --- Mapping ------------------------------------------------------------------


def balance_to_dto(balance: StockBalance) -> BalanceDTO:
    return BalanceDTO(
        product_id=balance.product_id,
        warehouse_id=balance.warehouse_id,
        current=format_decimal(balance.current_stock),
        reserved=format_decimal(balance.reserved_stock),
        available=format_decimal(balance.available_stock),
        avg_cost=format_decimal(balance.avg_cost),
        value=format_decimal(balance.stock_value),
        min_stock=format_decimal(balance.min_stock),
        max_stock=format_decimal(balance.max_stock),
    )


def transaction_to_dto(transaction: StockTransaction) -> TransactionDTO:
    reference = ""
    if transaction.reference_type:
        reference = transaction.reference_type
        if transaction.reference_id:
            reference += f"#{transaction.reference_id}"
    return TransactionDTO(
        transaction_no=transaction.transaction_no,
        type=transaction.type.value,
        product_id=transaction.product_id,
        warehouse_id=transaction.warehouse_id,
        quantity=format_decimal(transaction.quantity),
        unit_price=format_decimal(transaction.unit_price),
        total_amount=format_decimal(transaction.total_amount),
        reference=reference,
        operator=transaction.operator,
        created_at=transaction.created_at.strftime("%Y-%m-%d %H:%M UTC"),
    )


def order_line_to_dto(line: OrderLine) -> OrderLineDTO:
    return OrderLineDTO(
        id=line.id,
        product_id=line.product_id,
        quantity=format_decimal(line.quantity),
        fulfilled=format_decimal(line.fulfilled_quantity),
        outstanding=format_decimal(line.outstanding_quantity),
        unit_price=format_decimal(line.unit_price),
        discount_rate=format_decimal(line.discount_rate),
        amount=format_decimal(line.amount),
        status=line.status.value,
    )


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,
        order_no=order.order_no,
        kind=order.kind.value,
        counterparty_id=order.counterparty_id,
        status=order.status.value,
        lines=[order_line_to_dto(line) for line in order.lines],
        total=format_decimal(order.total),
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
    )


def document_to_dto(document: FulfillmentDocument) -> DocumentDTO:
    return DocumentDTO(
        id=document.id,
        document_no=document.document_no,
        kind=document.kind.value,
        order_id=document.order_id,
        counterparty_id=document.counterparty_id,
        warehouse_id=document.warehouse_id,
        operator=document.operator,
        status=document.status.value,
        document_date=document.document_date.isoformat(),
        lines=[
            DocumentLineDTO(
                id=line.id,
                product_id=line.product_id,
                order_line_id=line.order_line_id or "",
                quantity=format_decimal(line.quantity),
                unit_price=format_decimal(line.unit_price),
                amount=format_decimal(line.amount),
            )
            for line in document.lines
        ],
        total_quantity=format_decimal(document.total_quantity),
        total_amount=format_decimal(document.total_amount),
    )
