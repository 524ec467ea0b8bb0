"""CLI commands for the stock ledger."""

from __future__ import annotations

from datetime import datetime, timezone

import click

from ims.application.dto import BalanceDTO, MovementDTO, balance_to_dto
from ims.application.record_stock_movement import RecordStockMovementHandler
from ims.application.reserve_stock import ReserveStockHandler
from ims.application.set_thresholds import SetThresholdsHandler
from ims.application.show_stock import ShowStockHandler
from ims.application.show_transactions import ShowTransactionsHandler
from ims.domain.exceptions import DomainException
from ims.infrastructure.bootstrap import stock_ledger


def as_utc(value: datetime | None) -> datetime | None:
    """click.DateTime yields naive values; the ledger stores UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _echo_balances(balances: list[BalanceDTO]) -> None:
    click.echo(
        f"{'Product':<10} {'Warehouse':<10} {'Current':>10} {'Reserved':>10} "
        f"{'Available':>10} {'Avg cost':>12} {'Value':>12}"
    )
    click.echo("-" * 80)
    for b in balances:
        click.echo(
            f"{b.product_id:<10} {b.warehouse_id:<10} {b.current:>10} {b.reserved:>10} "
            f"{b.available:>10} {b.avg_cost:>12} {b.value:>12}"
        )


def _echo_movement(dto: MovementDTO) -> None:
    t, b = dto.transaction, dto.balance
    click.echo(f"{t.transaction_no}: {t.type} {t.quantity} of {t.product_id} @ {t.warehouse_id}")
    click.echo(
        f"  current={b.current}  reserved={b.reserved}  available={b.available}  "
        f"avg_cost={b.avg_cost}"
    )


def _movement_options(func):
    func = click.option("--remark", default=None, help="Free-text note.")(func)
    func = click.option("--operator", required=True, help="Who performed the movement.")(func)
    func = click.option("--price", default="0", show_default=True, help="Unit price.")(func)
    func = click.option("--warehouse", required=True, help="Warehouse code.")(func)
    func = click.option("--product", required=True, help="Product ID.")(func)
    return func


@click.command("in")
@_movement_options
@click.option("--quantity", required=True, help="Quantity received.")
def stock_in(
    product: str, warehouse: str, price: str, operator: str, remark: str | None, quantity: str
) -> None:
    """Receive stock into a warehouse."""
    handler = RecordStockMovementHandler(ledger=stock_ledger())

    try:
        dto = handler.stock_in(product, warehouse, quantity, price, operator, remark)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_movement(dto)


@click.command("out")
@_movement_options
@click.option("--quantity", required=True, help="Quantity issued.")
def stock_out(
    product: str, warehouse: str, price: str, operator: str, remark: str | None, quantity: str
) -> None:
    """Issue unreserved stock from a warehouse."""
    handler = RecordStockMovementHandler(ledger=stock_ledger())

    try:
        dto = handler.stock_out(product, warehouse, quantity, price, operator, remark)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_movement(dto)


@click.command("adjust")
@_movement_options
@click.option("--to", "new_quantity", required=True, help="Counted stock level.")
def stock_adjust(
    product: str, warehouse: str, price: str, operator: str, remark: str | None, new_quantity: str
) -> None:
    """Set the stock level after a physical count."""
    handler = RecordStockMovementHandler(ledger=stock_ledger())

    try:
        dto = handler.adjust(product, warehouse, new_quantity, price, operator, remark)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_movement(dto)


@click.command("reserve")
@click.option("--product", required=True, help="Product ID.")
@click.option("--warehouse", required=True, help="Warehouse code.")
@click.option("--quantity", required=True, help="Quantity to reserve.")
def stock_reserve(product: str, warehouse: str, quantity: str) -> None:
    """Set stock aside so it can no longer be issued."""
    handler = ReserveStockHandler(ledger=stock_ledger())

    try:
        b = handler.reserve(product, warehouse, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Reserved {quantity} of {product} @ {warehouse} (available={b.available})")


@click.command("release")
@click.option("--product", required=True, help="Product ID.")
@click.option("--warehouse", required=True, help="Warehouse code.")
@click.option("--quantity", required=True, help="Quantity to release.")
def stock_release(product: str, warehouse: str, quantity: str) -> None:
    """Return reserved stock to available."""
    handler = ReserveStockHandler(ledger=stock_ledger())

    try:
        b = handler.release(product, warehouse, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Released {quantity} of {product} @ {warehouse} (available={b.available})")


@click.command("thresholds")
@click.option("--product", required=True, help="Product ID.")
@click.option("--warehouse", required=True, help="Warehouse code.")
@click.option("--min", "min_stock", default=None, help="New minimum stock.")
@click.option("--max", "max_stock", default=None, help="New maximum stock.")
def stock_thresholds(
    product: str, warehouse: str, min_stock: str | None, max_stock: str | None
) -> None:
    """Override the reorder thresholds of one balance."""
    if min_stock is None and max_stock is None:
        raise click.UsageError("Give --min, --max or both.")

    handler = SetThresholdsHandler(ledger=stock_ledger())

    try:
        b = handler.handle(product, warehouse, min_stock, max_stock)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Thresholds of {product} @ {warehouse}: min={b.min_stock} max={b.max_stock}")


@click.command("show")
@click.option("--product", default=None, help="Only this product.")
@click.option("--warehouse", default=None, help="Only this warehouse.")
def stock_show(product: str | None, warehouse: str | None) -> None:
    """Show stock balances."""
    balances = ShowStockHandler(ledger=stock_ledger()).handle(product, warehouse)

    if not balances:
        click.echo("No stock balances found.")
        return

    _echo_balances(balances)


@click.command("transactions")
@click.option("--product", default=None, help="Only this product.")
@click.option("--warehouse", default=None, help="Only this warehouse.")
@click.option("--type", "type_", default=None, help="IN, OUT or ADJUST.")
@click.option("--start", type=click.DateTime(), default=None, help="From this time (UTC).")
@click.option("--end", type=click.DateTime(), default=None, help="Up to this time (UTC).")
def stock_transactions(
    product: str | None,
    warehouse: str | None,
    type_: str | None,
    start: datetime | None,
    end: datetime | None,
) -> None:
    """List ledger transactions, oldest first."""
    handler = ShowTransactionsHandler(ledger=stock_ledger())

    try:
        transactions = handler.handle(product, warehouse, type_, as_utc(start), as_utc(end))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(
        f"{'No':<16} {'Type':<7} {'Product':<10} {'Warehouse':<10} {'Qty':>8} "
        f"{'Price':>10} {'Reference':<14} {'When':<20}"
    )
    click.echo("-" * 100)
    for t in transactions:
        click.echo(
            f"{t.transaction_no:<16} {t.type:<7} {t.product_id:<10} {t.warehouse_id:<10} "
            f"{t.quantity:>8} {t.unit_price:>10} {t.reference:<14} {t.created_at:<20}"
        )


@click.command("low")
def stock_low() -> None:
    """Show balances at or below their product's minimum stock."""
    balances = [balance_to_dto(b) for b in stock_ledger().list_low_stock()]

    if not balances:
        click.echo("No low-stock balances.")
        return

    _echo_balances(balances)


@click.command("empty")
def stock_empty() -> None:
    """Show balances with no stock left."""
    balances = [balance_to_dto(b) for b in stock_ledger().list_out_of_stock()]

    if not balances:
        click.echo("No out-of-stock balances.")
        return

    _echo_balances(balances)


@click.command("verify")
@click.option("--product", default=None, help="Only this product.")
@click.option("--warehouse", default=None, help="Only this warehouse.")
def stock_verify(product: str | None, warehouse: str | None) -> None:
    """Replay the transaction log and compare it with the balances."""
    try:
        stock_ledger().verify_consistency(product, warehouse)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Ledger is consistent.")
