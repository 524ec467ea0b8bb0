"""CLI commands for purchase and sales orders."""

from __future__ import annotations

import click

from ims.application.dto import OrderDTO, OrderLineSpec
from ims.application.place_order import PlaceOrderHandler
from ims.application.show_order import ShowOrderHandler
from ims.domain.exceptions import DomainException
from ims.domain.model.order import OrderKind
from ims.infrastructure.bootstrap import (
    fulfillment_tracker,
    order_repository,
    product_repository,
)


def _parse_lines(raw: str) -> list[OrderLineSpec]:
    """Parse '1:10,2:5:19.99' (product:qty[:price]) into OrderLineSpec list."""
    specs: list[OrderLineSpec] = []
    for entry in raw.split(","):
        entry = entry.strip()
        parts = [p.strip() for p in entry.split(":")]
        if len(parts) not in (2, 3) or not all(parts):
            raise click.BadParameter(
                f"Invalid line format '{entry}'. Expected 'ProductID:Quantity[:Price]'."
            )
        specs.append(
            OrderLineSpec(
                product_id=parts[0],
                quantity=parts[1],
                unit_price=parts[2] if len(parts) == 3 else None,
            )
        )
    return specs


def _display_order(dto: OrderDTO) -> None:
    click.echo(f"Order {dto.order_no} #{dto.id}  ({dto.kind}, status={dto.status})")
    click.echo(f"Counterparty: {dto.counterparty_id}")
    click.echo(f"Created:      {dto.created_at}")
    click.echo()
    click.echo(
        f"  {'Line':<8} {'Product':<10} {'Qty':>8} {'Done':>8} {'Open':>8} "
        f"{'Price':>10} {'Amount':>12} {'Status':<10}"
    )
    click.echo(f"  {'-'*82}")
    for line in dto.lines:
        click.echo(
            f"  {line.id:<8} {line.product_id:<10} {line.quantity:>8} {line.fulfilled:>8} "
            f"{line.outstanding:>8} {line.unit_price:>10} {line.amount:>12} {line.status:<10}"
        )
    click.echo(f"  {'-'*82}")
    click.echo(f"  {'Order Total':<48} {dto.total:>21}")


@click.command("create")
@click.option(
    "--kind",
    type=click.Choice(["purchase", "sales"], case_sensitive=False),
    required=True,
    help="Purchase order (from a supplier) or sales order (to a customer).",
)
@click.option("--counterparty", required=True, help="Supplier or customer ID.")
@click.option("--lines", required=True, help="Lines as 'ProductID:Qty[:Price],...'.")
@click.option("--creator", default="", help="Who placed the order.")
def order_create(kind: str, counterparty: str, lines: str, creator: str) -> None:
    """Place a new purchase or sales order."""
    specs = _parse_lines(lines)

    handler = PlaceOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
    )

    try:
        dto = handler.handle(
            kind=OrderKind(kind.upper()),
            counterparty_id=counterparty,
            line_specs=specs,
            creator=creator,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_no} #{dto.id} created")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show an order with per-line fulfillment."""
    handler = ShowOrderHandler(order_repo=order_repository(), tracker=fulfillment_tracker())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("outstanding")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
def order_outstanding(order_id: int) -> None:
    """List the order lines that are not yet fully fulfilled."""
    handler = ShowOrderHandler(order_repo=order_repository(), tracker=fulfillment_tracker())

    try:
        lines = handler.outstanding(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo(f"Order #{order_id} is fully fulfilled.")
        return

    click.echo(f"{'Line':<8} {'Product':<10} {'Ordered':>8} {'Done':>8} {'Open':>8}")
    click.echo("-" * 46)
    for line in lines:
        click.echo(
            f"{line.id:<8} {line.product_id:<10} {line.quantity:>8} "
            f"{line.fulfilled:>8} {line.outstanding:>8}"
        )
