"""CLI commands for the product and warehouse catalog."""

from __future__ import annotations

import click

from ims.application.add_product import AddProductHandler
from ims.application.add_warehouse import AddWarehouseHandler
from ims.domain.exceptions import DomainException
from ims.domain.model.value_objects import format_decimal
from ims.infrastructure.bootstrap import product_repository, warehouse_repository
from ims.infrastructure.config import get_settings


@click.command("product-add")
@click.option("--sku", required=True, help="Unique stock-keeping unit.")
@click.option("--name", required=True, help="Product name.")
@click.option("--min-stock", default=None, help="Low-stock threshold.")
@click.option("--max-stock", default=None, help="Upper stock threshold.")
@click.option("--purchase-price", default="0", show_default=True, help="Default purchase price.")
@click.option("--sale-price", default="0", show_default=True, help="Default sale price.")
def product_add(
    sku: str,
    name: str,
    min_stock: str | None,
    max_stock: str | None,
    purchase_price: str,
    sale_price: str,
) -> None:
    """Add a new product to the catalog."""
    settings = get_settings()
    handler = AddProductHandler(
        product_repo=product_repository(settings),
        default_min_stock=settings.DEFAULT_MIN_STOCK,
        default_max_stock=settings.DEFAULT_MAX_STOCK,
    )

    try:
        product = handler.handle(
            sku=sku,
            name=name,
            min_stock=min_stock,
            max_stock=max_stock,
            purchase_price=purchase_price,
            sale_price=sale_price,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' ({product.sku}) added")


@click.command("product-list")
def product_list() -> None:
    """List all products in the catalog."""
    products = product_repository().list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(
        f"{'ID':<6} {'SKU':<12} {'Name':<20} {'Min':>6} {'Max':>6} {'Buy':>10} {'Sell':>10}"
    )
    click.echo("-" * 76)
    for p in products:
        click.echo(
            f"{p.id:<6} {p.sku:<12} {p.name:<20} "
            f"{format_decimal(p.min_stock):>6} {format_decimal(p.max_stock):>6} "
            f"{format_decimal(p.purchase_price):>10} {format_decimal(p.sale_price):>10}"
        )


@click.command("warehouse-add")
@click.option("--code", required=True, help="Warehouse code, also used as its ID.")
@click.option("--name", required=True, help="Warehouse name.")
@click.option("--default", "is_default", is_flag=True, default=False, help="Make this the default warehouse.")
def warehouse_add(code: str, name: str, is_default: bool) -> None:
    """Register a warehouse."""
    handler = AddWarehouseHandler(warehouse_repo=warehouse_repository())

    try:
        warehouse = handler.handle(code=code, name=name, is_default=is_default)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    suffix = " (default)" if warehouse.is_default else ""
    click.echo(f"Warehouse {warehouse.id} '{warehouse.name}' added{suffix}")


@click.command("warehouse-list")
def warehouse_list() -> None:
    """List all warehouses."""
    warehouses = warehouse_repository().list_all()

    if not warehouses:
        click.echo("No warehouses found.")
        return

    click.echo(f"{'Code':<10} {'Name':<24} {'Default':>8}")
    click.echo("-" * 44)
    for w in warehouses:
        click.echo(f"{w.code:<10} {w.name:<24} {'yes' if w.is_default else '':>8}")
