import click

from ims.infrastructure.cli.catalog_commands import (
    product_add,
    product_list,
    warehouse_add,
    warehouse_list,
)
from ims.infrastructure.cli.document_commands import delivery_commands, receipt_commands
from ims.infrastructure.cli.order_commands import order_create, order_outstanding, order_show
from ims.infrastructure.cli.report_commands import report_movement, report_summary, report_top
from ims.infrastructure.cli.stock_commands import (
    stock_adjust,
    stock_empty,
    stock_in,
    stock_low,
    stock_out,
    stock_release,
    stock_reserve,
    stock_show,
    stock_thresholds,
    stock_transactions,
    stock_verify,
)
from ims.infrastructure.config import get_settings
from ims.infrastructure.logging_setup import setup_logging


@click.group()
def cli() -> None:
    """IMS — Inventory Management System"""
    setup_logging(get_settings())


@cli.group()
def catalog() -> None:
    """Manage products and warehouses."""


@cli.group()
def stock() -> None:
    """Move, reserve and inspect stock."""


@cli.group()
def order() -> None:
    """Manage purchase and sales orders."""


@cli.group()
def receipt() -> None:
    """Receive goods against purchase orders."""


@cli.group()
def delivery() -> None:
    """Deliver goods against sales orders."""


@cli.group()
def report() -> None:
    """Inventory reports."""


# Register subcommands
catalog.add_command(product_add)
catalog.add_command(product_list)
catalog.add_command(warehouse_add)
catalog.add_command(warehouse_list)
stock.add_command(stock_in)
stock.add_command(stock_out)
stock.add_command(stock_adjust)
stock.add_command(stock_reserve)
stock.add_command(stock_release)
stock.add_command(stock_thresholds)
stock.add_command(stock_show)
stock.add_command(stock_transactions)
stock.add_command(stock_low)
stock.add_command(stock_empty)
stock.add_command(stock_verify)
order.add_command(order_create)
order.add_command(order_show)
order.add_command(order_outstanding)
for command in receipt_commands:
    receipt.add_command(command)
for command in delivery_commands:
    delivery.add_command(command)
report.add_command(report_summary)
report.add_command(report_top)
report.add_command(report_movement)
