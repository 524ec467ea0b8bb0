"""CLI commands for inventory reports."""

from __future__ import annotations

from datetime import datetime

import click

from ims.application.dto import transaction_to_dto
from ims.domain.exceptions import DomainException
from ims.domain.model.document import DocumentKind
from ims.domain.model.value_objects import format_decimal
from ims.infrastructure.bootstrap import report_service
from ims.infrastructure.cli.stock_commands import as_utc


@click.command("summary")
def report_summary() -> None:
    """Show headline stock figures and document counts."""
    service = report_service()
    summary = service.summary()

    click.echo(f"{'Balances':<22} {summary.total_balances:>14}")
    click.echo(f"{'Stock value':<22} {format_decimal(summary.total_value):>14}")
    click.echo(f"{'Low stock':<22} {summary.low_stock_count:>14}")
    click.echo(f"{'Out of stock':<22} {summary.out_of_stock_count:>14}")
    click.echo(f"{'Transactions':<22} {summary.total_transactions:>14}")

    for kind in DocumentKind:
        stats = service.document_stats(kind)
        counts = ", ".join(
            f"{status.value.lower()}={count}" for status, count in sorted(
                stats.by_status.items(), key=lambda item: item[0].value
            )
        )
        click.echo()
        click.echo(f"{kind.value.title()} documents: {stats.total}" + (f" ({counts})" if counts else ""))
        click.echo(f"  quantity {format_decimal(stats.total_quantity)}, value {format_decimal(stats.total_value)}")


@click.command("top")
@click.option("-n", "limit", default=10, show_default=True, type=int, help="How many balances.")
def report_top(limit: int) -> None:
    """Rank balances by stock value."""
    balances = report_service().top_products_by_value(limit)

    if not balances:
        click.echo("No stock balances found.")
        return

    click.echo(f"{'Rank':<5} {'Product':<10} {'Warehouse':<10} {'Current':>10} {'Avg cost':>12} {'Value':>14}")
    click.echo("-" * 66)
    for rank, b in enumerate(balances, start=1):
        click.echo(
            f"{rank:<5} {b.product_id:<10} {b.warehouse_id:<10} "
            f"{format_decimal(b.current_stock):>10} {format_decimal(b.avg_cost):>12} "
            f"{format_decimal(b.stock_value):>14}"
        )


@click.command("movement")
@click.option("--start", type=click.DateTime(), required=True, help="From this time (UTC).")
@click.option("--end", type=click.DateTime(), required=True, help="Up to this time (UTC).")
def report_movement(start: datetime, end: datetime) -> None:
    """Summarize stock movements in a time window."""
    try:
        report = report_service().movement_report(as_utc(start), as_utc(end))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for t in map(transaction_to_dto, report.transactions):
        click.echo(f"{t.created_at:<20} {t.transaction_no:<16} {t.type:<7} {t.product_id:<10} {t.quantity:>8}")
    if report.transactions:
        click.echo("-" * 66)

    s = report.summary
    click.echo(f"In:     {format_decimal(s.total_in):>10}  value {format_decimal(s.value_in)}")
    click.echo(f"Out:    {format_decimal(s.total_out):>10}  value {format_decimal(s.value_out)}")
    click.echo(f"Adjust: {format_decimal(s.total_adjust):>10}")
