"""CLI commands for purchase receipts and sales deliveries.

Both document types share one command set; each group is built from a
workflow factory and differs only in the name of its final step
(``confirm`` for receipts, ``complete`` for deliveries) and in the
delivery-only ``ship`` step.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import click

from ims.application.dto import DocumentDTO
from ims.application.show_document import ShowDocumentHandler
from ims.domain.exceptions import DomainException
from ims.domain.service.fulfillment_workflow import DeliveryWorkflow, FulfillmentWorkflow
from ims.infrastructure.bootstrap import delivery_workflow, receiving_workflow


def _display_document(dto: DocumentDTO) -> None:
    click.echo(f"{dto.kind.title()} {dto.document_no} #{dto.id}  (status={dto.status})")
    click.echo(f"Order:     #{dto.order_id}  counterparty {dto.counterparty_id}")
    click.echo(f"Warehouse: {dto.warehouse_id}  operator {dto.operator}  date {dto.document_date}")
    click.echo()
    if not dto.lines:
        click.echo("  (no lines)")
        return
    click.echo(f"  {'#':<4} {'Product':<10} {'Order line':<10} {'Qty':>8} {'Price':>10} {'Amount':>12}")
    click.echo(f"  {'-'*59}")
    for line in dto.lines:
        click.echo(
            f"  {line.id:<4} {line.product_id:<10} {line.order_line_id:<10} "
            f"{line.quantity:>8} {line.unit_price:>10} {line.amount:>12}"
        )
    click.echo(f"  {'-'*59}")
    click.echo(f"  {'Total':<26} {dto.total_quantity:>8} {dto.total_amount:>23}")


def build_document_commands(
    name: str, workflow_factory: Callable[[], FulfillmentWorkflow], final_step: str
) -> list[click.Command]:
    """Return the create/edit/confirm/cancel/show commands for one document type."""

    @click.command("create")
    @click.option("--order", "order_id", required=True, type=int, help="Order ID.")
    @click.option("--warehouse", required=True, help="Warehouse code.")
    @click.option("--operator", required=True, help="Who handles the goods.")
    @click.option("--date", "document_date", type=click.DateTime(["%Y-%m-%d"]), default=None, help="Document date (YYYY-MM-DD).")
    @click.option("--remark", default=None, help="Free-text note.")
    def create(
        order_id: int,
        warehouse: str,
        operator: str,
        document_date: datetime | None,
        remark: str | None,
    ) -> None:
        try:
            document = workflow_factory().create_document(
                order_id,
                warehouse,
                operator,
                document_date=document_date.date() if document_date else None,
                remark=remark,
            )
        except DomainException as exc:
            raise click.ClickException(str(exc))

        click.echo(f"{name.title()} {document.document_no} #{document.id} created (status=DRAFT)")

    create.help = f"Open a draft {name} against an order."

    @click.command("add-line")
    @click.option("--id", "document_id", required=True, type=int, help=f"{name.title()} ID.")
    @click.option("--product", required=True, help="Product ID.")
    @click.option("--order-line", default=None, help="Order line ID, e.g. '3-1'.")
    @click.option("--quantity", required=True, help="Quantity.")
    @click.option("--price", required=True, help="Unit price.")
    def add_line(
        document_id: int, product: str, order_line: str | None, quantity: str, price: str
    ) -> None:
        try:
            line = workflow_factory().add_line(document_id, product, order_line, quantity, price)
        except DomainException as exc:
            raise click.ClickException(str(exc))

        click.echo(f"Line {line.id} added: {line.quantity} of {line.product_id} @ {line.unit_price}")

    add_line.help = f"Add a line to a draft {name}."

    @click.command("update-line")
    @click.option("--id", "document_id", required=True, type=int, help=f"{name.title()} ID.")
    @click.option("--line", "line_id", required=True, type=int, help="Line number.")
    @click.option("--quantity", default=None, help="New quantity.")
    @click.option("--price", default=None, help="New unit price.")
    def update_line(
        document_id: int, line_id: int, quantity: str | None, price: str | None
    ) -> None:
        if quantity is None and price is None:
            raise click.UsageError("Give --quantity, --price or both.")

        try:
            line = workflow_factory().update_line(document_id, line_id, quantity, price)
        except DomainException as exc:
            raise click.ClickException(str(exc))

        click.echo(f"Line {line.id} updated: {line.quantity} of {line.product_id} @ {line.unit_price}")

    update_line.help = f"Change quantity or price of a line on a draft {name}."

    @click.command("remove-line")
    @click.option("--id", "document_id", required=True, type=int, help=f"{name.title()} ID.")
    @click.option("--line", "line_id", required=True, type=int, help="Line number.")
    def remove_line(document_id: int, line_id: int) -> None:
        try:
            workflow_factory().remove_line(document_id, line_id)
        except DomainException as exc:
            raise click.ClickException(str(exc))

        click.echo(f"Line {line_id} removed.")

    remove_line.help = f"Remove a line from a draft {name}."

    @click.command(final_step)
    @click.option("--id", "document_id", required=True, type=int, help=f"{name.title()} ID.")
    def confirm(document_id: int) -> None:
        try:
            document = workflow_factory().confirm(document_id)
        except DomainException as exc:
            raise click.ClickException(str(exc))

        click.echo(
            f"{name.title()} {document.document_no} {document.status.value.lower()}: "
            f"{len(document.lines)} lines, quantity {document.total_quantity}"
        )

    confirm.help = f"Post the {name} to stock and to its order."

    @click.command("cancel")
    @click.option("--id", "document_id", required=True, type=int, help=f"{name.title()} ID.")
    def cancel(document_id: int) -> None:
        try:
            document = workflow_factory().cancel(document_id)
        except DomainException as exc:
            raise click.ClickException(str(exc))

        click.echo(f"{name.title()} {document.document_no} cancelled.")

    cancel.help = f"Cancel a {name} that has not been posted."

    @click.command("show")
    @click.option("--id", "document_id", required=True, type=int, help=f"{name.title()} ID.")
    def show(document_id: int) -> None:
        try:
            dto = ShowDocumentHandler(workflow_factory()).handle(document_id)
        except DomainException as exc:
            raise click.ClickException(str(exc))

        _display_document(dto)

    show.help = f"Show a {name} and its lines."

    @click.command("list")
    @click.option("--order", "order_id", required=True, type=int, help="Order ID.")
    def list_(order_id: int) -> None:
        documents = ShowDocumentHandler(workflow_factory()).list_for_order(order_id)

        if not documents:
            click.echo(f"No {name} documents for order #{order_id}.")
            return

        click.echo(f"{'ID':<5} {'No':<16} {'Status':<10} {'Date':<11} {'Qty':>8} {'Amount':>12}")
        click.echo("-" * 67)
        for d in documents:
            click.echo(
                f"{d.id:<5} {d.document_no:<16} {d.status:<10} {d.document_date:<11} "
                f"{d.total_quantity:>8} {d.total_amount:>12}"
            )

    list_.help = f"List the {name} documents of an order."

    return [create, add_line, update_line, remove_line, confirm, cancel, show, list_]


@click.command("ship")
@click.option("--id", "document_id", required=True, type=int, help="Delivery ID.")
def delivery_ship(document_id: int) -> None:
    """Mark a draft delivery as shipped. Stock leaves on completion."""
    workflow: DeliveryWorkflow = delivery_workflow()

    try:
        document = workflow.ship(document_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Delivery {document.document_no} shipped.")


receipt_commands = build_document_commands("receipt", receiving_workflow, "confirm")
delivery_commands = build_document_commands("delivery", delivery_workflow, "complete") + [
    delivery_ship
]
