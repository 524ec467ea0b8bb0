"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions. File locations and
ledger policy come from :class:`~ims.infrastructure.config.Settings`.

There is one StockLedger per data directory, so every workflow and
handler in the process serializes on the same lock.
"""

from __future__ import annotations

import threading
from pathlib import Path

from ims.application.inventory_report import InventoryReportService
from ims.domain.service.fulfillment_tracker import FulfillmentTracker
from ims.domain.service.fulfillment_workflow import DeliveryWorkflow, ReceivingWorkflow
from ims.domain.service.stock_ledger import StockLedger
from ims.infrastructure.config import Settings, get_settings
from ims.infrastructure.persistence.json_catalog_repository import (
    JsonProductRepository,
    JsonWarehouseRepository,
)
from ims.infrastructure.persistence.json_document_repository import JsonDocumentRepository
from ims.infrastructure.persistence.json_order_repository import JsonOrderRepository
from ims.infrastructure.persistence.json_stock_repository import (
    JsonStockBalanceRepository,
    JsonStockTransactionRepository,
)


def product_repository(settings: Settings | None = None) -> JsonProductRepository:
    settings = settings or get_settings()
    return JsonProductRepository(settings.DATA_DIR / "products.json")


def warehouse_repository(settings: Settings | None = None) -> JsonWarehouseRepository:
    settings = settings or get_settings()
    return JsonWarehouseRepository(settings.DATA_DIR / "warehouses.json")


def order_repository(settings: Settings | None = None) -> JsonOrderRepository:
    settings = settings or get_settings()
    return JsonOrderRepository(settings.DATA_DIR / "orders.json")


def document_repository(settings: Settings | None = None) -> JsonDocumentRepository:
    settings = settings or get_settings()
    return JsonDocumentRepository(settings.DATA_DIR / "documents.json")


_ledgers: dict[Path, StockLedger] = {}
_ledgers_lock = threading.Lock()


def stock_ledger(settings: Settings | None = None) -> StockLedger:
    settings = settings or get_settings()
    data_dir = Path(settings.DATA_DIR).resolve()
    with _ledgers_lock:
        ledger = _ledgers.get(data_dir)
        if ledger is None:
            ledger = StockLedger(
                balance_repo=JsonStockBalanceRepository(data_dir / "balances.json"),
                transaction_repo=JsonStockTransactionRepository(data_dir / "transactions.json"),
                product_repo=product_repository(settings),
                warehouse_repo=warehouse_repository(settings),
            )
            _ledgers[data_dir] = ledger
        return ledger


def fulfillment_tracker(settings: Settings | None = None) -> FulfillmentTracker:
    settings = settings or get_settings()
    return FulfillmentTracker(
        order_repo=order_repository(settings),
        allow_over_fulfillment=settings.ALLOW_OVER_FULFILLMENT,
    )


def receiving_workflow(settings: Settings | None = None) -> ReceivingWorkflow:
    settings = settings or get_settings()
    return ReceivingWorkflow(
        document_repo=document_repository(settings),
        order_repo=order_repository(settings),
        ledger=stock_ledger(settings),
        tracker=fulfillment_tracker(settings),
    )


def delivery_workflow(settings: Settings | None = None) -> DeliveryWorkflow:
    settings = settings or get_settings()
    return DeliveryWorkflow(
        document_repo=document_repository(settings),
        order_repo=order_repository(settings),
        ledger=stock_ledger(settings),
        tracker=fulfillment_tracker(settings),
    )


def report_service(settings: Settings | None = None) -> InventoryReportService:
    settings = settings or get_settings()
    return InventoryReportService(
        ledger=stock_ledger(settings),
        document_repo=document_repository(settings),
    )
