"""JSON-file-backed implementation of DocumentRepository.

Receipts and deliveries share one file and one ID sequence; the ``kind``
field tells them apart.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from ims.domain.model.document import (
    DocumentKind,
    DocumentLine,
    DocumentStatus,
    FulfillmentDocument,
)
from ims.domain.repository.document_repository import DocumentRepository
from ims.infrastructure.persistence.json_file import JsonFile, dt, dt_str


class JsonDocumentRepository(DocumentRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    def next_id(self) -> int:
        documents = self._file.load()
        if not documents:
            return 1
        return max(d["id"] for d in documents) + 1

    def get_by_id(self, document_id: int) -> FulfillmentDocument | None:
        for raw in self._file.load():
            if raw["id"] == document_id:
                return self._to_domain(raw)
        return None

    def list_by_kind(self, kind: DocumentKind) -> list[FulfillmentDocument]:
        return [self._to_domain(raw) for raw in self._file.load() if raw["kind"] == kind.value]

    def save(self, document: FulfillmentDocument) -> None:
        documents = self._file.load()
        replaced = False
        for i, raw in enumerate(documents):
            if raw["id"] == document.id:
                documents[i] = self._to_raw(document)
                replaced = True
                break
        if not replaced:
            documents.append(self._to_raw(document))
        self._file.persist(documents)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(document: FulfillmentDocument) -> dict:
        return {
            "id": document.id,
            "document_no": document.document_no,
            "kind": document.kind.value,
            "order_id": document.order_id,
            "counterparty_id": document.counterparty_id,
            "warehouse_id": document.warehouse_id,
            "operator": document.operator,
            "document_date": document.document_date.isoformat(),
            "status": document.status.value,
            "total_quantity": str(document.total_quantity),
            "total_amount": str(document.total_amount),
            "remark": document.remark,
            "created_at": document.created_at.isoformat(),
            "confirmed_at": dt_str(document.confirmed_at),
            "next_line_id": document.next_line_id,
            "lines": [
                {
                    "id": line.id,
                    "product_id": line.product_id,
                    "order_line_id": line.order_line_id,
                    "quantity": str(line.quantity),
                    "unit_price": str(line.unit_price),
                }
                for line in document.lines
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> FulfillmentDocument:
        next_line_id = raw.get("next_line_id")
        if next_line_id is None:
            next_line_id = max((line["id"] for line in raw["lines"]), default=0) + 1
        return FulfillmentDocument(
            id=raw["id"],
            document_no=raw["document_no"],
            kind=DocumentKind(raw["kind"]),
            order_id=raw["order_id"],
            counterparty_id=raw["counterparty_id"],
            warehouse_id=raw["warehouse_id"],
            operator=raw["operator"],
            document_date=date.fromisoformat(raw["document_date"]),
            status=DocumentStatus(raw["status"]),
            lines=[
                DocumentLine(
                    id=line["id"],
                    product_id=line["product_id"],
                    order_line_id=line.get("order_line_id"),
                    quantity=Decimal(line["quantity"]),
                    unit_price=Decimal(line["unit_price"]),
                )
                for line in raw["lines"]
            ],
            total_quantity=Decimal(raw["total_quantity"]),
            total_amount=Decimal(raw["total_amount"]),
            remark=raw.get("remark"),
            created_at=datetime.fromisoformat(raw["created_at"]),
            confirmed_at=dt(raw.get("confirmed_at")),
            next_line_id=next_line_id,
        )
