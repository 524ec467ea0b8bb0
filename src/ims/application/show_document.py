"""Application service: Show Document use case (query)."""

from __future__ import annotations

from ims.application.dto import DocumentDTO, document_to_dto
from ims.domain.service.fulfillment_workflow import FulfillmentWorkflow


class ShowDocumentHandler:

    def __init__(self, workflow: FulfillmentWorkflow) -> None:
        self._workflow = workflow

    def handle(self, document_id: int) -> DocumentDTO:
        return document_to_dto(self._workflow.get_document(document_id))

    def list_for_order(self, order_id: int) -> list[DocumentDTO]:
        return [document_to_dto(d) for d in self._workflow.find_documents(order_id=order_id)]
