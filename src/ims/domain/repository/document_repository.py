"""Abstract repository for receipts and deliveries."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.document import DocumentKind, FulfillmentDocument


class DocumentRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique document ID."""

    @abstractmethod
    def get_by_id(self, document_id: int) -> FulfillmentDocument | None:
        """Return a document by its ID, or None if not found."""

    @abstractmethod
    def list_by_kind(self, kind: DocumentKind) -> list[FulfillmentDocument]:
        """Return every document of *kind*."""

    @abstractmethod
    def save(self, document: FulfillmentDocument) -> None:
        """Persist a new or updated document."""
