"""Abstract repositories for the catalog (products and warehouses).

Defined in the domain layer so the ledger never depends on
infrastructure. The ledger only ever reads through these.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.catalog import Product, Warehouse


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Product | None:
        """Return a product by its SKU, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""


class WarehouseRepository(ABC):

    @abstractmethod
    def get_by_id(self, warehouse_id: str) -> Warehouse | None:
        """Return a warehouse by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Warehouse]:
        """Return every warehouse."""

    @abstractmethod
    def save(self, warehouse: Warehouse) -> None:
        """Persist a new or updated warehouse."""
