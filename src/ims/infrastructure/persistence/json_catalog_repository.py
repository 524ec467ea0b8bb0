"""JSON-file-backed implementations of ProductRepository and WarehouseRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from ims.domain.model.catalog import Product, Warehouse
from ims.domain.repository.catalog_repository import ProductRepository, WarehouseRepository
from ims.infrastructure.persistence.json_file import JsonFile


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        return self._load().get(product_id)

    def get_by_sku(self, sku: str) -> Product | None:
        for product in self._load().values():
            if product.sku.lower() == sku.lower():
                return product
        return None

    def list_all(self) -> list[Product]:
        return list(self._load().values())

    def save(self, product: Product) -> None:
        products = self._load()
        products[product.id] = product
        self._file.persist([self._to_raw(p) for p in products.values()])

    # --- Serialization --------------------------------------------------------

    def _load(self) -> dict[str, Product]:
        return {raw["id"]: self._to_domain(raw) for raw in self._file.load()}

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "sku": product.sku,
            "name": product.name,
            "min_stock": str(product.min_stock),
            "max_stock": str(product.max_stock),
            "purchase_price": str(product.purchase_price),
            "sale_price": str(product.sale_price),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        return Product(
            id=raw["id"],
            sku=raw["sku"],
            name=raw["name"],
            min_stock=Decimal(raw["min_stock"]),
            max_stock=Decimal(raw["max_stock"]),
            purchase_price=Decimal(raw.get("purchase_price", "0")),
            sale_price=Decimal(raw.get("sale_price", "0")),
        )


class JsonWarehouseRepository(WarehouseRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    def get_by_id(self, warehouse_id: str) -> Warehouse | None:
        for raw in self._file.load():
            if raw["id"] == warehouse_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Warehouse]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, warehouse: Warehouse) -> None:
        records = self._file.load()
        replaced = False
        for i, raw in enumerate(records):
            if raw["id"] == warehouse.id:
                records[i] = self._to_raw(warehouse)
                replaced = True
                break
        if not replaced:
            records.append(self._to_raw(warehouse))
        self._file.persist(records)

    @staticmethod
    def _to_raw(warehouse: Warehouse) -> dict:
        return {
            "id": warehouse.id,
            "code": warehouse.code,
            "name": warehouse.name,
            "is_default": warehouse.is_default,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Warehouse:
        return Warehouse(
            id=raw["id"],
            code=raw["code"],
            name=raw["name"],
            is_default=raw.get("is_default", False),
        )
