"""Application service: Add Product use case."""

from __future__ import annotations

from decimal import Decimal

from ims.domain.exceptions import ValidationError
from ims.domain.model.catalog import DEFAULT_MAX_STOCK, DEFAULT_MIN_STOCK, Product
from ims.domain.model.value_objects import to_decimal
from ims.domain.repository.catalog_repository import ProductRepository


class AddProductHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        default_min_stock: Decimal = DEFAULT_MIN_STOCK,
        default_max_stock: Decimal = DEFAULT_MAX_STOCK,
    ) -> None:
        self._product_repo = product_repo
        self._default_min_stock = default_min_stock
        self._default_max_stock = default_max_stock

    def handle(
        self,
        sku: str,
        name: str,
        min_stock: str | None = None,
        max_stock: str | None = None,
        purchase_price: str = "0",
        sale_price: str = "0",
    ) -> Product:
        """Add a new product to the catalog.

        Thresholds left unset fall back to the configured defaults.
        """
        if sku and self._product_repo.get_by_sku(sku.strip()) is not None:
            raise ValidationError(f"Product with SKU '{sku}' already exists")

        # Auto-assign ID based on existing products
        all_products = self._product_repo.list_all()
        if all_products:
            next_id = str(max(int(p.id) for p in all_products) + 1)
        else:
            next_id = "1"

        product = Product.create(
            id=next_id,
            sku=sku,
            name=name,
            min_stock=self._default_min_stock if min_stock is None else to_decimal(min_stock, "min stock"),
            max_stock=self._default_max_stock if max_stock is None else to_decimal(max_stock, "max stock"),
            purchase_price=to_decimal(purchase_price, "purchase price"),
            sale_price=to_decimal(sale_price, "sale price"),
        )
        self._product_repo.save(product)
        return product
