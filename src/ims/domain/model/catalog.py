"""Catalog Reference — products and warehouses.

Both live independently of the ledger. The ledger only reads them: a
product supplies the reorder thresholds used for low-stock
classification, a warehouse only has to exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ims.domain.exceptions import ValidationError
from ims.domain.model.value_objects import ZERO

DEFAULT_MIN_STOCK = Decimal("10")
DEFAULT_MAX_STOCK = Decimal("1000")


@dataclass
class Product:
    """A product in the catalog."""

    id: str
    sku: str
    name: str
    min_stock: Decimal = DEFAULT_MIN_STOCK
    max_stock: Decimal = DEFAULT_MAX_STOCK
    purchase_price: Decimal = ZERO
    sale_price: Decimal = ZERO

    @staticmethod
    def create(
        id: str,
        sku: str,
        name: str,
        min_stock: Decimal = DEFAULT_MIN_STOCK,
        max_stock: Decimal = DEFAULT_MAX_STOCK,
        purchase_price: Decimal = ZERO,
        sale_price: Decimal = ZERO,
    ) -> Product:
        """Create a new product, enforcing catalog rules."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if not sku or not sku.strip():
            raise ValidationError("Product SKU is required")
        if min_stock < ZERO or max_stock < ZERO:
            raise ValidationError("Stock thresholds cannot be negative")
        if min_stock > max_stock:
            raise ValidationError(
                f"Minimum stock {min_stock} exceeds maximum stock {max_stock}"
            )
        if purchase_price < ZERO or sale_price < ZERO:
            raise ValidationError("Product prices cannot be negative")
        return Product(
            id=id,
            sku=sku.strip(),
            name=name.strip(),
            min_stock=min_stock,
            max_stock=max_stock,
            purchase_price=purchase_price,
            sale_price=sale_price,
        )


@dataclass
class Warehouse:
    id: str
    code: str
    name: str
    is_default: bool = False
