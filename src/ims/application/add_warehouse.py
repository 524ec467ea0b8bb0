"""Application service: Add Warehouse use case."""

from __future__ import annotations

from ims.domain.exceptions import ValidationError
from ims.domain.model.catalog import Warehouse
from ims.domain.repository.catalog_repository import WarehouseRepository


class AddWarehouseHandler:

    def __init__(self, warehouse_repo: WarehouseRepository) -> None:
        self._warehouse_repo = warehouse_repo

    def handle(self, code: str, name: str, is_default: bool = False) -> Warehouse:
        """Register a warehouse. The warehouse code doubles as its ID."""
        if not code or not code.strip():
            raise ValidationError("Warehouse code is required")
        if not name or not name.strip():
            raise ValidationError("Warehouse name is required")

        code = code.strip().upper()
        if self._warehouse_repo.get_by_id(code) is not None:
            raise ValidationError(f"Warehouse '{code}' already exists")

        # Only one default warehouse at a time
        if is_default:
            for other in self._warehouse_repo.list_all():
                if other.is_default:
                    other.is_default = False
                    self._warehouse_repo.save(other)

        warehouse = Warehouse(id=code, code=code, name=name.strip(), is_default=is_default)
        self._warehouse_repo.save(warehouse)
        return warehouse
