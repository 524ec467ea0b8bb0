"""Abstract repository for the Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_line_id(self, order_line_id: str) -> Order | None:
        """Return the order owning *order_line_id*, or None."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order."""
