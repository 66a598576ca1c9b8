"""Abstract repository for the Inventory aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from heavyims.domain.model.inventory import Inventory
from heavyims.domain.repository.tracking import TrackingRepository


class InventoryRepository(TrackingRepository[Inventory], ABC):

    @abstractmethod
    def get_by_id(self, inventory_id: str) -> Inventory | None:
        """Return an inventory location with its transactions, or None."""

    @abstractmethod
    def get_by_part_and_warehouse(self, part_id: str, warehouse: str) -> Inventory | None:
        """Return the single location stocking a part at a warehouse, or None."""

    @abstractmethod
    def list_by_part(self, part_id: str) -> list[Inventory]:
        """Return every location stocking a part, ordered by warehouse."""

    @abstractmethod
    def list_by_warehouse(self, warehouse: str) -> list[Inventory]:
        """Return every location in a warehouse."""

    @abstractmethod
    def list_all(self) -> list[Inventory]:
        """Return every inventory location."""

    @abstractmethod
    def add(self, inventory: Inventory) -> None:
        """Register a new inventory location."""

    @abstractmethod
    def update(self, inventory: Inventory) -> None:
        """Mark an existing location as changed."""
