"""Application services for inventory location housekeeping.

Stock thresholds, bin moves and closing a location.  None of these move
stock, so only the bin move leaves a transaction behind.
"""

from __future__ import annotations

import structlog

from heavyims.application.dto import InventoryDTO
from heavyims.application.lookups import load_inventory
from heavyims.application.unit_of_work import AbstractUnitOfWork

logger = structlog.get_logger(__name__)


class UpdateStockLevelsHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        inventory_id: str,
        minimum_stock_level: int,
        maximum_stock_level: int,
        reorder_quantity: int,
    ) -> InventoryDTO:
        with self._uow as uow:
            inventory = load_inventory(uow, inventory_id)
            inventory.update_stock_levels(minimum_stock_level, maximum_stock_level, reorder_quantity)
            uow.inventory.update(inventory)
            uow.commit()

        logger.info(
            "Stock levels updated",
            inventory_id=inventory_id,
            minimum=minimum_stock_level,
            maximum=maximum_stock_level,
        )
        return InventoryDTO.from_domain(inventory)


class MoveInventoryHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, inventory_id: str, new_bin_location: str, moved_by: str) -> InventoryDTO:
        with self._uow as uow:
            inventory = load_inventory(uow, inventory_id)
            inventory.move_to_bin_location(new_bin_location, moved_by)
            uow.inventory.update(inventory)
            uow.commit()

        logger.info("Inventory moved", inventory_id=inventory_id, bin_location=inventory.bin_location)
        return InventoryDTO.from_domain(inventory)


class DeactivateInventoryHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, inventory_id: str) -> None:
        with self._uow as uow:
            inventory = load_inventory(uow, inventory_id)
            inventory.deactivate()
            uow.inventory.update(inventory)
            uow.commit()

        logger.info("Inventory location deactivated", inventory_id=inventory_id)
