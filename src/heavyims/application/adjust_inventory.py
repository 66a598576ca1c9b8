"""Application service: Adjust Inventory use case (physical count correction)."""

from __future__ import annotations

import structlog

from heavyims.application.dto import InventoryDTO
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.exceptions import EntityNotFoundError

logger = structlog.get_logger(__name__)


class AdjustInventoryHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, inventory_id: str, new_quantity: int, reason: str, adjusted_by: str) -> InventoryDTO:
        with self._uow as uow:
            inventory = uow.inventory.get_by_id(inventory_id)
            if inventory is None:
                raise EntityNotFoundError(f"Inventory {inventory_id} not found")

            old_quantity = inventory.quantity_on_hand
            inventory.adjust_quantity(new_quantity, reason, adjusted_by)
            uow.inventory.update(inventory)
            uow.commit()

        logger.info(
            "Inventory adjusted",
            inventory_id=inventory_id,
            old_quantity=old_quantity,
            new_quantity=new_quantity,
            reason=reason,
        )
        return InventoryDTO.from_domain(inventory)
