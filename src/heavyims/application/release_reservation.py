"""Application service: Release Reservation use case."""

from __future__ import annotations

import structlog

from heavyims.application.dto import InventoryDTO
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.exceptions import EntityNotFoundError

logger = structlog.get_logger(__name__)


class ReleaseReservationHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, inventory_id: str, quantity: int, work_order_id: str, released_by: str) -> InventoryDTO:
        with self._uow as uow:
            inventory = uow.inventory.get_by_id(inventory_id)
            if inventory is None:
                raise EntityNotFoundError(f"Inventory {inventory_id} not found")

            inventory.release_reservation(quantity, work_order_id, released_by)
            uow.inventory.update(inventory)
            uow.commit()

        logger.info(
            "Reservation released",
            inventory_id=inventory_id,
            work_order_id=work_order_id,
            quantity=quantity,
        )
        return InventoryDTO.from_domain(inventory)
