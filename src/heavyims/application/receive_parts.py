"""Application service: Receive Parts use case."""

from __future__ import annotations

import structlog

from heavyims.application.dto import InventoryDTO
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.exceptions import EntityNotFoundError

logger = structlog.get_logger(__name__)


class ReceivePartsHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        inventory_id: str,
        quantity: int,
        received_by: str,
        reference_number: str | None = None,
    ) -> InventoryDTO:
        with self._uow as uow:
            inventory = uow.inventory.get_by_id(inventory_id)
            if inventory is None:
                raise EntityNotFoundError(f"Inventory {inventory_id} not found")

            inventory.receive_parts(quantity, received_by, reference_number)
            uow.inventory.update(inventory)
            uow.commit()

        logger.info(
            "Parts received",
            inventory_id=inventory_id,
            quantity=quantity,
            reference_number=reference_number,
        )
        return InventoryDTO.from_domain(inventory)
