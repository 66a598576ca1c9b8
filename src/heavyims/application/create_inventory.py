"""Application service: open a new inventory location for a part."""

from __future__ import annotations

import structlog

from heavyims.application.dto import InventoryDTO
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.exceptions import DuplicateInventoryError
from heavyims.domain.model.inventory import Inventory

logger = structlog.get_logger(__name__)


class CreateInventoryHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        part_id: str,
        warehouse: str,
        bin_location: str,
        minimum_stock_level: int,
        maximum_stock_level: int,
    ) -> InventoryDTO:
        with self._uow as uow:
            if uow.inventory.get_by_part_and_warehouse(part_id, warehouse) is not None:
                raise DuplicateInventoryError(
                    f"Inventory already exists for part {part_id} at {warehouse}"
                )

            inventory = Inventory.create(
                part_id, warehouse, bin_location, minimum_stock_level, maximum_stock_level
            )
            uow.inventory.add(inventory)
            uow.commit()

        logger.info(
            "Inventory location created",
            inventory_id=inventory.inventory_id,
            part_id=inventory.part_id,
            warehouse=inventory.warehouse,
        )
        return InventoryDTO.from_domain(inventory)
