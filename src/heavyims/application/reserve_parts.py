"""Application service: Reserve Parts use case.

Puts stock at one warehouse on hold for a work order.  For spreading a
request across warehouses see ``reserve_work_order_parts``.
"""

from __future__ import annotations

import structlog

from heavyims.application.dto import InventoryDTO
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.exceptions import EntityNotFoundError

logger = structlog.get_logger(__name__)


class ReservePartsHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        part_id: str,
        warehouse: str,
        quantity: int,
        work_order_id: str,
        requested_by: str,
    ) -> InventoryDTO:
        with self._uow as uow:
            inventory = uow.inventory.get_by_part_and_warehouse(part_id, warehouse)
            if inventory is None:
                raise EntityNotFoundError(
                    f"No inventory for part {part_id} at warehouse {warehouse}"
                )

            inventory.reserve_parts(quantity, work_order_id, requested_by)
            uow.inventory.update(inventory)
            uow.commit()

        logger.info(
            "Parts reserved",
            inventory_id=inventory.inventory_id,
            work_order_id=work_order_id,
            quantity=quantity,
        )
        return InventoryDTO.from_domain(inventory)
