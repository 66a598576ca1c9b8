"""Application service: Issue Parts use case.

Issuing removes reserved stock from the shelf.  If that drops the location
to its minimum, the aggregate raises a low-stock event which is dispatched
once the commit succeeds.
"""

from __future__ import annotations

import structlog

from heavyims.application.dto import InventoryDTO
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.exceptions import EntityNotFoundError

logger = structlog.get_logger(__name__)


class IssuePartsHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, inventory_id: str, quantity: int, work_order_id: str, issued_by: str) -> InventoryDTO:
        with self._uow as uow:
            inventory = uow.inventory.get_by_id(inventory_id)
            if inventory is None:
                raise EntityNotFoundError(f"Inventory {inventory_id} not found")

            inventory.issue_parts(quantity, work_order_id, issued_by)
            uow.inventory.update(inventory)
            uow.commit()

        logger.info(
            "Parts issued",
            inventory_id=inventory_id,
            work_order_id=work_order_id,
            quantity=quantity,
            remaining_on_hand=inventory.quantity_on_hand,
        )
        return InventoryDTO.from_domain(inventory)
