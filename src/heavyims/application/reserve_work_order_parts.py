"""Application services: parts for a work order.

Reserving spreads each requested part over every warehouse that stocks it;
the whole request is one commit, so either every part is reserved or none.
"""

from __future__ import annotations

import structlog

from heavyims.application.dto import AllocationDTO, PartRequest
from heavyims.application.lookups import load_work_order
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.exceptions import StateConflictError, ValidationError
from heavyims.domain.model.work_order import WorkOrderStatus
from heavyims.domain.service.inventory_reservation_service import (
    Allocation,
    InventoryReservationService,
)

logger = structlog.get_logger(__name__)


def _to_dto(allocations: list[Allocation]) -> list[AllocationDTO]:
    return [AllocationDTO(a.inventory_id, a.warehouse, a.quantity) for a in allocations]


class ReserveWorkOrderPartsHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        work_order_ref: str,
        reservations: list[PartRequest],
        reserved_by: str,
    ) -> list[AllocationDTO]:
        if not reservations:
            raise ValidationError("Must specify at least one part to reserve")

        with self._uow as uow:
            work_order = load_work_order(uow, work_order_ref)
            if work_order.status in (WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED):
                raise StateConflictError(
                    f"Cannot reserve parts for a {work_order.status.value} work order"
                )

            svc = InventoryReservationService(uow.inventory)
            allocations: list[Allocation] = []
            for request in reservations:
                allocations.extend(
                    svc.reserve_for_work_order(work_order, request.part_id, request.quantity, reserved_by)
                )
            uow.work_orders.update(work_order)
            uow.commit()

        logger.info(
            "Reserved parts for work order",
            work_order_number=work_order.work_order_number,
            parts=len(reservations),
            locations=len(allocations),
        )
        return _to_dto(allocations)


class IssueWorkOrderPartsHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, work_order_ref: str, part_id: str, issued_by: str) -> list[AllocationDTO]:
        with self._uow as uow:
            work_order = load_work_order(uow, work_order_ref)
            svc = InventoryReservationService(uow.inventory)
            issued = svc.issue_for_work_order(work_order, part_id, issued_by)
            uow.work_orders.update(work_order)
            uow.commit()

        logger.info(
            "Issued parts for work order",
            work_order_number=work_order.work_order_number,
            part_id=part_id,
            quantity=sum(a.quantity for a in issued),
        )
        return _to_dto(issued)
