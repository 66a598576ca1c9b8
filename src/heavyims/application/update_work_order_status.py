"""Application service: Update Work Order Status use case.

Cancelling a work order gives back any stock still reserved for it.  When a
job stops counting against its technician (completed or cancelled), the
technician's BUSY/AVAILABLE status is refreshed in the same commit.
"""

from __future__ import annotations

import structlog

from heavyims.application.dto import WorkOrderDTO
from heavyims.application.lookups import load_work_order
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.model.work_order import WorkOrderStatus
from heavyims.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)

logger = structlog.get_logger(__name__)


class UpdateWorkOrderStatusHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, work_order_ref: str, new_status: WorkOrderStatus, changed_by: str) -> WorkOrderDTO:
        with self._uow as uow:
            work_order = load_work_order(uow, work_order_ref)
            was_active = work_order.is_active
            technician_id = work_order.assigned_technician_id
            active_before = (
                uow.work_orders.count_active_by_technician(technician_id) if technician_id else 0
            )
            old_status = work_order.status

            work_order.update_status(new_status)
            uow.work_orders.update(work_order)

            if new_status == WorkOrderStatus.CANCELLED:
                svc = InventoryReservationService(uow.inventory)
                for part in work_order.required_parts:
                    svc.release_for_work_order(work_order, part.part_id, changed_by)

            if technician_id and was_active and not work_order.is_active:
                technician = uow.technicians.get_by_id(technician_id)
                if technician is not None:
                    technician.refresh_availability(active_before - 1)
                    uow.technicians.update(technician)

            uow.commit()

        logger.info(
            "Work order status changed",
            work_order_number=work_order.work_order_number,
            old_status=old_status.value,
            new_status=new_status.value,
            changed_by=changed_by,
        )
        return WorkOrderDTO.from_domain(work_order)
