"""Application service: Assign Technician use case.

Capacity is a rule across two aggregates (a technician and the work orders
already on their plate), so it is checked here rather than in either one.
The work order and the technician are saved in the same commit.
"""

from __future__ import annotations

import structlog

from heavyims.application.dto import WorkOrderDTO
from heavyims.application.lookups import load_technician, load_work_order
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.exceptions import StateConflictError, ValidationError

logger = structlog.get_logger(__name__)


class AssignTechnicianHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, work_order_ref: str, technician_id: str, reason: str | None = None) -> WorkOrderDTO:
        """Assign a technician, or reassign if one is already assigned.

        Reassignment requires a ``reason``, which is kept in the work
        order's diagnostic notes.
        """
        with self._uow as uow:
            work_order = load_work_order(uow, work_order_ref)
            technician = load_technician(uow, technician_id)

            if work_order.assigned_technician_id == technician.technician_id:
                raise ValidationError(
                    f"{technician.full_name} is already assigned to {work_order.work_order_number}"
                )
            if not technician.is_active:
                raise StateConflictError(f"Cannot assign inactive technician {technician.full_name}")

            active_jobs = uow.work_orders.count_active_by_technician(technician.technician_id)
            if not technician.can_accept_new_job(active_jobs):
                raise StateConflictError(f"Technician {technician.full_name} is at full capacity")

            previous_id = work_order.assigned_technician_id
            if previous_id is None:
                work_order.assign_technician(technician.technician_id)
            else:
                work_order.reassign_technician(technician.technician_id, reason or "")
            technician.refresh_availability(active_jobs + 1)

            uow.work_orders.update(work_order)
            uow.technicians.update(technician)

            if previous_id is not None:
                previous = uow.technicians.get_by_id(previous_id)
                if previous is not None:
                    remaining = uow.work_orders.count_active_by_technician(previous_id)
                    previous.refresh_availability(remaining)
                    uow.technicians.update(previous)

            uow.commit()

        logger.info(
            "Technician assigned",
            work_order_number=work_order.work_order_number,
            technician=technician.full_name,
            previous_technician_id=previous_id,
        )
        return WorkOrderDTO.from_domain(work_order)
