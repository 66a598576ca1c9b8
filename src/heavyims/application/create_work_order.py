"""Application service: Create Work Order use case."""

from __future__ import annotations

from decimal import Decimal

import structlog

from heavyims.application.dto import WorkOrderDTO
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.model.value_objects import Money
from heavyims.domain.model.work_order import WorkOrder, WorkOrderPriority

logger = structlog.get_logger(__name__)


class CreateWorkOrderHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        equipment_vin: str,
        equipment_type: str,
        customer_id: str,
        description: str,
        created_by: str,
        equipment_model: str | None = None,
        priority: WorkOrderPriority = WorkOrderPriority.NORMAL,
        estimated_labor_hours: Decimal | None = None,
        estimated_cost: Decimal | None = None,
    ) -> WorkOrderDTO:
        work_order = WorkOrder.create(
            equipment_vin,
            equipment_type,
            equipment_model,
            customer_id,
            description,
            priority,
            created_by,
        )
        if estimated_labor_hours:
            work_order.set_estimate(estimated_labor_hours, Money.of(estimated_cost or 0))

        with self._uow as uow:
            uow.work_orders.add(work_order)
            uow.commit()

        logger.info(
            "Work order created",
            work_order_number=work_order.work_order_number,
            vin=work_order.equipment.vin,
        )
        return WorkOrderDTO.from_domain(work_order)
