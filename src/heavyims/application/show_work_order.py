"""Application services: work order queries."""

from __future__ import annotations

from heavyims.application.dto import WorkOrderDTO
from heavyims.application.lookups import load_work_order
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.model.work_order import WorkOrderStatus


class ShowWorkOrderHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, work_order_ref: str) -> WorkOrderDTO:
        with self._uow as uow:
            return WorkOrderDTO.from_domain(load_work_order(uow, work_order_ref))


class ListWorkOrdersHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, status: WorkOrderStatus, delayed_only: bool = False) -> list[WorkOrderDTO]:
        with self._uow as uow:
            work_orders = uow.work_orders.list_by_status(status)
            if delayed_only:
                work_orders = [wo for wo in work_orders if wo.is_delayed]
            ordered = sorted(work_orders, key=lambda wo: (-wo.priority.value, wo.created_at))
            return [WorkOrderDTO.from_domain(wo) for wo in ordered]
