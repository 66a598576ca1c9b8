"""Application services: scheduling, estimating and costing a work order."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from heavyims.application.dto import WorkOrderDTO
from heavyims.application.lookups import load_work_order
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.model.value_objects import Money


class ScheduleWorkOrderHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, work_order_ref: str, start: datetime, end: datetime) -> WorkOrderDTO:
        with self._uow as uow:
            work_order = load_work_order(uow, work_order_ref)
            work_order.set_scheduled_period(start, end)
            uow.work_orders.update(work_order)
            uow.commit()
        return WorkOrderDTO.from_domain(work_order)


class EstimateWorkOrderHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, work_order_ref: str, labor_hours: Decimal, cost: Decimal) -> WorkOrderDTO:
        with self._uow as uow:
            work_order = load_work_order(uow, work_order_ref)
            work_order.set_estimate(labor_hours, Money.of(cost))
            uow.work_orders.update(work_order)
            uow.commit()
        return WorkOrderDTO.from_domain(work_order)


class RecordActualTimeHandler:
    """Book actual hours and cost once a work order is COMPLETED."""

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, work_order_ref: str, actual_hours: Decimal, actual_cost: Decimal) -> WorkOrderDTO:
        with self._uow as uow:
            work_order = load_work_order(uow, work_order_ref)
            work_order.record_actual_time(actual_hours, Money.of(actual_cost))
            uow.work_orders.update(work_order)
            uow.commit()
        return WorkOrderDTO.from_domain(work_order)
