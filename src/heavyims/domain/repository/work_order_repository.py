"""Abstract repository for the WorkOrder aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from heavyims.domain.model.work_order import WorkOrder, WorkOrderStatus
from heavyims.domain.repository.tracking import TrackingRepository


class WorkOrderRepository(TrackingRepository[WorkOrder], ABC):

    @abstractmethod
    def get_by_id(self, work_order_id: str) -> WorkOrder | None:
        """Return a work order by its ID, or None if not found."""

    @abstractmethod
    def get_by_number(self, work_order_number: str) -> WorkOrder | None:
        """Return a work order by its business number (``WO-2025-12345``)."""

    @abstractmethod
    def list_by_status(self, status: WorkOrderStatus) -> list[WorkOrder]:
        """Return every work order currently in ``status``."""

    @abstractmethod
    def count_active_by_technician(self, technician_id: str) -> int:
        """Count ASSIGNED, IN_PROGRESS and ON_HOLD work orders for a technician."""

    @abstractmethod
    def add(self, work_order: WorkOrder) -> None:
        """Register a new work order."""

    @abstractmethod
    def update(self, work_order: WorkOrder) -> None:
        """Mark an existing work order as changed."""
