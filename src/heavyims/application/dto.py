"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals (or their pending events) to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from heavyims.domain.model.inventory import Inventory, InventoryTransaction
from heavyims.domain.model.technician import Technician
from heavyims.domain.model.work_order import WorkOrder


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


# ── Inventory ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class InventoryDTO:
    inventory_id: str
    part_id: str
    warehouse: str
    bin_location: str
    quantity_on_hand: int
    quantity_reserved: int
    available: int
    minimum_stock_level: int
    maximum_stock_level: int
    reorder_quantity: int
    is_low_stock: bool
    is_out_of_stock: bool
    is_active: bool
    created_at: str
    updated_at: str | None

    @staticmethod
    def from_domain(inv: Inventory) -> InventoryDTO:
        return InventoryDTO(
            inventory_id=inv.inventory_id,
            part_id=inv.part_id,
            warehouse=inv.warehouse,
            bin_location=inv.bin_location,
            quantity_on_hand=inv.quantity_on_hand,
            quantity_reserved=inv.quantity_reserved,
            available=inv.available_quantity,
            minimum_stock_level=inv.minimum_stock_level,
            maximum_stock_level=inv.maximum_stock_level,
            reorder_quantity=inv.reorder_quantity,
            is_low_stock=inv.is_low_stock(),
            is_out_of_stock=inv.is_out_of_stock(),
            is_active=inv.is_active,
            created_at=inv.created_at.isoformat(),
            updated_at=_iso(inv.updated_at),
        )


@dataclass(frozen=True)
class InventoryTransactionDTO:
    transaction_id: str
    transaction_type: str
    quantity: int  # signed
    work_order_id: str | None
    reference_number: str
    notes: str
    transaction_date: str
    transaction_by: str

    @staticmethod
    def from_domain(tx: InventoryTransaction) -> InventoryTransactionDTO:
        return InventoryTransactionDTO(
            transaction_id=tx.transaction_id,
            transaction_type=tx.transaction_type.value,
            quantity=tx.quantity,
            work_order_id=tx.work_order_id,
            reference_number=tx.reference_number,
            notes=tx.notes,
            transaction_date=tx.transaction_date.isoformat(),
            transaction_by=tx.transaction_by,
        )


@dataclass(frozen=True)
class InventoryWithTransactionsDTO:
    inventory: InventoryDTO
    transactions: list[InventoryTransactionDTO]


@dataclass(frozen=True)
class LowStockAlertDTO:
    """Output: a location that needs reordering."""

    inventory_id: str
    part_id: str
    warehouse: str
    current_quantity: int
    minimum_stock_level: int
    reorder_quantity: int  # how many to order to get back to the maximum


@dataclass(frozen=True)
class WarehouseSummaryDTO:
    warehouse: str
    total_parts: int
    total_quantity_on_hand: int
    total_quantity_reserved: int
    total_available: int
    low_stock_count: int
    out_of_stock_count: int


@dataclass(frozen=True)
class AllocationDTO:
    """Output: how much one warehouse contributed to a reservation."""

    inventory_id: str
    warehouse: str
    quantity: int


# ── Work orders ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PartRequest:
    """Input: how many of a part a work order needs."""

    part_id: str
    quantity: int


@dataclass(frozen=True)
class WorkOrderPartDTO:
    part_id: str
    quantity_required: int
    is_available: bool
    reserved_at: str | None
    issued_at: str | None


@dataclass(frozen=True)
class WorkOrderNotificationDTO:
    notification_type: str
    recipient: str
    subject: str
    sent_at: str
    was_successful: bool
    error_message: str | None


@dataclass(frozen=True)
class WorkOrderDTO:
    work_order_id: str
    work_order_number: str
    equipment: str
    customer_id: str
    description: str
    priority: str
    status: str
    assigned_technician_id: str | None
    scheduled_period: str | None
    actual_period: str | None
    estimated_labor_hours: str
    estimated_cost: str
    actual_labor_hours: str
    actual_cost: str
    required_parts: list[WorkOrderPartDTO]
    notifications: list[WorkOrderNotificationDTO]
    diagnostic_notes: str
    is_delayed: bool
    created_at: str
    created_by: str

    @staticmethod
    def from_domain(wo: WorkOrder) -> WorkOrderDTO:
        return WorkOrderDTO(
            work_order_id=wo.work_order_id,
            work_order_number=wo.work_order_number,
            equipment=wo.equipment.display_name,
            customer_id=wo.customer_id,
            description=wo.description,
            priority=wo.priority.name,
            status=wo.status.value,
            assigned_technician_id=wo.assigned_technician_id,
            scheduled_period=str(wo.scheduled_period) if wo.scheduled_period else None,
            actual_period=str(wo.actual_period) if wo.actual_period else None,
            estimated_labor_hours=str(wo.estimated_labor_hours),
            estimated_cost=str(wo.estimated_cost),
            actual_labor_hours=str(wo.actual_labor_hours),
            actual_cost=str(wo.actual_cost),
            required_parts=[
                WorkOrderPartDTO(
                    part_id=p.part_id,
                    quantity_required=p.quantity_required,
                    is_available=p.is_available,
                    reserved_at=_iso(p.reserved_at),
                    issued_at=_iso(p.issued_at),
                )
                for p in wo.required_parts
            ],
            notifications=[
                WorkOrderNotificationDTO(
                    notification_type=n.notification_type.value,
                    recipient=n.recipient_email or n.recipient_phone or "-",
                    subject=n.subject,
                    sent_at=n.sent_at.isoformat(),
                    was_successful=n.was_successful,
                    error_message=n.error_message,
                )
                for n in wo.notifications
            ],
            diagnostic_notes=wo.diagnostic_notes,
            is_delayed=wo.is_delayed,
            created_at=wo.created_at.isoformat(),
            created_by=wo.created_by,
        )


# ── Technicians ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TechnicianDTO:
    technician_id: str
    full_name: str
    email: str
    phone_number: str
    skill_level: str
    status: str
    max_concurrent_jobs: int
    active_jobs: int
    workload_percentage: str
    is_active: bool

    @staticmethod
    def from_domain(tech: Technician, active_jobs: int) -> TechnicianDTO:
        return TechnicianDTO(
            technician_id=tech.technician_id,
            full_name=tech.full_name,
            email=tech.email,
            phone_number=tech.phone_number,
            skill_level=tech.skill_level.name,
            status=tech.status.value,
            max_concurrent_jobs=tech.max_concurrent_jobs,
            active_jobs=active_jobs,
            workload_percentage=f"{tech.workload_percentage(active_jobs):.0f}%",
            is_active=tech.is_active,
        )
