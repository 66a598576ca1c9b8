"""Domain events — immutable facts raised by aggregates.

Every event carries a snapshot of the values at the moment it happened
(quantities before/after, not a reference to the live aggregate), so a
subscriber sees exactly what was committed even if the aggregate changes
again later.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from heavyims.domain.model.value_objects import new_id, utc_now


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: str = field(default_factory=new_id)
    occurred_on: datetime = field(default_factory=utc_now)

    @property
    def name(self) -> str:
        return type(self).__name__


# ── Inventory ────────────────────────────────────────────────────────────────


@dataclass(frozen=True, kw_only=True)
class InventoryReserved(DomainEvent):
    """Stock was put on hold for a work order."""

    inventory_id: str
    part_id: str
    work_order_id: str
    warehouse: str
    quantity_reserved: int
    remaining_available: int


@dataclass(frozen=True, kw_only=True)
class InventoryIssued(DomainEvent):
    """Reserved stock physically left the shelf for a work order."""

    inventory_id: str
    part_id: str
    work_order_id: str
    warehouse: str
    quantity_issued: int
    remaining_on_hand: int


@dataclass(frozen=True, kw_only=True)
class InventoryReceived(DomainEvent):
    inventory_id: str
    part_id: str
    warehouse: str
    quantity_received: int
    new_quantity_on_hand: int
    reference_number: str = ""


@dataclass(frozen=True, kw_only=True)
class InventoryReturned(DomainEvent):
    """Unused parts came back from a work order."""

    inventory_id: str
    part_id: str
    work_order_id: str
    warehouse: str
    quantity_returned: int
    new_quantity_on_hand: int


@dataclass(frozen=True, kw_only=True)
class InventoryAdjusted(DomainEvent):
    inventory_id: str
    part_id: str
    warehouse: str
    old_quantity: int
    new_quantity: int
    difference: int
    reason: str


@dataclass(frozen=True, kw_only=True)
class InventoryLowStockDetected(DomainEvent):
    """Available stock at a location fell to or below its minimum level."""

    inventory_id: str
    part_id: str
    warehouse: str
    current_quantity: int
    minimum_stock_level: int
    reorder_quantity: int


# ── Work orders ──────────────────────────────────────────────────────────────


@dataclass(frozen=True, kw_only=True)
class WorkOrderCreated(DomainEvent):
    work_order_id: str
    work_order_number: str
    customer_id: str
    equipment_vin: str


@dataclass(frozen=True, kw_only=True)
class WorkOrderStatusChanged(DomainEvent):
    work_order_id: str
    work_order_number: str
    old_status: str
    new_status: str


@dataclass(frozen=True, kw_only=True)
class TechnicianAssigned(DomainEvent):
    work_order_id: str
    work_order_number: str
    technician_id: str
    previous_technician_id: str | None = None
