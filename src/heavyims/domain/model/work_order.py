"""WorkOrder aggregate — a repair or maintenance job on one machine.

The WorkOrder owns its required parts and its notification history.
Customer and technician are referenced by id only; whether a technician has
room for another job is decided by the application layer, not here.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from heavyims.domain.exceptions import StateConflictError, ValidationError
from heavyims.domain.model.events import (
    TechnicianAssigned,
    WorkOrderCreated,
    WorkOrderStatusChanged,
)
from heavyims.domain.model.pending_events import PendingEvents
from heavyims.domain.model.value_objects import (
    DateRange,
    EquipmentIdentifier,
    Money,
    new_id,
    utc_now,
)


class WorkOrderStatus(Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class WorkOrderPriority(Enum):
    LOW = 1
    NORMAL = 2
    HIGH = 3
    CRITICAL = 4


class NotificationType(Enum):
    EMAIL = "EMAIL"
    SMS = "SMS"
    PUSH = "PUSH"


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

ALLOWED_TRANSITIONS: dict[WorkOrderStatus, frozenset[WorkOrderStatus]] = {
    WorkOrderStatus.PENDING: frozenset({WorkOrderStatus.ASSIGNED, WorkOrderStatus.CANCELLED}),
    WorkOrderStatus.ASSIGNED: frozenset({WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.CANCELLED}),
    WorkOrderStatus.IN_PROGRESS: frozenset(
        {WorkOrderStatus.ON_HOLD, WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED}
    ),
    WorkOrderStatus.ON_HOLD: frozenset({WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.CANCELLED}),
    # A work order can be cancelled from anywhere, itself included.
    WorkOrderStatus.COMPLETED: frozenset({WorkOrderStatus.CANCELLED}),
    WorkOrderStatus.CANCELLED: frozenset({WorkOrderStatus.CANCELLED}),
}

# Statuses that count against a technician's concurrent job limit.
ACTIVE_STATUSES = frozenset(
    {WorkOrderStatus.ASSIGNED, WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.ON_HOLD}
)


def can_transition(current: WorkOrderStatus, new: WorkOrderStatus) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def generate_work_order_number(now: datetime | None = None) -> str:
    """Business identifier of the form ``WO-<year>-<5 digits>``."""
    year = (now or utc_now()).year
    return f"WO-{year}-{random.randint(10000, 99999):05d}"


# ---------------------------------------------------------------------------
# Child entities
# ---------------------------------------------------------------------------


@dataclass
class WorkOrderPart:
    """A part the job needs, and how far it has got through the warehouse."""

    id: str
    work_order_id: str
    part_id: str
    quantity_required: int
    is_available: bool = False
    reserved_at: datetime | None = None
    issued_at: datetime | None = None

    def mark_reserved(self) -> None:
        self.reserved_at = utc_now()
        self.is_available = True

    def mark_issued(self) -> None:
        self.issued_at = utc_now()


@dataclass
class WorkOrderNotification:
    """Record of a message sent about the job. Delivery happens elsewhere."""

    id: str
    work_order_id: str
    notification_type: NotificationType
    subject: str
    message: str
    recipient_email: str | None = None
    recipient_phone: str | None = None
    sent_at: datetime = field(default_factory=utc_now)
    was_successful: bool = False
    error_message: str | None = None

    def mark_success(self) -> None:
        self.was_successful = True
        self.error_message = None

    def mark_failed(self, error_message: str) -> None:
        self.was_successful = False
        self.error_message = error_message


# ---------------------------------------------------------------------------
# Aggregate root
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class WorkOrder:
    """Aggregate root for repair jobs.

    Use ``WorkOrder.create()`` for new work orders.  Status changes go
    through ``update_status()``, which consults ``ALLOWED_TRANSITIONS``.
    """

    work_order_id: str
    work_order_number: str
    equipment: EquipmentIdentifier
    customer_id: str
    description: str
    priority: WorkOrderPriority = WorkOrderPriority.NORMAL
    status: WorkOrderStatus = WorkOrderStatus.PENDING
    diagnostic_notes: str = ""
    assigned_technician_id: str | None = None
    scheduled_period: DateRange | None = None
    actual_period: DateRange | None = None
    estimated_labor_hours: Decimal = Decimal("0")
    actual_labor_hours: Decimal = Decimal("0")
    estimated_cost: Money = field(default_factory=Money.zero)
    actual_cost: Money = field(default_factory=Money.zero)
    required_parts: list[WorkOrderPart] = field(default_factory=list)
    notifications: list[WorkOrderNotification] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime | None = None
    created_by: str = ""
    version: int = 0
    events: PendingEvents = field(default_factory=PendingEvents, repr=False)

    # --- Factory (used for NEW work orders only) ------------------------------

    @staticmethod
    def create(
        equipment_vin: str,
        equipment_type: str,
        equipment_model: str | None,
        customer_id: str,
        description: str,
        priority: WorkOrderPriority,
        created_by: str,
    ) -> WorkOrder:
        equipment = EquipmentIdentifier(equipment_vin, equipment_type, equipment_model or "Unknown")
        if not customer_id or not str(customer_id).strip():
            raise ValidationError("Customer ID is required")
        if not description or not description.strip():
            raise ValidationError("Description is required")

        work_order = WorkOrder(
            work_order_id=new_id(),
            work_order_number=generate_work_order_number(),
            equipment=equipment,
            customer_id=str(customer_id).strip(),
            description=description.strip(),
            priority=priority,
            created_by=created_by,
        )
        work_order.events.record(
            WorkOrderCreated(
                work_order_id=work_order.work_order_id,
                work_order_number=work_order.work_order_number,
                customer_id=work_order.customer_id,
                equipment_vin=equipment.vin,
            )
        )
        return work_order

    @property
    def aggregate_id(self) -> str:
        return self.work_order_id

    # --- State transitions ----------------------------------------------------

    def update_status(self, new_status: WorkOrderStatus) -> None:
        """Move to ``new_status`` if the transition table allows it.

        Entering IN_PROGRESS starts an open-ended actual period; entering
        COMPLETED closes it.
        """
        if not can_transition(self.status, new_status):
            raise StateConflictError(
                f"Invalid status transition from {self.status.value} to {new_status.value}"
            )

        old_status = self.status
        now = utc_now()
        self.status = new_status
        self.updated_at = now

        if new_status == WorkOrderStatus.IN_PROGRESS:
            self.actual_period = DateRange.open_ended(now)
        elif new_status == WorkOrderStatus.COMPLETED and self.actual_period is not None:
            self.actual_period = self.actual_period.close(now)

        self.events.record(
            WorkOrderStatusChanged(
                work_order_id=self.work_order_id,
                work_order_number=self.work_order_number,
                old_status=old_status.value,
                new_status=new_status.value,
            )
        )

    def assign_technician(self, technician_id: str) -> None:
        """Record who will do the job. A PENDING work order becomes ASSIGNED."""
        self._assign(technician_id)

    def reassign_technician(self, new_technician_id: str, reason: str) -> None:
        if not reason or not reason.strip():
            raise ValidationError("Reassignment reason is required")
        previous = self.assigned_technician_id
        self._assign(new_technician_id)

        stamp = utc_now().strftime("%Y-%m-%d %H:%M")
        line = (
            f"[{stamp}] Reassigned from technician {previous} to {new_technician_id}. "
            f"Reason: {reason.strip()}"
        )
        self.diagnostic_notes = f"{self.diagnostic_notes}\n{line}" if self.diagnostic_notes else line

    # --- Scheduling and costing -----------------------------------------------

    def set_scheduled_period(self, start: datetime, end: datetime) -> None:
        self.scheduled_period = DateRange(start, end)
        self.updated_at = utc_now()

    def set_estimate(self, labor_hours: Decimal, cost: Money) -> None:
        if labor_hours < 0:
            raise ValidationError("Labor hours cannot be negative")
        self.estimated_labor_hours = labor_hours
        self.estimated_cost = cost
        self.updated_at = utc_now()

    def record_actual_time(self, actual_hours: Decimal, actual_cost: Money) -> None:
        """Book what the job really took. Only meaningful once it is finished."""
        if actual_hours < 0:
            raise ValidationError("Labor hours cannot be negative")
        if self.status != WorkOrderStatus.COMPLETED:
            raise StateConflictError("Can only record actual time for completed work orders")
        self.actual_labor_hours = actual_hours
        self.actual_cost = actual_cost
        self.updated_at = utc_now()

    # --- Parts ----------------------------------------------------------------

    def add_required_part(self, part_id: str, quantity: int, is_available: bool = False) -> WorkOrderPart:
        if not part_id or not str(part_id).strip():
            raise ValidationError("Part ID is required")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("Required quantity must be a positive integer")

        part = WorkOrderPart(
            id=new_id(),
            work_order_id=self.work_order_id,
            part_id=str(part_id).strip(),
            quantity_required=quantity,
            is_available=is_available,
        )
        self.required_parts.append(part)
        self.updated_at = utc_now()
        return part

    def mark_part_reserved(self, part_id: str) -> None:
        self._find_part(part_id).mark_reserved()
        self.updated_at = utc_now()

    def mark_part_issued(self, part_id: str) -> None:
        self._find_part(part_id).mark_issued()
        self.updated_at = utc_now()

    def are_all_parts_available(self) -> bool:
        return all(part.is_available for part in self.required_parts)

    # --- Notifications --------------------------------------------------------

    def record_notification(
        self,
        notification_type: NotificationType,
        subject: str,
        message: str,
        recipient_email: str | None = None,
        recipient_phone: str | None = None,
    ) -> WorkOrderNotification:
        if not subject or not subject.strip():
            raise ValidationError("Notification subject is required")
        if notification_type == NotificationType.EMAIL and not recipient_email:
            raise ValidationError("Email notifications need a recipient email")
        if notification_type == NotificationType.SMS and not recipient_phone:
            raise ValidationError("SMS notifications need a recipient phone")

        notification = WorkOrderNotification(
            id=new_id(),
            work_order_id=self.work_order_id,
            notification_type=notification_type,
            subject=subject.strip(),
            message=message,
            recipient_email=recipient_email,
            recipient_phone=recipient_phone,
        )
        self.notifications.append(notification)
        return notification

    # --- Computed properties --------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_delayed(self) -> bool:
        """Past its scheduled end and still not finished."""
        if self.scheduled_period is None:
            return False
        if self.status in (WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED):
            return False
        return utc_now() > self.scheduled_period.end

    # --- Internal helpers -----------------------------------------------------

    def _assign(self, technician_id: str) -> None:
        if not technician_id or not str(technician_id).strip():
            raise ValidationError("Technician ID is required")
        if self.status in (WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED):
            raise StateConflictError(
                f"Cannot assign a technician to a {self.status.value} work order"
            )

        previous = self.assigned_technician_id
        self.assigned_technician_id = str(technician_id).strip()
        self.updated_at = utc_now()
        self.events.record(
            TechnicianAssigned(
                work_order_id=self.work_order_id,
                work_order_number=self.work_order_number,
                technician_id=self.assigned_technician_id,
                previous_technician_id=previous,
            )
        )
        if self.status == WorkOrderStatus.PENDING:
            self.update_status(WorkOrderStatus.ASSIGNED)

    def _find_part(self, part_id: str) -> WorkOrderPart:
        for part in self.required_parts:
            if part.part_id == part_id:
                return part
        raise ValidationError(f"Part ID '{part_id}' is not required by this work order")
