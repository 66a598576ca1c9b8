"""JSON-document-backed implementation of WorkOrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from heavyims.domain.model.value_objects import DateRange, EquipmentIdentifier, Money, OPEN_END
from heavyims.domain.model.work_order import (
    NotificationType,
    WorkOrder,
    WorkOrderNotification,
    WorkOrderPart,
    WorkOrderPriority,
    WorkOrderStatus,
)
from heavyims.domain.repository.tracking import Tracker
from heavyims.domain.repository.work_order_repository import WorkOrderRepository
from heavyims.infrastructure.persistence.json_store import JsonSession

SECTION = "work_orders"


class JsonWorkOrderRepository(WorkOrderRepository):

    def __init__(self, session: JsonSession, track: Tracker | None = None) -> None:
        super().__init__(track)
        self._session = session

    # --- WorkOrderRepository interface ----------------------------------------

    def get_by_id(self, work_order_id: str) -> WorkOrder | None:
        for wo in self._all():
            if wo.work_order_id == work_order_id:
                return self._seen(wo)
        return None

    def get_by_number(self, work_order_number: str) -> WorkOrder | None:
        wanted = work_order_number.strip().upper()
        for wo in self._all():
            if wo.work_order_number == wanted:
                return self._seen(wo)
        return None

    def list_by_status(self, status: WorkOrderStatus) -> list[WorkOrder]:
        return self._seen_all(wo for wo in self._all() if wo.status == status)

    def count_active_by_technician(self, technician_id: str) -> int:
        return sum(
            1 for wo in self._all()
            if wo.assigned_technician_id == technician_id and wo.is_active
        )

    def add(self, work_order: WorkOrder) -> None:
        self._session.add(SECTION, work_order.work_order_id, work_order)
        self._seen(work_order)

    def update(self, work_order: WorkOrder) -> None:
        self._seen(work_order)

    def _all(self) -> list[WorkOrder]:
        return self._session.all(SECTION, self.to_domain)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def to_raw(wo: WorkOrder) -> dict:
        return {
            "work_order_id": wo.work_order_id,
            "work_order_number": wo.work_order_number,
            "equipment": {
                "vin": wo.equipment.vin,
                "equipment_type": wo.equipment.equipment_type,
                "model": wo.equipment.model,
            },
            "customer_id": wo.customer_id,
            "description": wo.description,
            "priority": wo.priority.name,
            "status": wo.status.value,
            "diagnostic_notes": wo.diagnostic_notes,
            "assigned_technician_id": wo.assigned_technician_id,
            "scheduled_period": _range_to_raw(wo.scheduled_period),
            "actual_period": _range_to_raw(wo.actual_period),
            "estimated_labor_hours": str(wo.estimated_labor_hours),
            "actual_labor_hours": str(wo.actual_labor_hours),
            "estimated_cost": _money_to_raw(wo.estimated_cost),
            "actual_cost": _money_to_raw(wo.actual_cost),
            "required_parts": [
                {
                    "id": p.id,
                    "part_id": p.part_id,
                    "quantity_required": p.quantity_required,
                    "is_available": p.is_available,
                    "reserved_at": _dt_to_raw(p.reserved_at),
                    "issued_at": _dt_to_raw(p.issued_at),
                }
                for p in wo.required_parts
            ],
            "notifications": [
                {
                    "id": n.id,
                    "notification_type": n.notification_type.value,
                    "subject": n.subject,
                    "message": n.message,
                    "recipient_email": n.recipient_email,
                    "recipient_phone": n.recipient_phone,
                    "sent_at": n.sent_at.isoformat(),
                    "was_successful": n.was_successful,
                    "error_message": n.error_message,
                }
                for n in wo.notifications
            ],
            "created_at": wo.created_at.isoformat(),
            "updated_at": _dt_to_raw(wo.updated_at),
            "created_by": wo.created_by,
            "version": wo.version,
        }

    @staticmethod
    def to_domain(raw: dict) -> WorkOrder:
        work_order_id = raw["work_order_id"]
        equipment = raw["equipment"]
        return WorkOrder(
            work_order_id=work_order_id,
            work_order_number=raw["work_order_number"],
            equipment=EquipmentIdentifier(
                equipment["vin"], equipment["equipment_type"], equipment.get("model", "Unknown")
            ),
            customer_id=raw["customer_id"],
            description=raw["description"],
            priority=WorkOrderPriority[raw.get("priority", "NORMAL")],
            status=WorkOrderStatus(raw["status"]),
            diagnostic_notes=raw.get("diagnostic_notes", ""),
            assigned_technician_id=raw.get("assigned_technician_id"),
            scheduled_period=_range_from_raw(raw.get("scheduled_period")),
            actual_period=_range_from_raw(raw.get("actual_period")),
            estimated_labor_hours=Decimal(raw.get("estimated_labor_hours", "0")),
            actual_labor_hours=Decimal(raw.get("actual_labor_hours", "0")),
            estimated_cost=_money_from_raw(raw.get("estimated_cost")),
            actual_cost=_money_from_raw(raw.get("actual_cost")),
            required_parts=[
                WorkOrderPart(
                    id=p["id"],
                    work_order_id=work_order_id,
                    part_id=p["part_id"],
                    quantity_required=p["quantity_required"],
                    is_available=p.get("is_available", False),
                    reserved_at=_dt_from_raw(p.get("reserved_at")),
                    issued_at=_dt_from_raw(p.get("issued_at")),
                )
                for p in raw.get("required_parts", [])
            ],
            notifications=[
                WorkOrderNotification(
                    id=n["id"],
                    work_order_id=work_order_id,
                    notification_type=NotificationType(n["notification_type"]),
                    subject=n["subject"],
                    message=n.get("message", ""),
                    recipient_email=n.get("recipient_email"),
                    recipient_phone=n.get("recipient_phone"),
                    sent_at=datetime.fromisoformat(n["sent_at"]),
                    was_successful=n.get("was_successful", False),
                    error_message=n.get("error_message"),
                )
                for n in raw.get("notifications", [])
            ],
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=_dt_from_raw(raw.get("updated_at")),
            created_by=raw.get("created_by", ""),
            version=raw.get("version", 0),
        )


# --- Value object helpers -----------------------------------------------------


def _dt_to_raw(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _dt_from_raw(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _money_to_raw(money: Money) -> dict:
    return {"amount": str(money.amount), "currency": money.currency}


def _money_from_raw(raw: dict | None) -> Money:
    if not raw:
        return Money.zero()
    return Money(Decimal(raw["amount"]), raw.get("currency", "USD"))


def _range_to_raw(period: DateRange | None) -> dict | None:
    if period is None:
        return None
    # An open-ended range is stored with a null end.
    return {
        "start": period.start.isoformat(),
        "end": None if period.is_open_ended else period.end.isoformat(),
    }


def _range_from_raw(raw: dict | None) -> DateRange | None:
    if not raw:
        return None
    start = datetime.fromisoformat(raw["start"])
    end = datetime.fromisoformat(raw["end"]) if raw.get("end") else OPEN_END
    return DateRange(start, end)
