"""Unit tests for the WorkOrder aggregate and its status state machine."""

import re
from datetime import timedelta
from decimal import Decimal

import pytest

from heavyims.domain.exceptions import StateConflictError, ValidationError
from heavyims.domain.model.events import (
    TechnicianAssigned,
    WorkOrderCreated,
    WorkOrderStatusChanged,
)
from heavyims.domain.model.value_objects import Money, utc_now
from heavyims.domain.model.work_order import (
    ALLOWED_TRANSITIONS,
    NotificationType,
    WorkOrder,
    WorkOrderPriority,
    WorkOrderStatus,
    can_transition,
    generate_work_order_number,
)

VIN = "1HGBH41JXMN109186"

S = WorkOrderStatus


def _wo(status=None):
    wo = WorkOrder.create(
        VIN, "Excavator", "CAT 320", "cust-1", "Hydraulic leak", WorkOrderPriority.HIGH, "desk"
    )
    if status is not None:
        wo.status = status
    wo.events.clear()
    return wo


def _in_progress():
    wo = _wo()
    wo.assign_technician("tech-1")
    wo.update_status(S.IN_PROGRESS)
    wo.events.clear()
    return wo


class TestWorkOrderCreate:

    def test_create_defaults(self):
        wo = WorkOrder.create(VIN, "Excavator", None, "cust-1", "Leak", WorkOrderPriority.NORMAL, "desk")
        assert wo.status == S.PENDING
        assert wo.assigned_technician_id is None
        assert wo.equipment.model == "Unknown"
        assert wo.estimated_cost == Money.zero()
        assert re.fullmatch(r"WO-\d{4}-\d{5}", wo.work_order_number)

    def test_create_records_event(self):
        wo = WorkOrder.create(VIN, "Excavator", None, "cust-1", "Leak", WorkOrderPriority.NORMAL, "desk")
        [event] = wo.events.pending
        assert isinstance(event, WorkOrderCreated)
        assert event.work_order_number == wo.work_order_number
        assert event.equipment_vin == VIN

    def test_customer_required(self):
        with pytest.raises(ValidationError, match="Customer ID is required"):
            WorkOrder.create(VIN, "Excavator", None, "", "Leak", WorkOrderPriority.NORMAL, "desk")

    def test_description_required(self):
        with pytest.raises(ValidationError, match="Description is required"):
            WorkOrder.create(VIN, "Excavator", None, "cust-1", " ", WorkOrderPriority.NORMAL, "desk")

    def test_bad_vin_rejected(self):
        with pytest.raises(ValidationError, match="VIN"):
            WorkOrder.create("SHORT", "Excavator", None, "cust-1", "Leak", WorkOrderPriority.NORMAL, "desk")

    def test_number_uses_year(self):
        now = utc_now()
        assert generate_work_order_number(now).startswith(f"WO-{now.year}-")


_ALL_PAIRS = [(a, b) for a in S for b in S]


class TestStatusTransitions:

    @pytest.mark.parametrize("current,new", _ALL_PAIRS)
    def test_transition_table_is_enforced(self, current, new):
        wo = _wo(status=current)
        if new in ALLOWED_TRANSITIONS[current]:
            wo.update_status(new)
            assert wo.status == new
            [event] = wo.events.pending
            assert isinstance(event, WorkOrderStatusChanged)
            assert (event.old_status, event.new_status) == (current.value, new.value)
        else:
            with pytest.raises(StateConflictError, match="Invalid status transition"):
                wo.update_status(new)
            assert wo.status == current
            assert not wo.events

    def test_cancel_allowed_from_every_status(self):
        assert all(can_transition(s, S.CANCELLED) for s in S)

    def test_completed_is_terminal_except_cancel(self):
        assert ALLOWED_TRANSITIONS[S.COMPLETED] == frozenset({S.CANCELLED})

    def test_start_opens_actual_period(self):
        wo = _in_progress()
        assert wo.actual_period is not None
        assert wo.actual_period.is_open_ended

    def test_complete_closes_actual_period(self):
        wo = _in_progress()
        wo.update_status(S.COMPLETED)
        assert not wo.actual_period.is_open_ended

    def test_active_statuses(self):
        assert _wo(status=S.ON_HOLD).is_active
        assert not _wo(status=S.PENDING).is_active
        assert not _wo(status=S.COMPLETED).is_active


class TestTechnicianAssignment:

    def test_assign_moves_pending_to_assigned(self):
        wo = _wo()
        wo.assign_technician("tech-1")
        assert wo.assigned_technician_id == "tech-1"
        assert wo.status == S.ASSIGNED
        assert [type(e) for e in wo.events.pending] == [TechnicianAssigned, WorkOrderStatusChanged]

    def test_assign_in_progress_keeps_status(self):
        wo = _in_progress()
        wo.assign_technician("tech-2")
        assert wo.status == S.IN_PROGRESS
        [event] = wo.events.pending
        assert event.previous_technician_id == "tech-1"

    @pytest.mark.parametrize("status", [S.COMPLETED, S.CANCELLED])
    def test_assign_to_closed_work_order_rejected(self, status):
        with pytest.raises(StateConflictError, match="Cannot assign"):
            _wo(status=status).assign_technician("tech-1")

    def test_technician_required(self):
        with pytest.raises(ValidationError, match="Technician ID is required"):
            _wo().assign_technician("")

    def test_reassign_appends_audit_note(self):
        wo = _wo()
        wo.assign_technician("tech-1")
        wo.reassign_technician("tech-2", "Sick leave")
        assert wo.assigned_technician_id == "tech-2"
        assert "Reassigned from technician tech-1 to tech-2. Reason: Sick leave" in wo.diagnostic_notes

    def test_reassign_needs_reason(self):
        wo = _wo()
        wo.assign_technician("tech-1")
        with pytest.raises(ValidationError, match="reason is required"):
            wo.reassign_technician("tech-2", "")


class TestScheduleAndCost:

    def test_set_estimate(self):
        wo = _wo()
        wo.set_estimate(Decimal("6.5"), Money.of("780"))
        assert wo.estimated_labor_hours == Decimal("6.5")
        assert wo.estimated_cost == Money.of("780")

    def test_negative_hours_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            _wo().set_estimate(Decimal("-1"), Money.zero())

    def test_actual_time_only_when_completed(self):
        wo = _in_progress()
        with pytest.raises(StateConflictError, match="completed work orders"):
            wo.record_actual_time(Decimal("4"), Money.of("400"))
        wo.update_status(S.COMPLETED)
        wo.record_actual_time(Decimal("4"), Money.of("400"))
        assert wo.actual_labor_hours == Decimal("4")

    def test_delayed_when_past_schedule(self):
        wo = _wo()
        now = utc_now()
        wo.set_scheduled_period(now - timedelta(days=2), now - timedelta(days=1))
        assert wo.is_delayed
        wo.status = S.COMPLETED
        assert not wo.is_delayed

    def test_not_delayed_without_schedule(self):
        assert not _wo().is_delayed

    def test_schedule_end_before_start_rejected(self):
        now = utc_now()
        with pytest.raises(ValidationError):
            _wo().set_scheduled_period(now, now - timedelta(hours=1))


class TestRequiredParts:

    def test_add_and_mark_parts(self):
        wo = _wo()
        part = wo.add_required_part("P-100", 3)
        assert not wo.are_all_parts_available()
        wo.mark_part_reserved("P-100")
        assert part.is_available
        assert part.reserved_at is not None
        assert wo.are_all_parts_available()
        wo.mark_part_issued("P-100")
        assert part.issued_at is not None

    def test_unknown_part_rejected(self):
        with pytest.raises(ValidationError, match="not required"):
            _wo().mark_part_reserved("P-999")

    def test_non_positive_quantity_rejected(self):
        with pytest.raises(ValidationError, match="positive integer"):
            _wo().add_required_part("P-100", 0)

    def test_no_parts_means_all_available(self):
        assert _wo().are_all_parts_available()


class TestNotifications:

    def test_email_needs_address(self):
        with pytest.raises(ValidationError, match="recipient email"):
            _wo().record_notification(NotificationType.EMAIL, "Ready", "Your machine is ready")

    def test_sms_needs_phone(self):
        with pytest.raises(ValidationError, match="recipient phone"):
            _wo().record_notification(NotificationType.SMS, "Ready", "Your machine is ready")

    def test_record_and_mark(self):
        wo = _wo()
        n = wo.record_notification(NotificationType.PUSH, "Ready", "Done")
        assert wo.notifications == [n]
        n.mark_failed("gateway down")
        assert not n.was_successful
        n.mark_success()
        assert n.was_successful
        assert n.error_message is None
