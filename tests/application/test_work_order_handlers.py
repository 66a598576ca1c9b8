"""Integration tests for the work order and technician use cases."""

from datetime import timedelta
from decimal import Decimal

import pytest

from heavyims.application.assign_technician import AssignTechnicianHandler
from heavyims.application.create_work_order import CreateWorkOrderHandler
from heavyims.application.dto import PartRequest
from heavyims.application.issue_parts import IssuePartsHandler
from heavyims.application.plan_work_order import (
    EstimateWorkOrderHandler,
    RecordActualTimeHandler,
    ScheduleWorkOrderHandler,
)
from heavyims.application.record_notification import RecordNotificationHandler
from heavyims.application.register_technician import (
    ListTechniciansHandler,
    RegisterTechnicianHandler,
    UpdateTechnicianStatusHandler,
)
from heavyims.application.reserve_work_order_parts import (
    IssueWorkOrderPartsHandler,
    ReserveWorkOrderPartsHandler,
)
from heavyims.application.show_work_order import ListWorkOrdersHandler, ShowWorkOrderHandler
from heavyims.application.update_work_order_status import UpdateWorkOrderStatusHandler
from heavyims.domain.exceptions import (
    EntityNotFoundError,
    StateConflictError,
    ValidationError,
)
from heavyims.domain.model.inventory import Inventory
from heavyims.domain.model.technician import Technician, TechnicianSkillLevel, TechnicianStatus
from heavyims.domain.model.value_objects import utc_now
from heavyims.domain.model.work_order import NotificationType, WorkOrderPriority, WorkOrderStatus
from tests.fakes import FakeUnitOfWork

VIN = "1HGBH41JXMN109186"


def _tech(first="Sam", skill=TechnicianSkillLevel.JUNIOR):
    return Technician.create(first, "Rivera", f"{first.lower()}@example.com", "555-0100", skill)


def _inventory(warehouse, on_hand, part_id="P-100"):
    inv = Inventory.create(part_id, warehouse, "A-01", 0, 100)
    inv.receive_parts(on_hand, "setup")
    inv.events.clear()
    return inv


def _create(uow, priority=WorkOrderPriority.NORMAL, **kwargs):
    return CreateWorkOrderHandler(uow).handle(
        VIN, "Excavator", "cust-1", "Hydraulic leak", "desk", priority=priority, **kwargs
    )


class TestCreateWorkOrder:

    def test_create(self):
        uow = FakeUnitOfWork()
        dto = _create(uow, equipment_model="CAT 320")
        assert dto.status == "PENDING"
        assert dto.equipment == f"CAT 320 Excavator ({VIN})"
        assert dto.work_order_id in uow.work_order_store

    def test_create_with_estimate(self):
        uow = FakeUnitOfWork()
        dto = _create(uow, estimated_labor_hours=Decimal("3"), estimated_cost=Decimal("450"))
        assert dto.estimated_labor_hours == "3"
        assert dto.estimated_cost == "450.00 USD"

    def test_invalid_input_commits_nothing(self):
        uow = FakeUnitOfWork()
        with pytest.raises(ValidationError):
            CreateWorkOrderHandler(uow).handle(VIN, "Excavator", "", "Leak", "desk")
        assert uow.work_order_store == {}


class TestAssignTechnician:

    def test_assign_by_number(self):
        tech = _tech()
        uow = FakeUnitOfWork(technicians=[tech])
        wo = _create(uow)

        dto = AssignTechnicianHandler(uow).handle(wo.work_order_number, tech.technician_id)

        assert dto.status == "ASSIGNED"
        assert dto.assigned_technician_id == tech.technician_id

    def test_capacity_enforced_and_busy_status(self):
        tech = _tech(skill=TechnicianSkillLevel.JUNIOR)
        uow = FakeUnitOfWork(technicians=[tech])
        first, second, third = _create(uow), _create(uow), _create(uow)
        assign = AssignTechnicianHandler(uow)

        assign.handle(first.work_order_id, tech.technician_id)
        assert tech.status == TechnicianStatus.AVAILABLE
        assign.handle(second.work_order_id, tech.technician_id)
        assert tech.status == TechnicianStatus.BUSY

        with pytest.raises(StateConflictError, match="full capacity"):
            assign.handle(third.work_order_id, tech.technician_id)
        assert uow.work_order_store[third.work_order_id].status == WorkOrderStatus.PENDING

    def test_completing_a_job_frees_capacity(self):
        tech = _tech()
        uow = FakeUnitOfWork(technicians=[tech])
        first, second = _create(uow), _create(uow)
        assign = AssignTechnicianHandler(uow)
        assign.handle(first.work_order_id, tech.technician_id)
        assign.handle(second.work_order_id, tech.technician_id)

        status = UpdateWorkOrderStatusHandler(uow)
        status.handle(first.work_order_id, WorkOrderStatus.IN_PROGRESS, "sam")
        status.handle(first.work_order_id, WorkOrderStatus.COMPLETED, "sam")

        assert tech.status == TechnicianStatus.AVAILABLE

    def test_same_technician_twice_rejected(self):
        tech = _tech()
        uow = FakeUnitOfWork(technicians=[tech])
        wo = _create(uow)
        AssignTechnicianHandler(uow).handle(wo.work_order_id, tech.technician_id)
        with pytest.raises(ValidationError, match="already assigned"):
            AssignTechnicianHandler(uow).handle(wo.work_order_id, tech.technician_id)

    def test_inactive_technician_rejected(self):
        tech = _tech()
        tech.deactivate()
        uow = FakeUnitOfWork(technicians=[tech])
        wo = _create(uow)
        with pytest.raises(StateConflictError, match="inactive"):
            AssignTechnicianHandler(uow).handle(wo.work_order_id, tech.technician_id)

    def test_reassign_requires_reason_and_frees_previous(self):
        sam = _tech("Sam")
        kim = _tech("Kim")
        uow = FakeUnitOfWork(technicians=[sam, kim])
        first, second = _create(uow), _create(uow)
        assign = AssignTechnicianHandler(uow)
        assign.handle(first.work_order_id, sam.technician_id)
        assign.handle(second.work_order_id, sam.technician_id)
        assert sam.status == TechnicianStatus.BUSY

        with pytest.raises(ValidationError, match="reason is required"):
            assign.handle(second.work_order_id, kim.technician_id)

        dto = assign.handle(second.work_order_id, kim.technician_id, reason="Workload")
        assert dto.assigned_technician_id == kim.technician_id
        assert "Reason: Workload" in dto.diagnostic_notes
        assert sam.status == TechnicianStatus.AVAILABLE

    def test_unknown_work_order(self):
        tech = _tech()
        uow = FakeUnitOfWork(technicians=[tech])
        with pytest.raises(EntityNotFoundError, match="Work order WO-2000-00000 not found"):
            AssignTechnicianHandler(uow).handle("WO-2000-00000", tech.technician_id)


class TestWorkOrderParts:

    def test_reserve_across_warehouses(self):
        north = _inventory("North", 3)
        south = _inventory("South", 10)
        uow = FakeUnitOfWork(inventory=[north, south])
        wo = _create(uow)

        allocations = ReserveWorkOrderPartsHandler(uow).handle(
            wo.work_order_id, [PartRequest("P-100", 5)], "alice"
        )

        assert [(a.warehouse, a.quantity) for a in allocations] == [("North", 3), ("South", 2)]
        stored = uow.work_order_store[wo.work_order_id]
        assert stored.are_all_parts_available()

    def test_one_short_part_reserves_nothing(self):
        bolts = _inventory("North", 50, part_id="BOLT")
        seals = _inventory("North", 1, part_id="SEAL")
        uow = FakeUnitOfWork(inventory=[bolts, seals])
        wo = _create(uow)

        with pytest.raises(StateConflictError, match="Insufficient stock"):
            ReserveWorkOrderPartsHandler(uow).handle(
                wo.work_order_id,
                [PartRequest("BOLT", 10), PartRequest("SEAL", 2)],
                "alice",
            )
        assert uow.commits == 1  # only the create

    def test_empty_request_rejected(self):
        uow = FakeUnitOfWork()
        with pytest.raises(ValidationError, match="at least one part"):
            ReserveWorkOrderPartsHandler(uow).handle("anything", [], "alice")

    def test_closed_work_order_rejected(self):
        uow = FakeUnitOfWork(inventory=[_inventory("North", 10)])
        wo = _create(uow)
        UpdateWorkOrderStatusHandler(uow).handle(wo.work_order_id, WorkOrderStatus.CANCELLED, "desk")
        with pytest.raises(StateConflictError, match="CANCELLED"):
            ReserveWorkOrderPartsHandler(uow).handle(
                wo.work_order_id, [PartRequest("P-100", 1)], "alice"
            )

    def test_issue_parts(self):
        north = _inventory("North", 10)
        uow = FakeUnitOfWork(inventory=[north])
        wo = _create(uow)
        ReserveWorkOrderPartsHandler(uow).handle(wo.work_order_id, [PartRequest("P-100", 4)], "a")

        issued = IssueWorkOrderPartsHandler(uow).handle(wo.work_order_id, "P-100", "bob")

        assert sum(a.quantity for a in issued) == 4
        assert north.quantity_on_hand == 6

    def test_cancel_releases_reservations(self):
        north = _inventory("North", 3)
        south = _inventory("South", 10)
        uow = FakeUnitOfWork(inventory=[north, south])
        wo = _create(uow)
        ReserveWorkOrderPartsHandler(uow).handle(wo.work_order_id, [PartRequest("P-100", 6)], "a")

        dto = UpdateWorkOrderStatusHandler(uow).handle(wo.work_order_id, WorkOrderStatus.CANCELLED, "desk")

        assert dto.status == "CANCELLED"
        assert north.quantity_reserved == 0
        assert south.quantity_reserved == 0
        assert south.available_quantity == 10

    def test_cancel_after_pooled_reservation_issued_elsewhere(self):
        north = _inventory("North", 5)
        uow = FakeUnitOfWork(inventory=[north])
        wo = _create(uow)
        ReserveWorkOrderPartsHandler(uow).handle(wo.work_order_id, [PartRequest("P-100", 5)], "a")
        IssuePartsHandler(uow).handle(north.inventory_id, 5, "other-wo", "bob")

        dto = UpdateWorkOrderStatusHandler(uow).handle(wo.work_order_id, WorkOrderStatus.CANCELLED, "desk")

        assert dto.status == "CANCELLED"
        assert north.quantity_reserved == 0
        assert north.quantity_on_hand == 0

    def test_issue_limited_to_stock_still_reserved(self):
        north = _inventory("North", 10)
        uow = FakeUnitOfWork(inventory=[north])
        wo = _create(uow)
        ReserveWorkOrderPartsHandler(uow).handle(wo.work_order_id, [PartRequest("P-100", 4)], "a")
        IssuePartsHandler(uow).handle(north.inventory_id, 3, "other-wo", "bob")

        issued = IssueWorkOrderPartsHandler(uow).handle(wo.work_order_id, "P-100", "carol")

        assert [a.quantity for a in issued] == [1]
        assert north.quantity_reserved == 0
        assert north.quantity_on_hand == 6


class TestStatusAndPlanning:

    def test_invalid_transition(self):
        uow = FakeUnitOfWork()
        wo = _create(uow)
        with pytest.raises(StateConflictError, match="Invalid status transition from PENDING to COMPLETED"):
            UpdateWorkOrderStatusHandler(uow).handle(wo.work_order_id, WorkOrderStatus.COMPLETED, "x")

    def test_schedule_and_estimate(self):
        uow = FakeUnitOfWork()
        wo = _create(uow)
        now = utc_now()
        ScheduleWorkOrderHandler(uow).handle(wo.work_order_id, now, now + timedelta(hours=8))
        dto = EstimateWorkOrderHandler(uow).handle(wo.work_order_id, Decimal("8"), Decimal("960"))
        assert dto.scheduled_period is not None
        assert dto.estimated_cost == "960.00 USD"

    def test_actual_time_after_completion(self):
        tech = _tech()
        uow = FakeUnitOfWork(technicians=[tech])
        wo = _create(uow)
        AssignTechnicianHandler(uow).handle(wo.work_order_id, tech.technician_id)
        status = UpdateWorkOrderStatusHandler(uow)
        status.handle(wo.work_order_id, WorkOrderStatus.IN_PROGRESS, "sam")

        with pytest.raises(StateConflictError):
            RecordActualTimeHandler(uow).handle(wo.work_order_id, Decimal("5"), Decimal("600"))

        status.handle(wo.work_order_id, WorkOrderStatus.COMPLETED, "sam")
        dto = RecordActualTimeHandler(uow).handle(wo.work_order_id, Decimal("5"), Decimal("600"))
        assert dto.actual_cost == "600.00 USD"

    def test_list_by_status_orders_by_priority(self):
        uow = FakeUnitOfWork()
        low = _create(uow, priority=WorkOrderPriority.LOW)
        critical = _create(uow, priority=WorkOrderPriority.CRITICAL)
        listed = ListWorkOrdersHandler(uow).handle(WorkOrderStatus.PENDING)
        assert [w.work_order_id for w in listed] == [critical.work_order_id, low.work_order_id]

    def test_list_delayed_only(self):
        uow = FakeUnitOfWork()
        late = _create(uow)
        _create(uow)
        now = utc_now()
        ScheduleWorkOrderHandler(uow).handle(
            late.work_order_id, now - timedelta(days=3), now - timedelta(days=1)
        )
        listed = ListWorkOrdersHandler(uow).handle(WorkOrderStatus.PENDING, delayed_only=True)
        assert [w.work_order_id for w in listed] == [late.work_order_id]

    def test_show_by_number(self):
        uow = FakeUnitOfWork()
        wo = _create(uow)
        assert ShowWorkOrderHandler(uow).handle(wo.work_order_number).work_order_id == wo.work_order_id


class TestNotifications:

    def test_record_sent_and_failed(self):
        uow = FakeUnitOfWork()
        wo = _create(uow)
        handler = RecordNotificationHandler(uow)
        handler.handle(
            wo.work_order_number, NotificationType.EMAIL, "Job started", "Work has begun",
            recipient_email="cust@example.com",
        )
        dto = handler.handle(
            wo.work_order_id, NotificationType.SMS, "Ready", "Pick up today",
            recipient_phone="555-0199", error_message="carrier rejected",
        )

        assert [(n.notification_type, n.recipient, n.was_successful) for n in dto.notifications] == [
            ("EMAIL", "cust@example.com", True),
            ("SMS", "555-0199", False),
        ]
        assert dto.notifications[1].error_message == "carrier rejected"

    def test_email_without_recipient_commits_nothing(self):
        uow = FakeUnitOfWork()
        wo = _create(uow)
        commits = uow.commits
        with pytest.raises(ValidationError, match="recipient email"):
            RecordNotificationHandler(uow).handle(wo.work_order_id, NotificationType.EMAIL, "Hi", "")
        assert uow.commits == commits


class TestTechnicianHandlers:

    def test_register(self):
        uow = FakeUnitOfWork()
        dto = RegisterTechnicianHandler(uow).handle(
            "Kim", "Lee", "kim@example.com", "555-0101", TechnicianSkillLevel.EXPERT
        )
        assert dto.max_concurrent_jobs == 5
        assert dto.workload_percentage == "0%"
        assert dto.technician_id in uow.technician_store

    def test_deactivate_via_status(self):
        tech = _tech()
        uow = FakeUnitOfWork(technicians=[tech])
        dto = UpdateTechnicianStatusHandler(uow).handle(tech.technician_id, TechnicianStatus.INACTIVE)
        assert not dto.is_active
        assert ListTechniciansHandler(uow).handle() == []
        assert len(ListTechniciansHandler(uow).handle(include_inactive=True)) == 1

    def test_list_reports_workload(self):
        tech = _tech(skill=TechnicianSkillLevel.SENIOR)
        uow = FakeUnitOfWork(technicians=[tech])
        wo = _create(uow)
        AssignTechnicianHandler(uow).handle(wo.work_order_id, tech.technician_id)
        [dto] = ListTechniciansHandler(uow).handle()
        assert dto.active_jobs == 1
        assert dto.workload_percentage == "25%"
