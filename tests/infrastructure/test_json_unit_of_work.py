"""Integration tests for the JSON document store and its unit of work."""

import json
from datetime import timedelta
from decimal import Decimal

import pytest

from heavyims.application.event_dispatcher import EventDispatcher
from heavyims.domain.exceptions import (
    ConcurrencyError,
    DuplicateInventoryError,
    PersistenceError,
)
from heavyims.domain.model.events import DomainEvent
from heavyims.domain.model.inventory import Inventory
from heavyims.domain.model.technician import Technician, TechnicianSkillLevel
from heavyims.domain.model.value_objects import Money, utc_now
from heavyims.domain.model.work_order import (
    NotificationType,
    WorkOrder,
    WorkOrderPriority,
    WorkOrderStatus,
)
from heavyims.infrastructure.persistence.json_store import JsonDocumentStore
from heavyims.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork
from tests.fakes import RecordingHandler

VIN = "1HGBH41JXMN109186"


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "data" / "heavyims.json"


def _seed_inventory(store_path, on_hand=20, warehouse="North"):
    inv = Inventory.create("P-100", warehouse, "A-01", 5, 50)
    inv.receive_parts(on_hand, "setup")
    with JsonUnitOfWork(store_path) as uow:
        uow.inventory.add(inv)
        uow.commit()
    return inv.inventory_id


class TestRoundTrip:

    def test_inventory_survives_reload(self, store_path):
        inventory_id = _seed_inventory(store_path)

        with JsonUnitOfWork(store_path) as uow:
            inv = uow.inventory.get_by_id(inventory_id)
            inv.reserve_parts(4, "wo-1", "alice")
            uow.commit()

        with JsonUnitOfWork(store_path) as uow:
            inv = uow.inventory.get_by_id(inventory_id)
            assert inv.quantity_on_hand == 20
            assert inv.quantity_reserved == 4
            assert inv.version == 2
            assert [t.transaction_type.value for t in inv.transactions] == ["Receipt", "Reservation"]
            assert inv.reserved_for("wo-1") == 4
            assert not inv.events

    def test_work_order_survives_reload(self, store_path):
        wo = WorkOrder.create(VIN, "Excavator", "CAT 320", "cust-1", "Leak", WorkOrderPriority.HIGH, "desk")
        wo.assign_technician("tech-1")
        wo.update_status(WorkOrderStatus.IN_PROGRESS)
        now = utc_now()
        wo.set_scheduled_period(now, now + timedelta(hours=4))
        wo.set_estimate(Decimal("4.5"), Money.of("540"))
        wo.add_required_part("P-100", 2)
        wo.record_notification(NotificationType.EMAIL, "Started", "Work began", recipient_email="c@example.com")

        with JsonUnitOfWork(store_path) as uow:
            uow.work_orders.add(wo)
            uow.commit()

        with JsonUnitOfWork(store_path) as uow:
            loaded = uow.work_orders.get_by_number(wo.work_order_number)
            assert loaded.work_order_id == wo.work_order_id
            assert loaded.status == WorkOrderStatus.IN_PROGRESS
            assert loaded.priority == WorkOrderPriority.HIGH
            assert loaded.equipment == wo.equipment
            assert loaded.actual_period.is_open_ended
            assert loaded.scheduled_period == wo.scheduled_period
            assert loaded.estimated_cost == Money.of("540")
            assert loaded.estimated_labor_hours == Decimal("4.5")
            assert [p.part_id for p in loaded.required_parts] == ["P-100"]
            assert loaded.notifications[0].recipient_email == "c@example.com"
            assert uow.work_orders.count_active_by_technician("tech-1") == 1

    def test_technician_survives_reload(self, store_path):
        tech = Technician.create("Kim", "Lee", "kim@example.com", "555", TechnicianSkillLevel.SENIOR)
        with JsonUnitOfWork(store_path) as uow:
            uow.technicians.add(tech)
            uow.commit()

        with JsonUnitOfWork(store_path) as uow:
            loaded = uow.technicians.get_by_id(tech.technician_id)
            assert loaded.full_name == "Kim Lee"
            assert loaded.skill_level == TechnicianSkillLevel.SENIOR
            assert loaded.max_concurrent_jobs == 4

    def test_identity_map_returns_same_object(self, store_path):
        inventory_id = _seed_inventory(store_path)
        with JsonUnitOfWork(store_path) as uow:
            a = uow.inventory.get_by_id(inventory_id)
            b = uow.inventory.list_by_part("P-100")[0]
            assert a is b

    def test_missing_file_reads_as_empty(self, store_path):
        with JsonUnitOfWork(store_path) as uow:
            assert uow.inventory.list_all() == []
            assert uow.commit() == 0
        assert not store_path.exists()


class TestCommitSemantics:

    def test_only_changed_aggregates_are_written(self, store_path):
        first = _seed_inventory(store_path, warehouse="North")
        _seed_inventory(store_path, warehouse="South")

        with JsonUnitOfWork(store_path) as uow:
            uow.inventory.list_all()
            uow.inventory.get_by_id(first).receive_parts(1, "clerk")
            assert uow.commit() == 1

    def test_events_dispatched_after_write(self, store_path):
        inventory_id = _seed_inventory(store_path, on_hand=8)
        dispatcher = EventDispatcher()
        seen_on_disk = []

        def check_disk(event):
            rows = json.loads(store_path.read_text())["inventory"]
            seen_on_disk.append(rows[0]["quantity_reserved"])

        dispatcher.subscribe(DomainEvent, check_disk)
        with JsonUnitOfWork(store_path, dispatcher) as uow:
            uow.inventory.get_by_id(inventory_id).reserve_parts(2, "wo-1", "alice")
            uow.commit()

        assert seen_on_disk == [2]

    def test_stale_write_rejected(self, store_path):
        inventory_id = _seed_inventory(store_path)
        recorder = RecordingHandler()
        dispatcher = EventDispatcher()
        dispatcher.subscribe(DomainEvent, recorder)

        first = JsonUnitOfWork(store_path)
        second = JsonUnitOfWork(store_path, dispatcher)
        with first, second:
            first.inventory.get_by_id(inventory_id).reserve_parts(5, "wo-1", "alice")
            stale = second.inventory.get_by_id(inventory_id)
            stale.reserve_parts(10, "wo-2", "bob")

            first.commit()
            with pytest.raises(ConcurrencyError, match="modified by another writer"):
                second.commit()

            assert recorder.received == []
            assert len(stale.events.pending) == 1

        with JsonUnitOfWork(store_path) as uow:
            assert uow.inventory.get_by_id(inventory_id).quantity_reserved == 5

    def test_duplicate_location_rejected_on_commit(self, store_path):
        _seed_inventory(store_path, warehouse="North")
        with JsonUnitOfWork(store_path) as uow:
            uow.inventory.add(Inventory.create("P-100", "north", "Z-01", 0, 10))
            with pytest.raises(DuplicateInventoryError):
                uow.commit()

        with JsonUnitOfWork(store_path) as uow:
            assert len(uow.inventory.list_all()) == 1

    def test_failed_commit_leaves_file_untouched(self, store_path):
        _seed_inventory(store_path)
        before = store_path.read_bytes()
        with JsonUnitOfWork(store_path) as uow:
            uow.inventory.add(Inventory.create("P-100", "NORTH", "Z-01", 0, 10))
            with pytest.raises(PersistenceError):
                uow.commit()
        assert store_path.read_bytes() == before
        assert [p.name for p in store_path.parent.iterdir()] == [store_path.name]


class TestDocumentStore:

    def test_corrupt_file_raises_persistence_error(self, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text("{not json")
        with pytest.raises(PersistenceError, match="not valid JSON"):
            JsonDocumentStore(store_path).read()

    def test_write_creates_directory_and_sections(self, store_path):
        store = JsonDocumentStore(store_path)
        store.write({"inventory": []})
        document = store.read()
        assert set(document) == {"inventory", "work_orders", "technicians"}
