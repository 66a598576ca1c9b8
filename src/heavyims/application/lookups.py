"""Load-or-fail helpers shared by the application services."""

from __future__ import annotations

from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.exceptions import EntityNotFoundError
from heavyims.domain.model.inventory import Inventory
from heavyims.domain.model.technician import Technician
from heavyims.domain.model.work_order import WorkOrder


def load_inventory(uow: AbstractUnitOfWork, inventory_id: str) -> Inventory:
    inventory = uow.inventory.get_by_id(inventory_id)
    if inventory is None:
        raise EntityNotFoundError(f"Inventory {inventory_id} not found")
    return inventory


def load_work_order(uow: AbstractUnitOfWork, reference: str) -> WorkOrder:
    """Accepts either the work order ID or its number (``WO-2025-12345``)."""
    work_order = uow.work_orders.get_by_id(reference) or uow.work_orders.get_by_number(reference)
    if work_order is None:
        raise EntityNotFoundError(f"Work order {reference} not found")
    return work_order


def load_technician(uow: AbstractUnitOfWork, technician_id: str) -> Technician:
    technician = uow.technicians.get_by_id(technician_id)
    if technician is None:
        raise EntityNotFoundError(f"Technician {technician_id} not found")
    return technician
