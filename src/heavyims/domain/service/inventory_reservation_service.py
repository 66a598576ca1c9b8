"""Domain service: reserving parts for a work order across warehouses.

A part may be stocked at several warehouses, each with its own Inventory
aggregate.  This service spreads one request over those locations and keeps
the work order's parts list in step.

Reservation is two-phase (validate-then-mutate) so a request that cannot be
met leaves every location untouched.  All locations are saved by the same
unit of work commit; there is no consistency across separate commits.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from heavyims.domain.exceptions import EntityNotFoundError, StateConflictError, ValidationError
from heavyims.domain.model.inventory import Inventory
from heavyims.domain.model.work_order import WorkOrder
from heavyims.domain.repository.inventory_repository import InventoryRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Allocation:
    """How much of a request one location covered."""

    inventory_id: str
    warehouse: str
    quantity: int


class InventoryReservationService:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def reserve_for_work_order(
        self,
        work_order: WorkOrder,
        part_id: str,
        quantity: int,
        reserved_by: str,
    ) -> list[Allocation]:
        """Reserve ``quantity`` of a part for a work order.

        Phase 1 — load the part's active locations and check that together
                  they have enough available.  Fails before any mutation.
        Phase 2 — reserve greedily, location by location in warehouse order.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("Quantity must be positive")

        # Phase 1: load and validate
        locations = self._active_locations(part_id)
        total_available = sum(inv.available_quantity for inv in locations)
        if quantity > total_available:
            raise StateConflictError(
                f"Insufficient stock for part {part_id} "
                f"(need {quantity}, have {total_available} available across "
                f"{len(locations)} warehouse(s))"
            )

        # Phase 2: mutate
        allocations: list[Allocation] = []
        remaining = quantity
        for inv in locations:
            if remaining == 0:
                break
            take = min(remaining, inv.available_quantity)
            if take <= 0:
                continue
            inv.reserve_parts(take, work_order.work_order_id, reserved_by)
            self._inventory_repo.update(inv)
            allocations.append(Allocation(inv.inventory_id, inv.warehouse, take))
            remaining -= take

        if not any(p.part_id == part_id for p in work_order.required_parts):
            work_order.add_required_part(part_id, quantity)
        work_order.mark_part_reserved(part_id)

        logger.info(
            "Parts reserved for work order",
            work_order_number=work_order.work_order_number,
            part_id=part_id,
            quantity=quantity,
            locations=len(allocations),
        )
        return allocations

    def release_for_work_order(self, work_order: WorkOrder, part_id: str, released_by: str) -> list[Allocation]:
        """Give back everything still held for the work order, e.g. on cancellation."""
        released: list[Allocation] = []
        for inv in self._inventory_repo.list_by_part(part_id):
            held = _held_for(inv, work_order)
            if held <= 0:
                continue
            inv.release_reservation(held, work_order.work_order_id, released_by)
            self._inventory_repo.update(inv)
            released.append(Allocation(inv.inventory_id, inv.warehouse, held))
        return released

    def issue_for_work_order(self, work_order: WorkOrder, part_id: str, issued_by: str) -> list[Allocation]:
        """Issue every reservation held for the work order and mark the part issued."""
        if not any(p.part_id == part_id for p in work_order.required_parts):
            raise ValidationError(f"Part ID '{part_id}' is not required by this work order")

        issued: list[Allocation] = []
        for inv in self._inventory_repo.list_by_part(part_id):
            held = _held_for(inv, work_order)
            if held <= 0:
                continue
            inv.issue_parts(held, work_order.work_order_id, issued_by)
            self._inventory_repo.update(inv)
            issued.append(Allocation(inv.inventory_id, inv.warehouse, held))

        if not issued:
            raise StateConflictError(
                f"No reserved stock of part {part_id} for work order {work_order.work_order_number}"
            )
        work_order.mark_part_issued(part_id)
        return issued

    # --- Internal helpers -----------------------------------------------------

    def _active_locations(self, part_id: str) -> list[Inventory]:
        locations = [inv for inv in self._inventory_repo.list_by_part(part_id) if inv.is_active]
        if not locations:
            raise EntityNotFoundError(f"No inventory record for part '{part_id}'")
        return sorted(locations, key=lambda inv: inv.warehouse)


def _held_for(inv: Inventory, work_order: WorkOrder) -> int:
    # the pooled reservation may already have been issued to another work order
    return min(inv.reserved_for(work_order.work_order_id), inv.quantity_reserved)
