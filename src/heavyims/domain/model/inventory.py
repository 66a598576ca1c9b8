"""Inventory aggregate — stock levels and movements for one part at one warehouse.

Each (part, warehouse) pair has exactly one Inventory.  It is the only
authority over the quantities stored there: every movement goes through one
of its methods, appends exactly one ``InventoryTransaction`` to the audit
trail and, where other subsystems care, records a domain event.

All checks run before any field is touched, so a call that raises leaves the
quantities, the transaction list and the pending events exactly as they were.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from heavyims.domain.exceptions import StateConflictError, ValidationError
from heavyims.domain.model.events import (
    InventoryAdjusted,
    InventoryIssued,
    InventoryLowStockDetected,
    InventoryReceived,
    InventoryReserved,
    InventoryReturned,
)
from heavyims.domain.model.pending_events import PendingEvents
from heavyims.domain.model.value_objects import new_id, utc_now


class TransactionType(Enum):
    RECEIPT = "Receipt"
    ISSUE = "Issue"
    RESERVATION = "Reservation"
    RELEASE = "Release"
    ADJUSTMENT = "Adjustment"
    RETURN = "Return"


@dataclass(frozen=True)
class InventoryTransaction:
    """Audit record of a single stock movement.

    ``quantity`` is signed: positive for increases (receipts, reservations,
    returns), negative for decreases (issues, releases), and the signed
    difference for adjustments.
    """

    transaction_id: str
    inventory_id: str
    transaction_type: TransactionType
    quantity: int
    notes: str
    transaction_by: str
    work_order_id: str | None = None
    reference_number: str = ""
    transaction_date: datetime = field(default_factory=utc_now)

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def reservation(inventory_id: str, quantity: int, work_order_id: str, by: str) -> InventoryTransaction:
        return InventoryTransaction(
            transaction_id=new_id(),
            inventory_id=inventory_id,
            transaction_type=TransactionType.RESERVATION,
            quantity=quantity,
            work_order_id=work_order_id,
            notes=f"Reserved {quantity} parts for work order",
            transaction_by=by,
        )

    @staticmethod
    def release(inventory_id: str, quantity: int, work_order_id: str, by: str) -> InventoryTransaction:
        return InventoryTransaction(
            transaction_id=new_id(),
            inventory_id=inventory_id,
            transaction_type=TransactionType.RELEASE,
            quantity=-quantity,
            work_order_id=work_order_id,
            notes=f"Released {quantity} parts reservation",
            transaction_by=by,
        )

    @staticmethod
    def issue(inventory_id: str, quantity: int, work_order_id: str, by: str) -> InventoryTransaction:
        return InventoryTransaction(
            transaction_id=new_id(),
            inventory_id=inventory_id,
            transaction_type=TransactionType.ISSUE,
            quantity=-quantity,
            work_order_id=work_order_id,
            notes=f"Issued {quantity} parts to work order",
            transaction_by=by,
        )

    @staticmethod
    def receipt(inventory_id: str, quantity: int, by: str, reference_number: str | None) -> InventoryTransaction:
        return InventoryTransaction(
            transaction_id=new_id(),
            inventory_id=inventory_id,
            transaction_type=TransactionType.RECEIPT,
            quantity=quantity,
            reference_number=reference_number or "",
            notes=f"Received {quantity} parts",
            transaction_by=by,
        )

    @staticmethod
    def returned(
        inventory_id: str, quantity: int, work_order_id: str, by: str, notes: str | None
    ) -> InventoryTransaction:
        return InventoryTransaction(
            transaction_id=new_id(),
            inventory_id=inventory_id,
            transaction_type=TransactionType.RETURN,
            quantity=quantity,
            work_order_id=work_order_id,
            notes=notes or f"Returned {quantity} parts from work order",
            transaction_by=by,
        )

    @staticmethod
    def adjustment(inventory_id: str, difference: int, reason: str, by: str) -> InventoryTransaction:
        return InventoryTransaction(
            transaction_id=new_id(),
            inventory_id=inventory_id,
            transaction_type=TransactionType.ADJUSTMENT,
            quantity=difference,
            notes=reason,
            transaction_by=by,
        )


@dataclass(eq=False)
class Inventory:
    """Aggregate root for stock at one warehouse location.

    Invariants:
    - ``quantity_reserved`` never exceeds ``quantity_on_hand``
    - both quantities are >= 0
    - ``maximum_stock_level`` >= ``minimum_stock_level`` >= 0

    Use ``Inventory.create()`` for new locations.  ``__init__`` stays plain so
    the repository can reconstitute persisted rows without re-validating.
    """

    inventory_id: str
    part_id: str
    warehouse: str
    bin_location: str
    minimum_stock_level: int
    maximum_stock_level: int
    reorder_quantity: int
    quantity_on_hand: int = 0
    quantity_reserved: int = 0
    is_active: bool = True
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime | None = None
    version: int = 0
    transactions: list[InventoryTransaction] = field(default_factory=list)
    events: PendingEvents = field(default_factory=PendingEvents, repr=False)

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def create(
        part_id: str,
        warehouse: str,
        bin_location: str,
        minimum_stock_level: int,
        maximum_stock_level: int,
    ) -> Inventory:
        """Open a new, empty inventory location for a part."""
        if not part_id or not str(part_id).strip():
            raise ValidationError("Part ID is required")
        if not warehouse or not warehouse.strip():
            raise ValidationError("Warehouse is required")
        _check_stock_levels(minimum_stock_level, maximum_stock_level)

        return Inventory(
            inventory_id=new_id(),
            part_id=str(part_id).strip(),
            warehouse=warehouse.strip(),
            bin_location=(bin_location or "").strip(),
            minimum_stock_level=minimum_stock_level,
            maximum_stock_level=maximum_stock_level,
            reorder_quantity=maximum_stock_level - minimum_stock_level,
        )

    @property
    def aggregate_id(self) -> str:
        return self.inventory_id

    # --- Queries --------------------------------------------------------------

    @property
    def available_quantity(self) -> int:
        return self.quantity_on_hand - self.quantity_reserved

    def is_low_stock(self) -> bool:
        return self.available_quantity <= self.minimum_stock_level

    def is_out_of_stock(self) -> bool:
        return self.available_quantity <= 0

    def calculate_reorder_quantity(self) -> int:
        """How many to order to bring available stock back up to the maximum."""
        if not self.is_low_stock():
            return 0
        return self.maximum_stock_level - self.available_quantity

    def reserved_for(self, work_order_id: str) -> int:
        """Quantity still held here for one work order (reserved, not yet released or issued)."""
        held = 0
        for tx in self.transactions:
            if tx.work_order_id != work_order_id:
                continue
            if tx.transaction_type in (
                TransactionType.RESERVATION,
                TransactionType.RELEASE,
                TransactionType.ISSUE,
            ):
                held += tx.quantity
        return max(held, 0)

    # --- Stock movements ------------------------------------------------------

    def reserve_parts(self, quantity: int, work_order_id: str, requested_by: str) -> None:
        """Put stock on hold for a work order without removing it."""
        _require_positive(quantity)
        _require_reference(work_order_id, "Work order ID")
        self._ensure_active()
        if quantity > self.available_quantity:
            raise StateConflictError(
                f"Cannot reserve {quantity} parts at {self.warehouse}. "
                f"Only {self.available_quantity} available."
            )

        self.quantity_reserved += quantity
        self._append(
            InventoryTransaction.reservation(self.inventory_id, quantity, work_order_id, requested_by)
        )
        self.events.record(
            InventoryReserved(
                inventory_id=self.inventory_id,
                part_id=self.part_id,
                work_order_id=work_order_id,
                warehouse=self.warehouse,
                quantity_reserved=quantity,
                remaining_available=self.available_quantity,
            )
        )

    def release_reservation(self, quantity: int, work_order_id: str, released_by: str) -> None:
        """Return held stock to available, e.g. when a work order is cancelled."""
        _require_positive(quantity)
        _require_reference(work_order_id, "Work order ID")
        self._ensure_active()
        if quantity > self.quantity_reserved:
            raise StateConflictError(
                f"Cannot release {quantity} parts. Only {self.quantity_reserved} reserved."
            )

        self.quantity_reserved -= quantity
        self._append(
            InventoryTransaction.release(self.inventory_id, quantity, work_order_id, released_by)
        )

    def issue_parts(self, quantity: int, work_order_id: str, issued_by: str) -> None:
        """Hand reserved stock to a technician.

        Decreases both on-hand and reserved, then re-evaluates low stock.
        """
        _require_positive(quantity)
        _require_reference(work_order_id, "Work order ID")
        self._ensure_active()
        if quantity > self.quantity_reserved:
            raise StateConflictError(
                f"Cannot issue {quantity} parts. Only {self.quantity_reserved} reserved."
            )
        if quantity > self.quantity_on_hand:
            raise StateConflictError(
                f"Cannot issue {quantity} parts. Only {self.quantity_on_hand} on hand."
            )

        self.quantity_on_hand -= quantity
        self.quantity_reserved -= quantity
        self._append(
            InventoryTransaction.issue(self.inventory_id, quantity, work_order_id, issued_by)
        )
        self.events.record(
            InventoryIssued(
                inventory_id=self.inventory_id,
                part_id=self.part_id,
                work_order_id=work_order_id,
                warehouse=self.warehouse,
                quantity_issued=quantity,
                remaining_on_hand=self.quantity_on_hand,
            )
        )
        self._check_low_stock()

    def receive_parts(self, quantity: int, received_by: str, reference_number: str | None = None) -> None:
        """Book parts arriving from a supplier."""
        _require_positive(quantity)
        self._ensure_active()

        self.quantity_on_hand += quantity
        self._append(
            InventoryTransaction.receipt(self.inventory_id, quantity, received_by, reference_number)
        )
        self.events.record(
            InventoryReceived(
                inventory_id=self.inventory_id,
                part_id=self.part_id,
                warehouse=self.warehouse,
                quantity_received=quantity,
                new_quantity_on_hand=self.quantity_on_hand,
                reference_number=reference_number or "",
            )
        )

    def return_parts(
        self,
        quantity: int,
        work_order_id: str,
        returned_by: str,
        notes: str | None = None,
    ) -> None:
        """Put unused, previously issued parts back on the shelf."""
        _require_positive(quantity)
        _require_reference(work_order_id, "Work order ID")
        self._ensure_active()

        self.quantity_on_hand += quantity
        self._append(
            InventoryTransaction.returned(self.inventory_id, quantity, work_order_id, returned_by, notes)
        )
        self.events.record(
            InventoryReturned(
                inventory_id=self.inventory_id,
                part_id=self.part_id,
                work_order_id=work_order_id,
                warehouse=self.warehouse,
                quantity_returned=quantity,
                new_quantity_on_hand=self.quantity_on_hand,
            )
        )

    def adjust_quantity(self, new_quantity: int, reason: str, adjusted_by: str) -> None:
        """Correct on-hand stock after a physical count.

        Cannot go below what is already promised to work orders.
        """
        _require_int(new_quantity)
        if new_quantity < 0:
            raise ValidationError("Quantity cannot be negative")
        if not reason or not reason.strip():
            raise ValidationError("Adjustment reason is required")
        self._ensure_active()
        if new_quantity < self.quantity_reserved:
            raise StateConflictError(
                f"Cannot adjust to {new_quantity}. {self.quantity_reserved} parts are reserved."
            )

        old_quantity = self.quantity_on_hand
        difference = new_quantity - old_quantity
        self.quantity_on_hand = new_quantity
        self._append(
            InventoryTransaction.adjustment(self.inventory_id, difference, reason.strip(), adjusted_by)
        )
        self.events.record(
            InventoryAdjusted(
                inventory_id=self.inventory_id,
                part_id=self.part_id,
                warehouse=self.warehouse,
                old_quantity=old_quantity,
                new_quantity=new_quantity,
                difference=difference,
                reason=reason.strip(),
            )
        )
        self._check_low_stock()

    # --- Location management --------------------------------------------------

    def update_stock_levels(
        self, minimum_stock_level: int, maximum_stock_level: int, reorder_quantity: int
    ) -> None:
        _check_stock_levels(minimum_stock_level, maximum_stock_level)
        _require_int(reorder_quantity)
        if reorder_quantity < 0:
            raise ValidationError("Reorder quantity cannot be negative")

        self.minimum_stock_level = minimum_stock_level
        self.maximum_stock_level = maximum_stock_level
        self.reorder_quantity = reorder_quantity
        self.updated_at = utc_now()

    def move_to_bin_location(self, new_bin_location: str, moved_by: str) -> None:
        if not new_bin_location or not new_bin_location.strip():
            raise ValidationError("Bin location is required")
        self._ensure_active()

        old_location = self.bin_location
        self.bin_location = new_bin_location.strip()
        self._append(
            InventoryTransaction.adjustment(
                self.inventory_id,
                0,
                f"Moved from {old_location} to {self.bin_location}",
                moved_by,
            )
        )

    def deactivate(self) -> None:
        """Close this location. Only an empty, unpromised location can be closed."""
        if self.quantity_on_hand > 0:
            raise StateConflictError(
                f"Cannot deactivate inventory with {self.quantity_on_hand} parts on hand. "
                "Transfer or adjust to zero first."
            )
        if self.quantity_reserved > 0:
            raise StateConflictError(
                f"Cannot deactivate inventory with {self.quantity_reserved} parts reserved."
            )
        self.is_active = False
        self.updated_at = utc_now()

    # --- Internal helpers -----------------------------------------------------

    def _append(self, transaction: InventoryTransaction) -> None:
        self.transactions.append(transaction)
        self.updated_at = transaction.transaction_date

    def _ensure_active(self) -> None:
        if not self.is_active:
            raise StateConflictError(
                f"Inventory location {self.part_id}@{self.warehouse} is deactivated"
            )

    def _check_low_stock(self) -> None:
        if self.is_low_stock():
            self.events.record(
                InventoryLowStockDetected(
                    inventory_id=self.inventory_id,
                    part_id=self.part_id,
                    warehouse=self.warehouse,
                    current_quantity=self.available_quantity,
                    minimum_stock_level=self.minimum_stock_level,
                    reorder_quantity=self.reorder_quantity,
                )
            )


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _require_int(value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Quantity must be an integer, got {type(value).__name__}")


def _require_positive(quantity: int) -> None:
    _require_int(quantity)
    if quantity <= 0:
        raise ValidationError("Quantity must be positive")


def _require_reference(value: str, label: str) -> None:
    if not value or not str(value).strip():
        raise ValidationError(f"{label} is required")


def _check_stock_levels(minimum: int, maximum: int) -> None:
    _require_int(minimum)
    _require_int(maximum)
    if minimum < 0:
        raise ValidationError("Minimum stock level cannot be negative")
    if maximum < minimum:
        raise ValidationError("Maximum stock level must be >= minimum")
