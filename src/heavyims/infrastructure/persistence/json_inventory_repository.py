"""JSON-document-backed implementation of InventoryRepository."""

from __future__ import annotations

from datetime import datetime

from heavyims.domain.model.inventory import Inventory, InventoryTransaction, TransactionType
from heavyims.domain.repository.inventory_repository import InventoryRepository
from heavyims.domain.repository.tracking import Tracker
from heavyims.infrastructure.persistence.json_store import JsonSession

SECTION = "inventory"


class JsonInventoryRepository(InventoryRepository):

    def __init__(self, session: JsonSession, track: Tracker | None = None) -> None:
        super().__init__(track)
        self._session = session

    # --- InventoryRepository interface ----------------------------------------

    def get_by_id(self, inventory_id: str) -> Inventory | None:
        for inv in self._all():
            if inv.inventory_id == inventory_id:
                return self._seen(inv)
        return None

    def get_by_part_and_warehouse(self, part_id: str, warehouse: str) -> Inventory | None:
        for inv in self._all():
            if inv.part_id == part_id and inv.warehouse.lower() == warehouse.strip().lower():
                return self._seen(inv)
        return None

    def list_by_part(self, part_id: str) -> list[Inventory]:
        items = [inv for inv in self._all() if inv.part_id == part_id]
        return self._seen_all(sorted(items, key=lambda inv: inv.warehouse))

    def list_by_warehouse(self, warehouse: str) -> list[Inventory]:
        wanted = warehouse.strip().lower()
        return self._seen_all(inv for inv in self._all() if inv.warehouse.lower() == wanted)

    def list_all(self) -> list[Inventory]:
        return self._seen_all(self._all())

    def add(self, inventory: Inventory) -> None:
        self._session.add(SECTION, inventory.inventory_id, inventory)
        self._seen(inventory)

    def update(self, inventory: Inventory) -> None:
        self._seen(inventory)

    def _all(self) -> list[Inventory]:
        return self._session.all(SECTION, self.to_domain)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def to_raw(inv: Inventory) -> dict:
        return {
            "inventory_id": inv.inventory_id,
            "part_id": inv.part_id,
            "warehouse": inv.warehouse,
            "bin_location": inv.bin_location,
            "quantity_on_hand": inv.quantity_on_hand,
            "quantity_reserved": inv.quantity_reserved,
            "minimum_stock_level": inv.minimum_stock_level,
            "maximum_stock_level": inv.maximum_stock_level,
            "reorder_quantity": inv.reorder_quantity,
            "is_active": inv.is_active,
            "created_at": inv.created_at.isoformat(),
            "updated_at": inv.updated_at.isoformat() if inv.updated_at else None,
            "version": inv.version,
            "transactions": [
                {
                    "transaction_id": tx.transaction_id,
                    "transaction_type": tx.transaction_type.value,
                    "quantity": tx.quantity,
                    "work_order_id": tx.work_order_id,
                    "reference_number": tx.reference_number,
                    "notes": tx.notes,
                    "transaction_date": tx.transaction_date.isoformat(),
                    "transaction_by": tx.transaction_by,
                }
                for tx in inv.transactions
            ],
        }

    @staticmethod
    def to_domain(raw: dict) -> Inventory:
        updated_at = raw.get("updated_at")
        return Inventory(
            inventory_id=raw["inventory_id"],
            part_id=raw["part_id"],
            warehouse=raw["warehouse"],
            bin_location=raw.get("bin_location", ""),
            minimum_stock_level=raw["minimum_stock_level"],
            maximum_stock_level=raw["maximum_stock_level"],
            reorder_quantity=raw.get("reorder_quantity", 0),
            quantity_on_hand=raw.get("quantity_on_hand", 0),
            quantity_reserved=raw.get("quantity_reserved", 0),
            is_active=raw.get("is_active", True),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
            version=raw.get("version", 0),
            transactions=[
                InventoryTransaction(
                    transaction_id=tx["transaction_id"],
                    inventory_id=raw["inventory_id"],
                    transaction_type=TransactionType(tx["transaction_type"]),
                    quantity=tx["quantity"],
                    work_order_id=tx.get("work_order_id"),
                    reference_number=tx.get("reference_number", ""),
                    notes=tx.get("notes", ""),
                    transaction_date=datetime.fromisoformat(tx["transaction_date"]),
                    transaction_by=tx.get("transaction_by", ""),
                )
                for tx in raw.get("transactions", [])
            ],
        )
