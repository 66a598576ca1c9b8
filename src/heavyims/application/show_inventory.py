"""Application services: inventory queries.

Read-only: these open a unit of work to load aggregates but never commit.
"""

from __future__ import annotations

from itertools import groupby

from heavyims.application.dto import (
    InventoryDTO,
    InventoryTransactionDTO,
    InventoryWithTransactionsDTO,
    LowStockAlertDTO,
    WarehouseSummaryDTO,
)
from heavyims.application.lookups import load_inventory
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.model.inventory import Inventory


class ShowInventoryHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        part_id: str | None = None,
        warehouse: str | None = None,
    ) -> list[InventoryDTO]:
        """List locations, optionally narrowed to a part and/or a warehouse."""
        with self._uow as uow:
            if part_id and warehouse:
                inv = uow.inventory.get_by_part_and_warehouse(part_id, warehouse)
                items = [inv] if inv is not None else []
            elif part_id:
                items = uow.inventory.list_by_part(part_id)
            elif warehouse:
                items = uow.inventory.list_by_warehouse(warehouse)
            else:
                items = uow.inventory.list_all()
            return [InventoryDTO.from_domain(inv) for inv in items]

    def get(self, inventory_id: str) -> InventoryDTO:
        with self._uow as uow:
            return InventoryDTO.from_domain(load_inventory(uow, inventory_id))

    def total_available(self, part_id: str) -> int:
        """Available quantity of a part summed over every active location."""
        with self._uow as uow:
            return sum(
                inv.available_quantity for inv in uow.inventory.list_by_part(part_id) if inv.is_active
            )


class ShowTransactionsHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, inventory_id: str) -> InventoryWithTransactionsDTO:
        with self._uow as uow:
            inventory = load_inventory(uow, inventory_id)
            return InventoryWithTransactionsDTO(
                inventory=InventoryDTO.from_domain(inventory),
                transactions=[
                    InventoryTransactionDTO.from_domain(tx) for tx in inventory.transactions
                ],
            )


class LowStockAlertsHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[LowStockAlertDTO]:
        with self._uow as uow:
            return [
                LowStockAlertDTO(
                    inventory_id=inv.inventory_id,
                    part_id=inv.part_id,
                    warehouse=inv.warehouse,
                    current_quantity=inv.available_quantity,
                    minimum_stock_level=inv.minimum_stock_level,
                    reorder_quantity=inv.calculate_reorder_quantity(),
                )
                for inv in uow.inventory.list_all()
                if inv.is_active and inv.is_low_stock()
            ]


class WarehouseSummaryHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, warehouse: str | None = None) -> list[WarehouseSummaryDTO]:
        """One summary per warehouse, or just the one asked for."""
        with self._uow as uow:
            if warehouse:
                return [_summarise(warehouse, uow.inventory.list_by_warehouse(warehouse))]

            items = sorted(uow.inventory.list_all(), key=lambda inv: inv.warehouse)
            return [
                _summarise(name, list(group))
                for name, group in groupby(items, key=lambda inv: inv.warehouse)
            ]


# --- Helpers ------------------------------------------------------------------


def _summarise(warehouse: str, items: list[Inventory]) -> WarehouseSummaryDTO:
    active = [inv for inv in items if inv.is_active]
    return WarehouseSummaryDTO(
        warehouse=warehouse,
        total_parts=len(active),
        total_quantity_on_hand=sum(inv.quantity_on_hand for inv in active),
        total_quantity_reserved=sum(inv.quantity_reserved for inv in active),
        total_available=sum(inv.available_quantity for inv in active),
        low_stock_count=sum(1 for inv in active if inv.is_low_stock()),
        out_of_stock_count=sum(1 for inv in active if inv.is_out_of_stock()),
    )
