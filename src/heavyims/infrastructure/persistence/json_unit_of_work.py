"""Unit of work over the single-document JSON store.

The document is read once when the unit of work is entered.  On commit only
aggregates that are new, or whose serialised form differs from what was
loaded, are written.  Each written row must still carry the version it was
loaded with, otherwise another writer got there first and the commit is
rejected as a whole.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import structlog

from heavyims.application.event_dispatcher import EventDispatcher
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.exceptions import ConcurrencyError, DuplicateInventoryError
from heavyims.domain.model.inventory import Inventory
from heavyims.domain.model.pending_events import HasPendingEvents
from heavyims.domain.model.technician import Technician
from heavyims.domain.model.work_order import WorkOrder
from heavyims.infrastructure.persistence.json_inventory_repository import JsonInventoryRepository
from heavyims.infrastructure.persistence.json_store import (
    SECTIONS,
    JsonDocumentStore,
    JsonSession,
)
from heavyims.infrastructure.persistence.json_technician_repository import JsonTechnicianRepository
from heavyims.infrastructure.persistence.json_work_order_repository import JsonWorkOrderRepository

logger = structlog.get_logger(__name__)

_SERIALIZERS: dict[type, tuple[str, Callable[[Any], dict]]] = {
    Inventory: ("inventory", JsonInventoryRepository.to_raw),
    WorkOrder: ("work_orders", JsonWorkOrderRepository.to_raw),
    Technician: ("technicians", JsonTechnicianRepository.to_raw),
}


class JsonUnitOfWork(AbstractUnitOfWork):

    def __init__(self, file_path: Path, dispatcher: EventDispatcher | None = None) -> None:
        super().__init__(dispatcher)
        self._store = JsonDocumentStore(file_path)
        self._session: JsonSession | None = None

    def _begin(self) -> None:
        self._session = JsonSession(self._store.read())
        self.inventory = JsonInventoryRepository(self._session, self.track)
        self.work_orders = JsonWorkOrderRepository(self._session, self.track)
        self.technicians = JsonTechnicianRepository(self._session, self.track)

    def _discard(self) -> None:
        self._session = None

    def _persist(self, aggregates: list[HasPendingEvents]) -> int:
        session = self._session
        if session is None:
            raise RuntimeError("Unit of work used outside a 'with' block")

        changes = []
        for aggregate in aggregates:
            section, to_raw = _SERIALIZERS[type(aggregate)]
            key = (section, aggregate.aggregate_id)
            raw = to_raw(aggregate)
            original = session.originals.get(key)
            if original is not None and raw == original:
                continue
            changes.append((section, key, aggregate, raw, original))

        if not changes:
            return 0

        with self._store.lock:
            document = self._store.read()
            for section, key, aggregate, raw, original in changes:
                _apply(document[section], SECTIONS[section], aggregate, raw, is_new=original is None)
            _check_unique_locations(document["inventory"])
            self._store.write(document)

        for section, key, aggregate, raw, original in changes:
            aggregate.version += 1
            session.originals[key] = _SERIALIZERS[type(aggregate)][1](aggregate)

        logger.debug("Wrote data file", path=str(self._store.file_path), rows=len(changes))
        return len(changes)


# --- Helpers ------------------------------------------------------------------


def _apply(rows: list[dict], id_field: str, aggregate: Any, raw: dict, is_new: bool) -> None:
    aggregate_id = raw[id_field]
    index = next((i for i, row in enumerate(rows) if row[id_field] == aggregate_id), None)
    written = dict(raw, version=aggregate.version + 1)

    if is_new:
        if index is not None:
            raise ConcurrencyError(f"{type(aggregate).__name__} {aggregate_id} already exists")
        rows.append(written)
        return

    if index is None:
        raise ConcurrencyError(f"{type(aggregate).__name__} {aggregate_id} was removed by another writer")
    stored_version = rows[index].get("version", 0)
    if stored_version != aggregate.version:
        raise ConcurrencyError(
            f"{type(aggregate).__name__} {aggregate_id} was modified by another writer "
            f"(loaded version {aggregate.version}, stored version {stored_version})"
        )
    rows[index] = written


def _check_unique_locations(rows: list[dict]) -> None:
    seen: set[tuple[str, str]] = set()
    for row in rows:
        key = (row["part_id"], row["warehouse"].lower())
        if key in seen:
            raise DuplicateInventoryError(
                f"Inventory already exists for part {row['part_id']} at {row['warehouse']}"
            )
        seen.add(key)
