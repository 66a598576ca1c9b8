"""Unit of work — the commit boundary for aggregates and their events.

Handlers open a unit of work, load or add aggregates through its
repositories, call domain methods, then ``commit()``.  Commit is the only
place domain events leave an aggregate:

1. collect pending events from every touched aggregate, in touch order;
2. persist all changes at once (``_persist``);
3. only if that succeeded, hand the events to the dispatcher;
4. clear the aggregates' queues.

If step 2 fails nothing is dispatched and the events stay queued, so the
caller can rerun the whole operation on fresh state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

from heavyims.application.event_dispatcher import EventDispatcher
from heavyims.domain.exceptions import DomainException, PersistenceError
from heavyims.domain.model.events import DomainEvent
from heavyims.domain.model.pending_events import HasPendingEvents
from heavyims.domain.repository.inventory_repository import InventoryRepository
from heavyims.domain.repository.technician_repository import TechnicianRepository
from heavyims.domain.repository.work_order_repository import WorkOrderRepository

logger = structlog.get_logger(__name__)


class AbstractUnitOfWork(ABC):
    inventory: InventoryRepository
    work_orders: WorkOrderRepository
    technicians: TechnicianRepository

    def __init__(self, dispatcher: EventDispatcher | None = None) -> None:
        self.dispatcher = dispatcher if dispatcher is not None else EventDispatcher()
        self._touched: dict[tuple[str, str], HasPendingEvents] = {}

    def __enter__(self) -> AbstractUnitOfWork:
        self._touched = {}
        self._begin()
        return self

    def __exit__(self, *args) -> None:
        self.rollback()

    # --- Tracking -------------------------------------------------------------

    def track(self, aggregate: HasPendingEvents) -> None:
        """Remember an aggregate so its events are collected on commit."""
        key = (type(aggregate).__name__, aggregate.aggregate_id)
        self._touched.setdefault(key, aggregate)

    @property
    def touched(self) -> list[HasPendingEvents]:
        return list(self._touched.values())

    def collect_events(self) -> list[DomainEvent]:
        return [event for aggregate in self.touched for event in aggregate.events.pending]

    # --- Commit boundary ------------------------------------------------------

    def commit(self) -> int:
        """Persist every change, then dispatch the events they raised.

        Returns the number of aggregates written.  Raises PersistenceError
        (or a subclass) if the store rejects the write; in that case no
        event is dispatched and none is cleared.
        """
        aggregates = self.touched
        events = self.collect_events()
        collected = [len(aggregate.events) for aggregate in aggregates]

        try:
            written = self._persist(aggregates)
        except DomainException as exc:
            logger.error("Commit failed", error=str(exc), pending_events=len(events))
            raise
        except Exception as exc:
            logger.error(
                "Commit failed", error=str(exc), pending_events=len(events), exc_info=True
            )
            raise PersistenceError(f"Could not persist changes: {exc}") from exc

        logger.info("Unit of work committed", aggregates=written, events=len(events))
        try:
            if events:
                self.dispatcher.dispatch(events)
        finally:
            for aggregate, count in zip(aggregates, collected):
                aggregate.events.clear(count)
                if aggregate.events:
                    logger.warning(
                        "Events raised during dispatch left pending",
                        aggregate_id=aggregate.aggregate_id,
                        pending_events=len(aggregate.events),
                    )
        return written

    save_changes = commit

    def rollback(self) -> None:
        """Forget everything tracked since the last ``__enter__``. Nothing is written."""
        self._touched = {}
        self._discard()

    # --- Storage hooks --------------------------------------------------------

    @abstractmethod
    def _begin(self) -> None:
        """Create fresh repositories wired to ``self.track``."""

    @abstractmethod
    def _persist(self, aggregates: list[HasPendingEvents]) -> int:
        """Write all changed aggregates atomically and return how many were written."""

    def _discard(self) -> None:
        """Drop any storage-level state held for this unit of work."""
