"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from heavyims.application.event_dispatcher import EventDispatcher
from heavyims.application.subscribers import LowStockAlertHandler, log_domain_event
from heavyims.domain.model.events import DomainEvent, InventoryLowStockDetected
from heavyims.infrastructure.config import Settings, load_settings
from heavyims.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork


def build_dispatcher() -> EventDispatcher:
    dispatcher = EventDispatcher()
    dispatcher.subscribe(DomainEvent, log_domain_event)
    dispatcher.subscribe(InventoryLowStockDetected, LowStockAlertHandler())
    return dispatcher


def unit_of_work(
    settings: Settings | None = None,
    dispatcher: EventDispatcher | None = None,
) -> JsonUnitOfWork:
    settings = settings or load_settings()
    return JsonUnitOfWork(
        settings.store_path,
        dispatcher if dispatcher is not None else build_dispatcher(),
    )
