"""In-process domain event dispatcher.

Subscribers are plain callables registered per event class.  A subscriber
registered for a base class (``DomainEvent`` itself, say) also receives every
subclass.  Events are delivered synchronously in the order given; for one
event, handlers of the most specific class run first, each group in
subscription order.

A failing subscriber never stops delivery to the others and never reaches
the caller: the failure is logged and kept on ``dead_letters`` until an
operator calls ``redeliver()``.
"""

from __future__ import annotations

from typing import Callable, Iterable

import structlog

from heavyims.domain.exceptions import DispatchError
from heavyims.domain.model.events import DomainEvent

logger = structlog.get_logger(__name__)

EventHandler = Callable[[DomainEvent], None]


def handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", type(handler).__name__)


class EventDispatcher:

    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = {}
        self.dead_letters: list[DispatchError] = []

    # --- Registry -------------------------------------------------------------

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        if not (isinstance(event_type, type) and issubclass(event_type, DomainEvent)):
            raise TypeError(f"{event_type!r} is not a DomainEvent class")
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> bool:
        """Remove a subscription. Returns False if it was not registered."""
        handlers = self._handlers.get(event_type, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def handlers_for(self, event: DomainEvent) -> list[EventHandler]:
        found: list[EventHandler] = []
        for cls in type(event).__mro__:
            for handler in self._handlers.get(cls, []):
                if handler not in found:
                    found.append(handler)
        return found

    # --- Delivery -------------------------------------------------------------

    def dispatch(self, events: Iterable[DomainEvent]) -> None:
        event_list = list(events)
        if not event_list:
            logger.debug("No domain events to dispatch")
            return

        logger.info("Dispatching domain events", count=len(event_list))
        for event in event_list:
            self._dispatch_one(event)

    def redeliver(self) -> int:
        """Retry every dead letter once. Returns how many succeeded."""
        pending, self.dead_letters = self.dead_letters, []
        delivered = 0
        for failure in pending:
            if failure.handler is None:
                self.dead_letters.append(failure)
                continue
            if self._deliver(failure.event, failure.handler):
                delivered += 1
        logger.info(
            "Redelivered dead letters",
            delivered=delivered,
            still_failing=len(self.dead_letters),
        )
        return delivered

    # --- Internal helpers -----------------------------------------------------

    def _dispatch_one(self, event: DomainEvent) -> None:
        handlers = self.handlers_for(event)
        if not handlers:
            logger.debug("No handlers registered", event_type=event.name, event_id=event.event_id)
            return

        logger.debug(
            "Dispatching domain event",
            event_type=event.name,
            event_id=event.event_id,
            handlers=len(handlers),
        )
        for handler in handlers:
            self._deliver(event, handler)

    def _deliver(self, event: DomainEvent, handler: EventHandler) -> bool:
        name = handler_name(handler)
        try:
            handler(event)
        except Exception as exc:
            failure = DispatchError(event, name, exc, handler=handler)
            self.dead_letters.append(failure)
            logger.error(
                "Event handler failed",
                handler=name,
                event_type=event.name,
                event_id=event.event_id,
                error=str(exc),
                exc_info=True,
            )
            return False
        return True
