"""Pending domain events carried by an aggregate.

Aggregates embed a ``PendingEvents`` queue instead of inheriting from an
aggregate base class.  Domain methods ``record()`` facts as they happen; only
the unit of work reads them (``pending``) and drains them (``clear()``) once
the state they describe has been persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from heavyims.domain.model.events import DomainEvent


@dataclass(eq=False)
class PendingEvents:

    _events: list[DomainEvent] = field(default_factory=list)

    def record(self, event: DomainEvent) -> None:
        if event is None:
            raise ValueError("event is required")
        self._events.append(event)

    @property
    def pending(self) -> tuple[DomainEvent, ...]:
        """Snapshot of queued events in the order they were raised."""
        return tuple(self._events)

    def clear(self, count: int | None = None) -> None:
        """Drop every queued event, or only the oldest ``count`` of them."""
        if count is None:
            self._events.clear()
        else:
            del self._events[:count]

    def __len__(self) -> int:
        return len(self._events)

    def __bool__(self) -> bool:
        return bool(self._events)


class HasPendingEvents(Protocol):
    """Anything the unit of work can collect events from."""

    events: PendingEvents

    @property
    def aggregate_id(self) -> str: ...
