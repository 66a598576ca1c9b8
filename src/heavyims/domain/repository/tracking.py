"""Base for repositories that report what they hand out to a unit of work."""

from __future__ import annotations

from typing import Callable, Generic, Iterable, TypeVar

from heavyims.domain.model.pending_events import HasPendingEvents

A = TypeVar("A", bound=HasPendingEvents)

Tracker = Callable[[HasPendingEvents], None]


class TrackingRepository(Generic[A]):
    """Every aggregate loaded through or added to a repository is passed to
    ``track`` so the owning unit of work can collect its events on commit.
    """

    def __init__(self, track: Tracker | None = None) -> None:
        self._track = track

    def _seen(self, aggregate: A | None) -> A | None:
        if aggregate is not None and self._track is not None:
            self._track(aggregate)
        return aggregate

    def _seen_all(self, aggregates: Iterable[A]) -> list[A]:
        return [self._seen(aggregate) for aggregate in aggregates]
