"""Domain-level exceptions.

All failures are expressed as subclasses of DomainException so the CLI layer
can catch them uniformly and display user-friendly messages.

Only ``PersistenceError`` (and its subclasses) is worth retrying: it is raised
before any event leaves the unit of work, so the whole read-mutate-write cycle
can simply be run again.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Input was malformed or out of range. State is never mutated."""


class StateConflictError(DomainException):
    """The operation would violate an aggregate invariant given its current state."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class PersistenceError(DomainException):
    """The store failed to persist a unit of work."""


class ConcurrencyError(PersistenceError):
    """An aggregate was modified by another writer since it was loaded."""


class DuplicateInventoryError(PersistenceError):
    """An inventory location already exists for this (part, warehouse) pair."""


class DispatchError(DomainException):
    """A subscriber failed while handling an event after a successful commit.

    Never raised out of ``commit()``; instances are recorded on the
    dispatcher's dead-letter list for operators.
    """

    def __init__(self, event, handler_name: str, cause: BaseException, handler=None) -> None:
        super().__init__(
            f"Handler {handler_name} failed for {type(event).__name__} "
            f"(event {event.event_id}): {cause}"
        )
        self.event = event
        self.handler_name = handler_name
        self.cause = cause
        self.handler = handler
