"""Abstract repository for the Technician aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from heavyims.domain.model.technician import Technician
from heavyims.domain.repository.tracking import TrackingRepository


class TechnicianRepository(TrackingRepository[Technician], ABC):

    @abstractmethod
    def get_by_id(self, technician_id: str) -> Technician | None:
        """Return a technician by ID, or None."""

    @abstractmethod
    def list_all(self) -> list[Technician]:
        """Return every technician."""

    @abstractmethod
    def add(self, technician: Technician) -> None:
        """Register a new technician."""

    @abstractmethod
    def update(self, technician: Technician) -> None:
        """Mark an existing technician as changed."""
