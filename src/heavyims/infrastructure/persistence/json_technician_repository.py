"""JSON-document-backed implementation of TechnicianRepository."""

from __future__ import annotations

from datetime import datetime

from heavyims.domain.model.technician import Technician, TechnicianSkillLevel, TechnicianStatus
from heavyims.domain.repository.technician_repository import TechnicianRepository
from heavyims.domain.repository.tracking import Tracker
from heavyims.infrastructure.persistence.json_store import JsonSession

SECTION = "technicians"


class JsonTechnicianRepository(TechnicianRepository):

    def __init__(self, session: JsonSession, track: Tracker | None = None) -> None:
        super().__init__(track)
        self._session = session

    def get_by_id(self, technician_id: str) -> Technician | None:
        for tech in self._all():
            if tech.technician_id == technician_id:
                return self._seen(tech)
        return None

    def list_all(self) -> list[Technician]:
        return self._seen_all(self._all())

    def add(self, technician: Technician) -> None:
        self._session.add(SECTION, technician.technician_id, technician)
        self._seen(technician)

    def update(self, technician: Technician) -> None:
        self._seen(technician)

    def _all(self) -> list[Technician]:
        return self._session.all(SECTION, self.to_domain)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def to_raw(tech: Technician) -> dict:
        return {
            "technician_id": tech.technician_id,
            "first_name": tech.first_name,
            "last_name": tech.last_name,
            "email": tech.email,
            "phone_number": tech.phone_number,
            "skill_level": tech.skill_level.name,
            "status": tech.status.value,
            "max_concurrent_jobs": tech.max_concurrent_jobs,
            "is_active": tech.is_active,
            "created_at": tech.created_at.isoformat(),
            "updated_at": tech.updated_at.isoformat() if tech.updated_at else None,
            "version": tech.version,
        }

    @staticmethod
    def to_domain(raw: dict) -> Technician:
        updated_at = raw.get("updated_at")
        return Technician(
            technician_id=raw["technician_id"],
            first_name=raw["first_name"],
            last_name=raw["last_name"],
            email=raw["email"],
            phone_number=raw.get("phone_number", ""),
            skill_level=TechnicianSkillLevel[raw["skill_level"]],
            max_concurrent_jobs=raw["max_concurrent_jobs"],
            status=TechnicianStatus(raw.get("status", "AVAILABLE")),
            is_active=raw.get("is_active", True),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
            version=raw.get("version", 0),
        )
