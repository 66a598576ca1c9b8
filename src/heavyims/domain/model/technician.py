"""Technician aggregate — who can take on work, and how much."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from heavyims.domain.exceptions import StateConflictError, ValidationError
from heavyims.domain.model.pending_events import PendingEvents
from heavyims.domain.model.value_objects import new_id, utc_now


class TechnicianSkillLevel(Enum):
    JUNIOR = 1
    INTERMEDIATE = 2
    SENIOR = 3
    EXPERT = 4


class TechnicianStatus(Enum):
    AVAILABLE = "AVAILABLE"
    BUSY = "BUSY"  # at max capacity
    ON_JOB = "ON_JOB"
    ON_LEAVE = "ON_LEAVE"
    INACTIVE = "INACTIVE"


MAX_JOBS_BY_SKILL: dict[TechnicianSkillLevel, int] = {
    TechnicianSkillLevel.JUNIOR: 2,
    TechnicianSkillLevel.INTERMEDIATE: 3,
    TechnicianSkillLevel.SENIOR: 4,
    TechnicianSkillLevel.EXPERT: 5,
}


@dataclass(eq=False)
class Technician:
    """Aggregate root for shop technicians.

    The technician does not know its own active jobs; callers pass the
    current count (from the work-order repository) into the capacity checks.
    """

    technician_id: str
    first_name: str
    last_name: str
    email: str
    phone_number: str
    skill_level: TechnicianSkillLevel
    max_concurrent_jobs: int
    status: TechnicianStatus = TechnicianStatus.AVAILABLE
    is_active: bool = True
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime | None = None
    version: int = 0
    events: PendingEvents = field(default_factory=PendingEvents, repr=False)

    @staticmethod
    def create(
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str,
        skill_level: TechnicianSkillLevel,
    ) -> Technician:
        if not first_name or not first_name.strip():
            raise ValidationError("First name is required")
        if not last_name or not last_name.strip():
            raise ValidationError("Last name is required")
        if not email or "@" not in email:
            raise ValidationError("Valid email is required")

        return Technician(
            technician_id=new_id(),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email.strip(),
            phone_number=(phone_number or "").strip(),
            skill_level=skill_level,
            max_concurrent_jobs=MAX_JOBS_BY_SKILL[skill_level],
        )

    @property
    def aggregate_id(self) -> str:
        return self.technician_id

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    # --- Capacity -------------------------------------------------------------

    def can_accept_new_job(self, active_job_count: int) -> bool:
        if not self.is_active or self.status == TechnicianStatus.ON_LEAVE:
            return False
        return active_job_count < self.max_concurrent_jobs

    def workload_percentage(self, active_job_count: int) -> Decimal:
        if not self.is_active:
            return Decimal("0")
        return Decimal(active_job_count) / Decimal(self.max_concurrent_jobs) * 100

    # --- State changes --------------------------------------------------------

    def refresh_availability(self, active_job_count: int) -> None:
        """Flip between AVAILABLE and BUSY as jobs come and go."""
        if not self.is_active:
            return
        full = active_job_count >= self.max_concurrent_jobs
        if self.status == TechnicianStatus.AVAILABLE and full:
            self.update_status(TechnicianStatus.BUSY)
        elif self.status == TechnicianStatus.BUSY and not full:
            self.update_status(TechnicianStatus.AVAILABLE)

    def update_status(self, new_status: TechnicianStatus) -> None:
        if not self.is_active and new_status != TechnicianStatus.INACTIVE:
            raise StateConflictError(f"Technician {self.full_name} is no longer active")
        self.status = new_status
        self.updated_at = utc_now()

    def deactivate(self) -> None:
        self.is_active = False
        self.status = TechnicianStatus.INACTIVE
        self.updated_at = utc_now()
