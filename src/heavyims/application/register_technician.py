"""Application services: technicians."""

from __future__ import annotations

import structlog

from heavyims.application.dto import TechnicianDTO
from heavyims.application.lookups import load_technician
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.model.technician import Technician, TechnicianSkillLevel, TechnicianStatus

logger = structlog.get_logger(__name__)


class RegisterTechnicianHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str,
        skill_level: TechnicianSkillLevel,
    ) -> TechnicianDTO:
        technician = Technician.create(first_name, last_name, email, phone_number, skill_level)
        with self._uow as uow:
            uow.technicians.add(technician)
            uow.commit()

        logger.info(
            "Technician registered",
            technician_id=technician.technician_id,
            name=technician.full_name,
            max_jobs=technician.max_concurrent_jobs,
        )
        return TechnicianDTO.from_domain(technician, active_jobs=0)


class UpdateTechnicianStatusHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, technician_id: str, status: TechnicianStatus) -> TechnicianDTO:
        with self._uow as uow:
            technician = load_technician(uow, technician_id)
            if status == TechnicianStatus.INACTIVE:
                technician.deactivate()
            else:
                technician.update_status(status)
            uow.technicians.update(technician)
            active = uow.work_orders.count_active_by_technician(technician_id)
            uow.commit()
        return TechnicianDTO.from_domain(technician, active)


class ListTechniciansHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(self, include_inactive: bool = False) -> list[TechnicianDTO]:
        with self._uow as uow:
            return [
                TechnicianDTO.from_domain(
                    tech, uow.work_orders.count_active_by_technician(tech.technician_id)
                )
                for tech in uow.technicians.list_all()
                if include_inactive or tech.is_active
            ]
