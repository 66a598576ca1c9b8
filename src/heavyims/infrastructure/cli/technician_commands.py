"""CLI commands for technicians."""

from __future__ import annotations

import click

from heavyims.application.register_technician import (
    ListTechniciansHandler,
    RegisterTechnicianHandler,
    UpdateTechnicianStatusHandler,
)
from heavyims.domain.exceptions import DomainException
from heavyims.domain.model.technician import TechnicianSkillLevel, TechnicianStatus
from heavyims.infrastructure.bootstrap import unit_of_work
from heavyims.infrastructure.config import Settings


@click.command("register")
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--email", required=True)
@click.option("--phone", default="")
@click.option(
    "--skill",
    type=click.Choice([s.name for s in TechnicianSkillLevel], case_sensitive=False),
    default="INTERMEDIATE",
    show_default=True,
)
@click.pass_obj
def technician_register(
    settings: Settings, first_name: str, last_name: str, email: str, phone: str, skill: str
) -> None:
    """Register a new technician."""
    handler = RegisterTechnicianHandler(unit_of_work(settings))
    try:
        dto = handler.handle(first_name, last_name, email, phone, TechnicianSkillLevel[skill.upper()])
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Technician {dto.full_name} registered: {dto.technician_id}")
    click.echo(f"Skill {dto.skill_level}, up to {dto.max_concurrent_jobs} concurrent jobs")


@click.command("status")
@click.argument("technician_id")
@click.argument(
    "new_status",
    type=click.Choice([s.value for s in TechnicianStatus], case_sensitive=False),
)
@click.pass_obj
def technician_status(settings: Settings, technician_id: str, new_status: str) -> None:
    """Set a technician's status (INACTIVE deactivates them)."""
    handler = UpdateTechnicianStatusHandler(unit_of_work(settings))
    try:
        dto = handler.handle(technician_id, TechnicianStatus(new_status.upper()))
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"{dto.full_name} is now {dto.status}")


@click.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive technicians.")
@click.pass_obj
def technician_list(settings: Settings, include_inactive: bool) -> None:
    """List technicians and their workload."""
    try:
        rows = ListTechniciansHandler(unit_of_work(settings)).handle(include_inactive)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not rows:
        click.echo("No technicians found.")
        return
    click.echo(f"{'Name':<22} {'Skill':<13} {'Status':<9} {'Jobs':>6} {'Load':>6}  ID")
    click.echo("-" * 80)
    for t in rows:
        click.echo(
            f"{t.full_name:<22} {t.skill_level:<13} {t.status:<9} "
            f"{t.active_jobs:>2}/{t.max_concurrent_jobs:<3} {t.workload_percentage:>6}  {t.technician_id}"
        )
