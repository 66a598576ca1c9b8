"""CLI commands for the WorkOrder aggregate."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

import click

from heavyims.application.assign_technician import AssignTechnicianHandler
from heavyims.application.create_work_order import CreateWorkOrderHandler
from heavyims.application.dto import PartRequest, WorkOrderDTO
from heavyims.application.plan_work_order import (
    EstimateWorkOrderHandler,
    RecordActualTimeHandler,
    ScheduleWorkOrderHandler,
)
from heavyims.application.record_notification import RecordNotificationHandler
from heavyims.application.reserve_work_order_parts import (
    IssueWorkOrderPartsHandler,
    ReserveWorkOrderPartsHandler,
)
from heavyims.application.show_work_order import ListWorkOrdersHandler, ShowWorkOrderHandler
from heavyims.application.update_work_order_status import UpdateWorkOrderStatusHandler
from heavyims.domain.exceptions import DomainException
from heavyims.domain.model.work_order import NotificationType, WorkOrderPriority, WorkOrderStatus
from heavyims.infrastructure.bootstrap import unit_of_work
from heavyims.infrastructure.config import Settings

by_option = click.option("--by", "user", default="cli", show_default=True, help="Who is doing this.")

_PRIORITIES = click.Choice([p.name for p in WorkOrderPriority], case_sensitive=False)
_STATUSES = click.Choice([s.value for s in WorkOrderStatus], case_sensitive=False)
_CHANNELS = click.Choice([t.value for t in NotificationType], case_sensitive=False)


class DecimalType(click.ParamType):
    name = "decimal"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            return Decimal(str(value).strip())
        except InvalidOperation:
            self.fail(f"{value!r} is not a valid number", param, ctx)


DECIMAL = DecimalType()


def _parse_parts(raw: str) -> list[PartRequest]:
    """Parse 'P-100:3,P-200:5' into PartRequest list."""
    requests: list[PartRequest] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(f"Invalid part format '{pair}'. Expected 'PartID:Quantity'.")
        part_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(f"Invalid quantity '{qty_str}' for part '{part_id}'.")
        requests.append(PartRequest(part_id=part_id.strip(), quantity=qty))
    return requests


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _display_work_order(dto: WorkOrderDTO) -> None:
    click.echo(f"Work order {dto.work_order_number}  (status={dto.status}, priority={dto.priority})")
    click.echo(f"ID:         {dto.work_order_id}")
    click.echo(f"Equipment:  {dto.equipment}")
    click.echo(f"Customer:   {dto.customer_id}")
    click.echo(f"Technician: {dto.assigned_technician_id or '-'}")
    click.echo(f"Job:        {dto.description}")
    if dto.scheduled_period:
        delayed = "  (DELAYED)" if dto.is_delayed else ""
        click.echo(f"Scheduled:  {dto.scheduled_period}{delayed}")
    if dto.actual_period:
        click.echo(f"Actual:     {dto.actual_period}")
    click.echo(f"Estimate:   {dto.estimated_labor_hours} h, {dto.estimated_cost}")
    if dto.status == WorkOrderStatus.COMPLETED.value:
        click.echo(f"Actuals:    {dto.actual_labor_hours} h, {dto.actual_cost}")
    if dto.required_parts:
        click.echo()
        click.echo(f"  {'Part':<14} {'Qty':>5} {'Available':>10} {'Issued':>8}")
        for part in dto.required_parts:
            click.echo(
                f"  {part.part_id:<14} {part.quantity_required:>5} "
                f"{'yes' if part.is_available else 'no':>10} {'yes' if part.issued_at else 'no':>8}"
            )
    if dto.notifications:
        click.echo()
        for n in dto.notifications:
            outcome = "sent" if n.was_successful else f"failed: {n.error_message}"
            click.echo(f"  {n.notification_type:<6} {n.recipient:<24} {n.subject} ({outcome})")
    if dto.diagnostic_notes:
        click.echo()
        click.echo(dto.diagnostic_notes)


@click.command("create")
@click.option("--vin", required=True, help="17-character equipment VIN.")
@click.option("--type", "equipment_type", required=True, help="e.g. Excavator.")
@click.option("--model", "equipment_model", default=None)
@click.option("--customer", "customer_id", required=True, help="Customer ID.")
@click.option("--description", required=True)
@click.option("--priority", type=_PRIORITIES, default="NORMAL", show_default=True)
@click.option("--hours", "estimated_hours", type=DECIMAL, default=None, help="Estimated labor hours.")
@click.option("--cost", "estimated_cost", type=DECIMAL, default=None, help="Estimated cost.")
@by_option
@click.pass_obj
def work_order_create(
    settings: Settings,
    vin: str,
    equipment_type: str,
    equipment_model: str | None,
    customer_id: str,
    description: str,
    priority: str,
    estimated_hours: Decimal | None,
    estimated_cost: Decimal | None,
    user: str,
) -> None:
    """Open a new work order."""
    handler = CreateWorkOrderHandler(unit_of_work(settings))
    try:
        dto = handler.handle(
            equipment_vin=vin,
            equipment_type=equipment_type,
            customer_id=customer_id,
            description=description,
            created_by=user,
            equipment_model=equipment_model,
            priority=WorkOrderPriority[priority.upper()],
            estimated_labor_hours=estimated_hours,
            estimated_cost=estimated_cost,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Work order {dto.work_order_number} created  (status={dto.status})")
    click.echo(f"ID: {dto.work_order_id}")


@click.command("assign")
@click.argument("work_order")
@click.option("--technician", "technician_id", required=True, help="Technician ID.")
@click.option("--reason", default=None, help="Required when reassigning.")
@click.pass_obj
def work_order_assign(settings: Settings, work_order: str, technician_id: str, reason: str | None) -> None:
    """Assign (or reassign) a technician. WORK_ORDER is an ID or number."""
    handler = AssignTechnicianHandler(unit_of_work(settings))
    try:
        dto = handler.handle(work_order, technician_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Work order {dto.work_order_number} assigned  (status={dto.status})")


@click.command("status")
@click.argument("work_order")
@click.argument("new_status", type=_STATUSES)
@by_option
@click.pass_obj
def work_order_status(settings: Settings, work_order: str, new_status: str, user: str) -> None:
    """Move a work order to NEW_STATUS."""
    handler = UpdateWorkOrderStatusHandler(unit_of_work(settings))
    try:
        dto = handler.handle(work_order, WorkOrderStatus(new_status.upper()), user)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Work order {dto.work_order_number} is now {dto.status}")


@click.command("reserve-parts")
@click.argument("work_order")
@click.option("--parts", required=True, help="Parts as 'PartID:Qty,PartID:Qty'.")
@by_option
@click.pass_obj
def work_order_reserve_parts(settings: Settings, work_order: str, parts: str, user: str) -> None:
    """Reserve parts across warehouses for a work order."""
    requests = _parse_parts(parts)
    handler = ReserveWorkOrderPartsHandler(unit_of_work(settings))
    try:
        allocations = handler.handle(work_order, requests, user)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    for a in allocations:
        click.echo(f"Reserved {a.quantity} at {a.warehouse} ({a.inventory_id})")


@click.command("issue-parts")
@click.argument("work_order")
@click.option("--part", "part_id", required=True)
@by_option
@click.pass_obj
def work_order_issue_parts(settings: Settings, work_order: str, part_id: str, user: str) -> None:
    """Issue every reservation held for a part on a work order."""
    handler = IssueWorkOrderPartsHandler(unit_of_work(settings))
    try:
        issued = handler.handle(work_order, part_id, user)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    for a in issued:
        click.echo(f"Issued {a.quantity} from {a.warehouse}")


@click.command("schedule")
@click.argument("work_order")
@click.option("--start", required=True, type=click.DateTime())
@click.option("--end", required=True, type=click.DateTime())
@click.pass_obj
def work_order_schedule(settings: Settings, work_order: str, start: datetime, end: datetime) -> None:
    """Set the planned time window (naive times are taken as UTC)."""
    handler = ScheduleWorkOrderHandler(unit_of_work(settings))
    try:
        dto = handler.handle(work_order, _as_utc(start), _as_utc(end))
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Scheduled: {dto.scheduled_period}")


@click.command("estimate")
@click.argument("work_order")
@click.option("--hours", required=True, type=DECIMAL)
@click.option("--cost", required=True, type=DECIMAL)
@click.pass_obj
def work_order_estimate(settings: Settings, work_order: str, hours: Decimal, cost: Decimal) -> None:
    """Set estimated labor hours and cost."""
    handler = EstimateWorkOrderHandler(unit_of_work(settings))
    try:
        dto = handler.handle(work_order, hours, cost)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Estimate: {dto.estimated_labor_hours} h, {dto.estimated_cost}")


@click.command("actuals")
@click.argument("work_order")
@click.option("--hours", required=True, type=DECIMAL)
@click.option("--cost", required=True, type=DECIMAL)
@click.pass_obj
def work_order_actuals(settings: Settings, work_order: str, hours: Decimal, cost: Decimal) -> None:
    """Record actual labor hours and cost of a completed work order."""
    handler = RecordActualTimeHandler(unit_of_work(settings))
    try:
        dto = handler.handle(work_order, hours, cost)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Actuals: {dto.actual_labor_hours} h, {dto.actual_cost}")


@click.command("notify")
@click.argument("work_order")
@click.option("--type", "channel", type=_CHANNELS, default="EMAIL", show_default=True)
@click.option("--email", default=None, help="Recipient email (EMAIL).")
@click.option("--phone", default=None, help="Recipient phone (SMS).")
@click.option("--subject", required=True)
@click.option("--message", default="")
@click.option("--failed", "error_message", default=None, help="Delivery error, if the message bounced.")
@click.pass_obj
def work_order_notify(
    settings: Settings,
    work_order: str,
    channel: str,
    email: str | None,
    phone: str | None,
    subject: str,
    message: str,
    error_message: str | None,
) -> None:
    """Record a notification sent about a work order."""
    handler = RecordNotificationHandler(unit_of_work(settings))
    try:
        dto = handler.handle(
            work_order,
            NotificationType(channel.upper()),
            subject,
            message,
            recipient_email=email,
            recipient_phone=phone,
            error_message=error_message,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Notification recorded on {dto.work_order_number} ({len(dto.notifications)} total)")


@click.command("show")
@click.argument("work_order")
@click.pass_obj
def work_order_show(settings: Settings, work_order: str) -> None:
    """Show work order details."""
    handler = ShowWorkOrderHandler(unit_of_work(settings))
    try:
        dto = handler.handle(work_order)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    _display_work_order(dto)


@click.command("list")
@click.option("--status", type=_STATUSES, default="PENDING", show_default=True)
@click.option("--delayed", is_flag=True, help="Only work orders past their scheduled end.")
@click.pass_obj
def work_order_list(settings: Settings, status: str, delayed: bool) -> None:
    """List work orders in a status, most urgent first."""
    handler = ListWorkOrdersHandler(unit_of_work(settings))
    try:
        rows = handler.handle(WorkOrderStatus(status.upper()), delayed_only=delayed)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not rows:
        click.echo("No work orders found.")
        return
    for dto in rows:
        click.echo(f"{dto.work_order_number:<16} {dto.priority:<9} {dto.equipment}")
