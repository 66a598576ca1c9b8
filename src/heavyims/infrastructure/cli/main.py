import click

from heavyims.infrastructure.cli.inventory_commands import (
    inventory_adjust,
    inventory_alerts,
    inventory_create,
    inventory_deactivate,
    inventory_history,
    inventory_issue,
    inventory_levels,
    inventory_move,
    inventory_receive,
    inventory_release,
    inventory_reserve,
    inventory_return,
    inventory_show,
    inventory_summary,
)
from heavyims.infrastructure.cli.technician_commands import (
    technician_list,
    technician_register,
    technician_status,
)
from heavyims.infrastructure.cli.work_order_commands import (
    work_order_actuals,
    work_order_assign,
    work_order_create,
    work_order_estimate,
    work_order_issue_parts,
    work_order_list,
    work_order_notify,
    work_order_reserve_parts,
    work_order_schedule,
    work_order_show,
    work_order_status,
)
from heavyims.infrastructure.config import load_settings
from heavyims.infrastructure.logging import add_context, clear_context, configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """HeavyIMS — heavy equipment repair shop inventory and work orders"""
    try:
        settings = load_settings()
    except ValueError as exc:
        raise click.ClickException(str(exc))
    configure_logging(settings)
    clear_context()
    add_context(command=ctx.invoked_subcommand, environment=settings.environment)
    ctx.obj = settings


@cli.group()
def inventory() -> None:
    """Manage stock at warehouse locations."""


@cli.group()
def workorder() -> None:
    """Manage work orders."""


@cli.group()
def technician() -> None:
    """Manage technicians."""


# Register subcommands
inventory.add_command(inventory_adjust)
inventory.add_command(inventory_alerts)
inventory.add_command(inventory_create)
inventory.add_command(inventory_deactivate)
inventory.add_command(inventory_history)
inventory.add_command(inventory_issue)
inventory.add_command(inventory_levels)
inventory.add_command(inventory_move)
inventory.add_command(inventory_receive)
inventory.add_command(inventory_release)
inventory.add_command(inventory_reserve)
inventory.add_command(inventory_return)
inventory.add_command(inventory_show)
inventory.add_command(inventory_summary)
workorder.add_command(work_order_actuals)
workorder.add_command(work_order_assign)
workorder.add_command(work_order_create)
workorder.add_command(work_order_estimate)
workorder.add_command(work_order_issue_parts)
workorder.add_command(work_order_list)
workorder.add_command(work_order_notify)
workorder.add_command(work_order_reserve_parts)
workorder.add_command(work_order_schedule)
workorder.add_command(work_order_show)
workorder.add_command(work_order_status)
technician.add_command(technician_list)
technician.add_command(technician_register)
technician.add_command(technician_status)
