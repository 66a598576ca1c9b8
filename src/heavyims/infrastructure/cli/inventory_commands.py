"""CLI commands for inventory locations and stock movements."""

from __future__ import annotations

import click

from heavyims.application.adjust_inventory import AdjustInventoryHandler
from heavyims.application.create_inventory import CreateInventoryHandler
from heavyims.application.dto import InventoryDTO
from heavyims.application.issue_parts import IssuePartsHandler
from heavyims.application.manage_location import (
    DeactivateInventoryHandler,
    MoveInventoryHandler,
    UpdateStockLevelsHandler,
)
from heavyims.application.receive_parts import ReceivePartsHandler
from heavyims.application.release_reservation import ReleaseReservationHandler
from heavyims.application.reserve_parts import ReservePartsHandler
from heavyims.application.return_parts import ReturnPartsHandler
from heavyims.application.show_inventory import (
    LowStockAlertsHandler,
    ShowInventoryHandler,
    ShowTransactionsHandler,
    WarehouseSummaryHandler,
)
from heavyims.domain.exceptions import DomainException
from heavyims.infrastructure.bootstrap import unit_of_work
from heavyims.infrastructure.config import Settings

by_option = click.option("--by", "user", default="cli", show_default=True, help="Who is doing this.")


def _display_location(dto: InventoryDTO) -> None:
    flags = []
    if not dto.is_active:
        flags.append("INACTIVE")
    if dto.is_out_of_stock:
        flags.append("OUT OF STOCK")
    elif dto.is_low_stock:
        flags.append("LOW STOCK")
    click.echo(f"Inventory {dto.inventory_id}")
    click.echo(f"  Part:      {dto.part_id}")
    click.echo(f"  Location:  {dto.warehouse} / {dto.bin_location or '-'}")
    click.echo(
        f"  On hand:   {dto.quantity_on_hand}   Reserved: {dto.quantity_reserved}   "
        f"Available: {dto.available}"
    )
    click.echo(
        f"  Levels:    min {dto.minimum_stock_level}  max {dto.maximum_stock_level}  "
        f"reorder {dto.reorder_quantity}"
    )
    if flags:
        click.echo(f"  Status:    {', '.join(flags)}")


@click.command("create")
@click.option("--part", "part_id", required=True, help="Part ID.")
@click.option("--warehouse", required=True, help="Warehouse name.")
@click.option("--bin", "bin_location", default="", help="Bin location, e.g. A-12-3.")
@click.option("--min", "minimum", required=True, type=int, help="Minimum stock level.")
@click.option("--max", "maximum", required=True, type=int, help="Maximum stock level.")
@click.pass_obj
def inventory_create(
    settings: Settings, part_id: str, warehouse: str, bin_location: str, minimum: int, maximum: int
) -> None:
    """Open an inventory location for a part at a warehouse."""
    handler = CreateInventoryHandler(unit_of_work(settings))
    try:
        dto = handler.handle(part_id, warehouse, bin_location, minimum, maximum)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Inventory location created: {dto.inventory_id}")
    _display_location(dto)


@click.command("reserve")
@click.option("--part", "part_id", required=True, help="Part ID.")
@click.option("--warehouse", required=True, help="Warehouse name.")
@click.option("--quantity", required=True, type=int)
@click.option("--work-order", "work_order_id", required=True, help="Work order ID.")
@by_option
@click.pass_obj
def inventory_reserve(
    settings: Settings, part_id: str, warehouse: str, quantity: int, work_order_id: str, user: str
) -> None:
    """Reserve stock at one warehouse for a work order."""
    handler = ReservePartsHandler(unit_of_work(settings))
    try:
        dto = handler.handle(part_id, warehouse, quantity, work_order_id, user)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Reserved {quantity} of {part_id} at {warehouse} ({dto.available} still available)")


@click.command("release")
@click.argument("inventory_id")
@click.option("--quantity", required=True, type=int)
@click.option("--work-order", "work_order_id", required=True, help="Work order ID.")
@by_option
@click.pass_obj
def inventory_release(settings: Settings, inventory_id: str, quantity: int, work_order_id: str, user: str) -> None:
    """Release a reservation."""
    handler = ReleaseReservationHandler(unit_of_work(settings))
    try:
        dto = handler.handle(inventory_id, quantity, work_order_id, user)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Released {quantity} ({dto.available} now available)")


@click.command("issue")
@click.argument("inventory_id")
@click.option("--quantity", required=True, type=int)
@click.option("--work-order", "work_order_id", required=True, help="Work order ID.")
@by_option
@click.pass_obj
def inventory_issue(settings: Settings, inventory_id: str, quantity: int, work_order_id: str, user: str) -> None:
    """Issue reserved parts to a work order."""
    handler = IssuePartsHandler(unit_of_work(settings))
    try:
        dto = handler.handle(inventory_id, quantity, work_order_id, user)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Issued {quantity} ({dto.quantity_on_hand} left on hand)")
    if dto.is_low_stock:
        click.echo("Warning: location is at or below its minimum stock level")


@click.command("receive")
@click.argument("inventory_id")
@click.option("--quantity", required=True, type=int)
@click.option("--reference", "reference_number", default=None, help="Purchase order / packing slip.")
@by_option
@click.pass_obj
def inventory_receive(
    settings: Settings, inventory_id: str, quantity: int, reference_number: str | None, user: str
) -> None:
    """Receive parts from a supplier."""
    handler = ReceivePartsHandler(unit_of_work(settings))
    try:
        dto = handler.handle(inventory_id, quantity, user, reference_number)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Received {quantity} ({dto.quantity_on_hand} on hand)")


@click.command("adjust")
@click.argument("inventory_id")
@click.option("--quantity", "new_quantity", required=True, type=int, help="Counted quantity on hand.")
@click.option("--reason", required=True)
@by_option
@click.pass_obj
def inventory_adjust(settings: Settings, inventory_id: str, new_quantity: int, reason: str, user: str) -> None:
    """Correct on-hand stock after a physical count."""
    handler = AdjustInventoryHandler(unit_of_work(settings))
    try:
        dto = handler.handle(inventory_id, new_quantity, reason, user)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Adjusted to {dto.quantity_on_hand} on hand")


@click.command("return")
@click.argument("inventory_id")
@click.option("--quantity", required=True, type=int)
@click.option("--work-order", "work_order_id", required=True, help="Work order ID.")
@click.option("--notes", default=None)
@by_option
@click.pass_obj
def inventory_return(
    settings: Settings, inventory_id: str, quantity: int, work_order_id: str, notes: str | None, user: str
) -> None:
    """Return unused parts from a work order."""
    handler = ReturnPartsHandler(unit_of_work(settings))
    try:
        dto = handler.handle(inventory_id, quantity, work_order_id, user, notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Returned {quantity} ({dto.quantity_on_hand} on hand)")


@click.command("levels")
@click.argument("inventory_id")
@click.option("--min", "minimum", required=True, type=int)
@click.option("--max", "maximum", required=True, type=int)
@click.option("--reorder", "reorder_quantity", required=True, type=int)
@click.pass_obj
def inventory_levels(settings: Settings, inventory_id: str, minimum: int, maximum: int, reorder_quantity: int) -> None:
    """Change stock thresholds."""
    handler = UpdateStockLevelsHandler(unit_of_work(settings))
    try:
        dto = handler.handle(inventory_id, minimum, maximum, reorder_quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    _display_location(dto)


@click.command("move")
@click.argument("inventory_id")
@click.option("--bin", "bin_location", required=True)
@by_option
@click.pass_obj
def inventory_move(settings: Settings, inventory_id: str, bin_location: str, user: str) -> None:
    """Move a location to another bin."""
    handler = MoveInventoryHandler(unit_of_work(settings))
    try:
        dto = handler.handle(inventory_id, bin_location, user)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Moved to bin {dto.bin_location}")


@click.command("deactivate")
@click.argument("inventory_id")
@click.pass_obj
def inventory_deactivate(settings: Settings, inventory_id: str) -> None:
    """Close an empty inventory location."""
    handler = DeactivateInventoryHandler(unit_of_work(settings))
    try:
        handler.handle(inventory_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Inventory {inventory_id} deactivated")


@click.command("show")
@click.option("--part", "part_id", default=None, help="Only this part.")
@click.option("--warehouse", default=None, help="Only this warehouse.")
@click.pass_obj
def inventory_show(settings: Settings, part_id: str | None, warehouse: str | None) -> None:
    """Show inventory levels."""
    handler = ShowInventoryHandler(unit_of_work(settings))
    try:
        lines = handler.handle(part_id=part_id, warehouse=warehouse)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No inventory records found.")
        return

    click.echo(
        f"{'Part':<14} {'Warehouse':<14} {'Bin':<8} {'On hand':>8} {'Reserved':>9} {'Available':>10}"
    )
    click.echo("-" * 68)
    for line in lines:
        marker = " *" if line.is_low_stock and line.is_active else ""
        click.echo(
            f"{line.part_id:<14} {line.warehouse:<14} {line.bin_location:<8} "
            f"{line.quantity_on_hand:>8} {line.quantity_reserved:>9} {line.available:>10}{marker}"
        )


@click.command("history")
@click.argument("inventory_id")
@click.pass_obj
def inventory_history(settings: Settings, inventory_id: str) -> None:
    """Show the transaction history of a location."""
    handler = ShowTransactionsHandler(unit_of_work(settings))
    try:
        result = handler.handle(inventory_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_location(result.inventory)
    click.echo()
    for tx in result.transactions:
        click.echo(
            f"  {tx.transaction_date[:16]}  {tx.transaction_type:<12} {tx.quantity:>+6}  "
            f"{tx.transaction_by:<10} {tx.notes}"
        )


@click.command("alerts")
@click.pass_obj
def inventory_alerts(settings: Settings) -> None:
    """List locations at or below their minimum stock level."""
    try:
        alerts = LowStockAlertsHandler(unit_of_work(settings)).handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not alerts:
        click.echo("No low stock alerts.")
        return
    for alert in alerts:
        click.echo(
            f"{alert.part_id} @ {alert.warehouse}: {alert.current_quantity} available "
            f"(min {alert.minimum_stock_level}), reorder {alert.reorder_quantity}"
        )


@click.command("summary")
@click.option("--warehouse", default=None)
@click.pass_obj
def inventory_summary(settings: Settings, warehouse: str | None) -> None:
    """Show per-warehouse totals."""
    try:
        summaries = WarehouseSummaryHandler(unit_of_work(settings)).handle(warehouse)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"{'Warehouse':<14} {'Parts':>6} {'On hand':>8} {'Reserved':>9} {'Available':>10} {'Low':>4} {'Out':>4}"
    )
    click.echo("-" * 60)
    for s in summaries:
        click.echo(
            f"{s.warehouse:<14} {s.total_parts:>6} {s.total_quantity_on_hand:>8} "
            f"{s.total_quantity_reserved:>9} {s.total_available:>10} "
            f"{s.low_stock_count:>4} {s.out_of_stock_count:>4}"
        )
