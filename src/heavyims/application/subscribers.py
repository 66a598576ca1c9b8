"""Event subscribers wired up by the composition root.

They run after the commit that raised the event.  Both only log: placing a
purchase order or paging someone is left to people reading the alerts.
"""

from __future__ import annotations

import structlog

from heavyims.domain.model.events import DomainEvent, InventoryLowStockDetected

logger = structlog.get_logger(__name__)


class LowStockAlertHandler:

    def __init__(self) -> None:
        self.alerts: list[InventoryLowStockDetected] = []

    def __call__(self, event: InventoryLowStockDetected) -> None:
        self.alerts.append(event)
        logger.warning(
            "LOW STOCK ALERT",
            part_id=event.part_id,
            warehouse=event.warehouse,
            current_quantity=event.current_quantity,
            minimum_stock_level=event.minimum_stock_level,
            reorder_quantity=event.reorder_quantity,
            inventory_id=event.inventory_id,
        )


def log_domain_event(event: DomainEvent) -> None:
    """Audit trail of every committed event."""
    logger.info("Domain event", event_type=event.name, event_id=event.event_id)
