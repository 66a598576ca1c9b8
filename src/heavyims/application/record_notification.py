"""Application service: log a customer or technician notification on a work order.

Messages are delivered by an outside system; this only records what was
sent and whether the delivery succeeded.
"""

from __future__ import annotations

import structlog

from heavyims.application.dto import WorkOrderDTO
from heavyims.application.lookups import load_work_order
from heavyims.application.unit_of_work import AbstractUnitOfWork
from heavyims.domain.model.work_order import NotificationType

logger = structlog.get_logger(__name__)


class RecordNotificationHandler:

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        work_order_ref: str,
        notification_type: NotificationType,
        subject: str,
        message: str,
        recipient_email: str | None = None,
        recipient_phone: str | None = None,
        error_message: str | None = None,
    ) -> WorkOrderDTO:
        with self._uow as uow:
            work_order = load_work_order(uow, work_order_ref)
            notification = work_order.record_notification(
                notification_type,
                subject,
                message,
                recipient_email=recipient_email,
                recipient_phone=recipient_phone,
            )
            if error_message:
                notification.mark_failed(error_message)
            else:
                notification.mark_success()
            uow.work_orders.update(work_order)
            uow.commit()

        logger.info(
            "Notification recorded",
            work_order_number=work_order.work_order_number,
            notification_type=notification_type.value,
            was_successful=notification.was_successful,
        )
        return WorkOrderDTO.from_domain(work_order)
