"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import OrderNfeCorrected, OrderStatusChanged
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
            event_id=str(event.event_id),
        )


class OrderNfeCorrectedHandler(IEventHandler[OrderNfeCorrected]):
    def handle(self, event: OrderNfeCorrected) -> None:
        logger.info("order.event.nfe_corrected", **event.to_payload())


order_status_changed_handler = OrderStatusChangedHandler()
order_nfe_corrected_handler = OrderNfeCorrectedHandler()
