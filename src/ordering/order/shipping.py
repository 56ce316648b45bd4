"""Manual shipping: command and handler.

The seller ships with their own carrier account and records the tracking
data by hand. Label purchases through the marketplace live in
``ordering.shipment.purchase``.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order import notifications
from ordering.order.access import authorize, load_order
from ordering.order.order import Order
from shared.identity import Principal

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class MarkShipped:
    """Mark a paid order as shipped, with optional tracking data."""

    order_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()
    carrier = String(max_length=100)
    tracking_number = String(max_length=255)
    tracking_url = String(max_length=1000)


@ordering.command_handler(part_of=Order)
class ShippingHandler:
    @handle(MarkShipped)
    def mark_shipped(self, command):
        principal = Principal.from_command(command)
        order = load_order(command.order_id, principal)
        authorize(order, principal, "mark an order shipped", "seller")

        order.mark_shipped(
            carrier=command.carrier,
            tracking_number=command.tracking_number,
            tracking_url=command.tracking_url,
        )
        current_domain.repository_for(Order).add(order)
        logger.info(
            "order_shipped",
            order_id=str(order.id),
            actor_id=principal.user_id,
            tracking_number=command.tracking_number,
        )

        notifications.order_shipped(order)
        return str(order.id)
