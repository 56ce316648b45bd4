"""Delivery confirmation: command and handler.

The buyer confirms receipt, which releases the seller's earnings. The
release is keyed by order number so a retried request cannot pay twice, and
confirming an already delivered order is a no-op.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.gateway import get_gateway
from ordering.order import notifications
from ordering.order.access import authorize, load_order
from ordering.order.order import Order, OrderStatus
from shared.errors import UpstreamFailure
from shared.identity import Principal

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class ConfirmDelivery:
    """Buyer confirms the order arrived."""

    order_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()


@ordering.command_handler(part_of=Order)
class DeliveryHandler:
    @handle(ConfirmDelivery)
    def confirm_delivery(self, command):
        principal = Principal.from_command(command)
        order = load_order(command.order_id, principal)
        authorize(order, principal, "confirm delivery", "buyer")

        if order.is_delivered:
            logger.info("delivery_already_confirmed", order_id=str(order.id), actor_id=principal.user_id)
            return str(order.id)

        order.assert_can_transition(OrderStatus.DELIVERED)

        transfer = get_gateway().release_funds(
            order_number=order.order_number,
            payment_reference=order.payment_reference,
            amount=order.economics.seller_earnings,
            seller_id=str(order.seller_id),
        )
        if not transfer.success:
            logger.error("funds_release_failed", order_id=str(order.id), error=transfer.failure_reason)
            raise UpstreamFailure("payment", transfer.failure_reason or "Funds release failed")

        order.confirm_delivery(transfer.transfer_reference)
        current_domain.repository_for(Order).add(order)
        logger.info(
            "order_delivered",
            order_id=str(order.id),
            actor_id=principal.user_id,
            transfer_reference=transfer.transfer_reference,
        )

        notifications.order_delivered(order)
        return str(order.id)
