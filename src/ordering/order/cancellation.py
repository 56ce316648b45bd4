"""Order cancellation: command and handler.

Pending and paid orders can be cancelled by either party or an
administrator. A paid order is refunded before it is marked cancelled.
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
class CancelOrder:
    order_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()
    reason = String(max_length=500)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        principal = Principal.from_command(command)
        order = load_order(command.order_id, principal)
        authorize(order, principal, "cancel an order", "buyer", "seller")
        order.assert_can_transition(OrderStatus.CANCELLED)

        if OrderStatus(order.status) == OrderStatus.PAID:
            refund = get_gateway().refund(
                order.payment_reference,
                order.economics.total_price,
                command.reason or "Order cancelled",
                idempotency_key=f"{order.order_number}:cancel",
            )
            if not refund.success:
                logger.error("cancellation_refund_failed", order_id=str(order.id), error=refund.failure_reason)
                raise UpstreamFailure("payment", refund.failure_reason or "Refund failed")

        order.cancel(reason=command.reason, cancelled_by=principal.user_id)
        current_domain.repository_for(Order).add(order)
        logger.info("order_cancelled", order_id=str(order.id), actor_id=principal.user_id, reason=command.reason)

        counterparty = order.seller_id if principal.user_id == str(order.buyer_id) else order.buyer_id
        notifications.order_cancelled(order, counterparty)
        return str(order.id)
