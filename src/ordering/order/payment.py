"""Order payment: command and handler.

Moves a pending order to paid once the payment processor confirms the
capture. The handler asks the gateway instead of trusting the caller.
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
from shared.errors import Ineligible, UpstreamFailure
from shared.identity import Principal

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class RecordPayment:
    """Record a confirmed payment capture for a pending order."""

    order_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()
    payment_reference = String(max_length=255)


@ordering.command_handler(part_of=Order)
class RecordPaymentHandler:
    @handle(RecordPayment)
    def record_payment(self, command):
        principal = Principal.from_command(command)
        order = load_order(command.order_id, principal)
        authorize(order, principal, "record payment", "buyer")
        order.assert_can_transition(OrderStatus.PAID)

        reference = command.payment_reference or order.payment_reference
        if not reference:
            raise Ineligible("Order has no payment reference to confirm", field="payment_reference")

        confirmation = get_gateway().confirm_payment(reference)
        if confirmation.error:
            logger.warning("payment_confirmation_failed", order_id=str(order.id), error=confirmation.error)
            raise UpstreamFailure("payment", confirmation.error)
        if not confirmation.confirmed:
            raise Ineligible(f"Payment {reference} has not been captured", field="payment_reference")

        order.record_payment(reference)
        current_domain.repository_for(Order).add(order)
        logger.info("order_paid", order_id=str(order.id), actor_id=principal.user_id)

        notifications.new_sale(order)
        return str(order.id)
