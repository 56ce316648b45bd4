"""Order returns: commands and handler.

Handles the return sub-workflow nested inside a delivered order: the buyer
requests, the seller (or an administrator) approves or denies. Approval
refunds the order total through the payment gateway.
"""

from datetime import UTC, datetime
from enum import Enum

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.gateway import get_gateway
from ordering.order import notifications
from ordering.order.access import authorize, load_order
from ordering.order.order import Order
from shared.errors import UpstreamFailure
from shared.identity import Principal

logger = structlog.get_logger(__name__)


class ReturnDecision(Enum):
    APPROVED = "approved"
    DENIED = "denied"


@ordering.command(part_of="Order")
class RequestReturn:
    """Request a return of a delivered order, providing a reason."""

    order_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()
    reason = Text(required=True)


@ordering.command(part_of="Order")
class RespondToReturn:
    """Approve or deny a pending return request."""

    order_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()
    decision = String(required=True, choices=ReturnDecision)


@ordering.command_handler(part_of=Order)
class ManageReturnsHandler:
    @handle(RequestReturn)
    def request_return(self, command):
        principal = Principal.from_command(command)
        order = load_order(command.order_id, principal)
        authorize(order, principal, "request a return", "buyer", allow_admin=False)

        order.request_return(reason=command.reason, now=datetime.now(UTC))
        current_domain.repository_for(Order).add(order)
        logger.info("return_requested", order_id=str(order.id), actor_id=principal.user_id)

        notifications.return_requested(order)
        return str(order.id)

    @handle(RespondToReturn)
    def respond_to_return(self, command):
        principal = Principal.from_command(command)
        order = load_order(command.order_id, principal)
        authorize(order, principal, "respond to a return", "seller")

        if ReturnDecision(command.decision) == ReturnDecision.APPROVED:
            order.assert_return_requested()
            refund = get_gateway().refund(
                order.payment_reference,
                order.economics.total_price,
                f"Return approved for order {order.order_number}",
                idempotency_key=f"{order.order_number}:return",
            )
            if not refund.success:
                logger.error("return_refund_failed", order_id=str(order.id), error=refund.failure_reason)
                raise UpstreamFailure("payment", refund.failure_reason or "Refund failed")
            order.approve_return(resolved_by=principal.user_id, refund_reference=refund.gateway_refund_id)
        else:
            order.deny_return(resolved_by=principal.user_id)

        current_domain.repository_for(Order).add(order)
        logger.info(
            "return_resolved",
            order_id=str(order.id),
            actor_id=principal.user_id,
            decision=order.return_status,
        )

        notifications.return_resolved(order)
        return str(order.id)
