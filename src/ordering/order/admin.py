"""Administrator overrides on orders: commands and handler.

Overrides bypass the trigger rules of the ordinary flow (who may act, which
state must come first) but go through the same aggregate methods, so the
structural invariants still hold. No money moves as a side effect of an
override.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order import notifications
from ordering.order.order import Order, OrderStatus
from shared.identity import Principal, require_admin

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class ForceOrderStatus:
    order_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()
    status = String(required=True, choices=OrderStatus)


@ordering.command(part_of="Order")
class UpdateShippingDetails:
    order_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()
    carrier = String(max_length=100)
    tracking_number = String(max_length=255)
    tracking_url = String(max_length=1000)
    label_url = String(max_length=1000)


@ordering.command_handler(part_of=Order)
class OrderAdminHandler:
    @handle(ForceOrderStatus)
    def force_status(self, command):
        principal = Principal.from_command(command)
        require_admin(principal, "override order status")

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        order.force_status(OrderStatus(command.status), forced_by=principal.user_id)
        repo.add(order)
        logger.warning(
            "order_status_forced",
            order_id=str(order.id),
            actor_id=principal.user_id,
            previous_status=previous,
            new_status=order.status,
        )
        if order.is_delivered and order.funds_released_at is None:
            logger.warning(
                "forced_delivery_without_fund_release",
                order_id=str(order.id),
                order_number=order.order_number,
                actor_id=principal.user_id,
                seller_earnings=order.economics.seller_earnings,
            )
        return str(order.id)

    @handle(UpdateShippingDetails)
    def update_shipping(self, command):
        principal = Principal.from_command(command)
        require_admin(principal, "edit shipping details")

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        was_paid = OrderStatus(order.status) == OrderStatus.PAID
        order.update_shipping(
            updated_by=principal.user_id,
            carrier=command.carrier,
            tracking_number=command.tracking_number,
            tracking_url=command.tracking_url,
            label_url=command.label_url,
        )
        repo.add(order)
        logger.info("order_shipping_updated", order_id=str(order.id), actor_id=principal.user_id)

        if was_paid and OrderStatus(order.status) == OrderStatus.SHIPPED:
            notifications.order_shipped(order)
        return str(order.id)
