"""Carrier label purchase: two commands, two units of work.

1. ``PurchaseShippingLabel`` buys the label (or finds the one already bought)
   and commits a ``ShippingLabel``.
2. ``ApplyShippingLabel`` moves the order paid → shipped with the label's
   tracking data and marks the label applied.

``purchase_and_apply`` runs both in sequence for the HTTP layer.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.carrier import get_carrier
from ordering.carrier.port import CarrierError
from ordering.domain import ordering
from ordering.order import notifications
from ordering.order.access import authorize, load_order
from ordering.order.order import Order, OrderStatus
from ordering.shipment.label import ShippingLabel, label_for_order
from shared.errors import InvalidTransition, UpstreamFailure
from shared.identity import Principal

logger = structlog.get_logger(__name__)


@ordering.command(part_of="ShippingLabel")
class PurchaseShippingLabel:
    """Buy a carrier label for a paid order from a quoted rate."""

    order_id = Identifier(required=True)
    rate_id = String(required=True, max_length=255)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()


@ordering.command(part_of="ShippingLabel")
class ApplyShippingLabel:
    """Write a purchased label onto its order and ship it."""

    label_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()


@ordering.command_handler(part_of=ShippingLabel)
class ShippingLabelHandler:
    @handle(PurchaseShippingLabel)
    def purchase_label(self, command):
        principal = Principal.from_command(command)
        order = load_order(command.order_id, principal)
        authorize(order, principal, "buy a shipping label", "seller")

        existing = label_for_order(order.id)
        if existing is not None:
            logger.info("shipping_label_reused", order_id=str(order.id), label_id=str(existing.id))
            return str(existing.id)

        current = OrderStatus(order.status)
        if current != OrderStatus.PAID:
            raise InvalidTransition(
                current.value,
                f"Order must be paid before purchasing a label (order is {current.value})",
            )

        try:
            purchase = get_carrier().purchase_label(command.rate_id)
        except CarrierError as exc:
            logger.warning("shipping_label_purchase_failed", order_id=str(order.id), error=str(exc))
            raise UpstreamFailure("carrier", str(exc)) from exc

        label = ShippingLabel.record(order_id=str(order.id), rate_id=command.rate_id, purchase=purchase)
        current_domain.repository_for(ShippingLabel).add(label)
        logger.info(
            "shipping_label_purchased",
            order_id=str(order.id),
            label_id=str(label.id),
            tracking_number=purchase.tracking_number,
            actor_id=principal.user_id,
        )
        return str(label.id)

    @handle(ApplyShippingLabel)
    def apply_label(self, command):
        principal = Principal.from_command(command)
        label_repo = current_domain.repository_for(ShippingLabel)
        label = label_repo.get(command.label_id)
        order = load_order(label.order_id, principal)
        authorize(order, principal, "buy a shipping label", "seller")

        if label.is_applied:
            return str(order.id)

        order.mark_shipped(
            carrier=label.carrier,
            tracking_number=label.tracking_number,
            tracking_url=label.tracking_url,
            label_url=label.label_url,
        )
        label.mark_applied()
        current_domain.repository_for(Order).add(order)
        label_repo.add(label)
        logger.info("shipping_label_applied", order_id=str(order.id), label_id=str(label.id))

        notifications.order_shipped(order)
        return str(order.id)


def purchase_and_apply(order_id: str, rate_id: str, principal: Principal) -> str:
    """Buy (or reuse) the label for an order, then ship the order with it."""
    label_id = current_domain.process(
        PurchaseShippingLabel(order_id=order_id, rate_id=rate_id, **principal.as_actor()),
        asynchronous=False,
    )
    return current_domain.process(
        ApplyShippingLabel(label_id=label_id, **principal.as_actor()),
        asynchronous=False,
    )
