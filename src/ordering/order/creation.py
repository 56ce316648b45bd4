"""Order placement: command and handler."""

import json
import os

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import DEFAULT_PLATFORM_FEE, Order
from shared.identity import Principal

logger = structlog.get_logger(__name__)


def platform_fee() -> float:
    """Flat per-order platform fee, overridable with PLATFORM_FEE."""
    return float(os.environ.get("PLATFORM_FEE", DEFAULT_PLATFORM_FEE))


@ordering.command(part_of="Order")
class PlaceOrder:
    """Place an order for one listing, as the authenticated buyer."""

    actor_id = String(required=True, max_length=255)
    actor_groups = Text()
    seller_id = Identifier(required=True)
    listing = Text(required=True)  # JSON: listing snapshot dict
    quantity = Integer(required=True, min_value=1)
    shipping_address = Text(required=True)
    shipping_cost = Float(default=0.0, min_value=0.0)
    payment_reference = String(max_length=255)
    currency = String(max_length=3, default="USD")


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        principal = Principal.from_command(command)
        listing = json.loads(command.listing) if isinstance(command.listing, str) else command.listing

        order = Order.place(
            buyer_id=principal.user_id,
            seller_id=command.seller_id,
            listing=listing,
            quantity=command.quantity,
            shipping_address=command.shipping_address,
            shipping_cost=command.shipping_cost or 0.0,
            payment_reference=command.payment_reference,
            currency=command.currency or "USD",
            platform_fee=platform_fee(),
        )
        current_domain.repository_for(Order).add(order)
        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            actor_id=principal.user_id,
            total_price=order.economics.total_price,
        )
        return str(order.id)
