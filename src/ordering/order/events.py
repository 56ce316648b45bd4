"""Order domain events: immutable facts about order state changes.

All events are past tense, versioned, and carry enough data for audit
consumers without reloading the order.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A buyer placed an order for a listing."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    buyer_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    listing_id = Identifier(required=True)
    quantity = Integer(required=True)
    total_price = Float(required=True)
    platform_fee = Float(required=True)
    seller_earnings = Float(required=True)
    currency = String(max_length=3, default="USD")
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentRecorded:
    """Payment capture was confirmed by the processor."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    payment_reference = String(required=True)
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderShipped:
    """The seller handed the parcel to a carrier."""

    __version__ = 1

    order_id = Identifier(required=True)
    carrier = String()
    tracking_number = String()
    tracking_url = String()
    label_url = String()
    shipped_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ShippingDetailsUpdated:
    """An administrator corrected the carrier or tracking data."""

    __version__ = 1

    order_id = Identifier(required=True)
    carrier = String()
    tracking_number = String()
    tracking_url = String()
    label_url = String()
    updated_by = String(required=True)
    updated_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    """The buyer confirmed receipt and seller funds were released."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    seller_id = Identifier(required=True)
    seller_earnings = Float(required=True)
    funds_transfer_reference = String()
    delivered_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled before shipment."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String()
    cancelled_by = String(required=True)
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusForced:
    """An administrator overrode the order status."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    forced_by = String(required=True)
    forced_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ReturnRequested:
    """The buyer asked to return a delivered order."""

    __version__ = 1

    order_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    reason = Text(required=True)
    days_left = Integer()
    requested_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ReturnApproved:
    """The seller (or an administrator) accepted the return and the buyer was refunded."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    refund_reference = String()
    refund_amount = Float()
    resolved_by = String(required=True)
    resolved_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ReturnDenied:
    """The seller (or an administrator) refused the return."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    resolved_by = String(required=True)
    resolved_at = DateTime(required=True)
