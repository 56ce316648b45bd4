"""Shipping label domain events."""

from protean.fields import DateTime, Float, Identifier, String

from ordering.domain import ordering


@ordering.event(part_of="ShippingLabel")
class ShippingLabelPurchased:
    """A carrier label was bought for an order."""

    __version__ = 1

    label_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rate_id = String(required=True)
    carrier = String()
    service_level = String()
    amount = Float()
    tracking_number = String(required=True)
    transaction_reference = String(required=True)
    purchased_at = DateTime(required=True)


@ordering.event(part_of="ShippingLabel")
class ShippingLabelApplied:
    """The label's tracking data was written onto its order."""

    __version__ = 1

    label_id = Identifier(required=True)
    order_id = Identifier(required=True)
    applied_at = DateTime(required=True)
