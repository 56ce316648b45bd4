"""ShippingLabel aggregate (CQRS).

Records a purchased carrier label separately from the order so that a paid
label is never lost: the purchase is committed on its own, then applied to
the order in a second unit of work. A retry after a failed apply finds the
stored label and skips the carrier.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String
from protean.utils.globals import current_domain

from ordering.carrier.port import LabelPurchase
from ordering.domain import ordering
from ordering.shipment.events import ShippingLabelApplied, ShippingLabelPurchased


@ordering.aggregate
class ShippingLabel:
    order_id = Identifier(required=True)
    rate_id = String(required=True, max_length=255)
    carrier = String(max_length=100)
    service_level = String(max_length=100)
    amount = Float()
    tracking_number = String(required=True, max_length=255)
    tracking_url = String(max_length=1000)
    label_url = String(max_length=1000)
    transaction_reference = String(required=True, max_length=255)
    purchased_at = DateTime()
    applied_at = DateTime()

    @classmethod
    def record(cls, order_id: str, rate_id: str, purchase: LabelPurchase):
        now = datetime.now(UTC)
        label = cls(
            order_id=order_id,
            rate_id=rate_id,
            carrier=purchase.carrier,
            service_level=purchase.service_level,
            amount=purchase.amount,
            tracking_number=purchase.tracking_number,
            tracking_url=purchase.tracking_url,
            label_url=purchase.label_url,
            transaction_reference=purchase.transaction_reference,
            purchased_at=now,
        )
        label.raise_(
            ShippingLabelPurchased(
                label_id=str(label.id),
                order_id=str(order_id),
                rate_id=rate_id,
                carrier=purchase.carrier,
                service_level=purchase.service_level,
                amount=purchase.amount,
                tracking_number=purchase.tracking_number,
                transaction_reference=purchase.transaction_reference,
                purchased_at=now,
            )
        )
        return label

    @property
    def is_applied(self) -> bool:
        return self.applied_at is not None

    def mark_applied(self) -> None:
        if self.is_applied:
            raise ValidationError({"applied_at": ["Label has already been applied to its order"]})
        now = datetime.now(UTC)
        self.applied_at = now
        self.raise_(ShippingLabelApplied(label_id=str(self.id), order_id=str(self.order_id), applied_at=now))


def label_for_order(order_id: str):
    """Return the label purchased for ``order_id``, or None."""
    labels = current_domain.repository_for(ShippingLabel)._dao.query.filter(order_id=str(order_id)).all().items
    return labels[0] if labels else None
