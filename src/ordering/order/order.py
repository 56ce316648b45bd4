"""Order aggregate (CQRS): the core of the ordering domain.

One order buys one listing (with a quantity) from one seller. The economic
and return-policy facts of the listing are copied onto the order at creation
as a ``ListingSnapshot`` and never change afterwards, so later listing edits
cannot alter what the buyer agreed to.

State Machine:
    PENDING → PAID → SHIPPED → DELIVERED
    PAID → DELIVERED                      (buyer confirms before a label exists)
    {PENDING, PAID} → CANCELLED

Return sub-workflow (nested inside DELIVERED, status does not change):
    None → REQUESTED → {APPROVED, DENIED}
"""

import secrets
import string
import time
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text, ValueObject

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderShipped,
    OrderStatusForced,
    PaymentRecorded,
    ReturnApproved,
    ReturnDenied,
    ReturnRequested,
    ShippingDetailsUpdated,
)
from shared.errors import Ineligible, InvalidTransition

DEFAULT_PLATFORM_FEE = 10.00


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ReturnStatus(Enum):
    REQUESTED = "requested"
    APPROVED = "approved"
    DENIED = "denied"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
}

# Timestamp written when an order enters each status
_STATUS_TIMESTAMPS = {
    OrderStatus.PAID: "paid_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}

_BASE36 = string.digits + string.ascii_uppercase


def generate_order_number() -> str:
    """Human-readable order number: ``ORD-<epoch ms>-<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ListingSnapshot:
    """Listing facts frozen onto the order when it was placed."""

    listing_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    return_days = Integer()  # None means the seller accepts no returns
    returns_info = Text()
    weight_oz = Float()
    length_in = Float()
    width_in = Float()
    height_in = Float()


@ordering.value_object(part_of="Order")
class Economics:
    """Price breakdown computed once at creation."""

    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    subtotal = Float(required=True, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)
    platform_fee = Float(required=True, min_value=0.0)
    seller_earnings = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="USD")


@ordering.value_object(part_of="Order")
class Tracking:
    """Carrier and tracking data for a shipped parcel."""

    carrier = String(max_length=100)
    tracking_number = String(max_length=255)
    tracking_url = String(max_length=1000)
    label_url = String(max_length=1000)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=50)
    buyer_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    listing = ValueObject(ListingSnapshot)
    economics = ValueObject(Economics)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    shipping_address = Text(required=True)
    tracking = ValueObject(Tracking)

    payment_reference = String(max_length=255)
    paid_at = DateTime()
    funds_transfer_reference = String(max_length=255)
    funds_released_at = DateTime()

    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    cancellation_reason = String(max_length=500)
    cancelled_by = String(max_length=255)

    return_status = String(choices=ReturnStatus)
    return_reason = Text()
    return_requested_at = DateTime()
    return_resolved_at = DateTime()
    return_resolved_by = String(max_length=255)
    refund_reference = String(max_length=255)

    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def returns_exist_only_on_delivered_orders(self):
        if self.return_status is not None and self.status != OrderStatus.DELIVERED.value:
            raise ValidationError({"return_status": ["A return can only exist on a delivered order"]})

    @invariant.post
    def pending_orders_carry_no_tracking(self):
        if self.status == OrderStatus.PENDING.value and self.has_tracking_data:
            raise ValidationError({"tracking": ["A pending order cannot carry tracking data"]})

    @invariant.post
    def economics_must_balance(self):
        e = self.economics
        if e is None:
            return
        if abs(e.subtotal - e.unit_price * e.quantity) > 0.005:
            raise ValidationError({"economics": ["Subtotal must equal unit price times quantity"]})
        if abs(e.total_price - (e.subtotal + (e.shipping_cost or 0.0))) > 0.005:
            raise ValidationError({"economics": ["Total price must equal subtotal plus shipping"]})
        if abs(e.seller_earnings + e.platform_fee - e.subtotal) > 0.005:
            raise ValidationError({"economics": ["Seller earnings plus platform fee must equal the subtotal"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        buyer_id: str,
        seller_id: str,
        listing: dict,
        quantity: int,
        shipping_address: str,
        shipping_cost: float = 0.0,
        payment_reference: str | None = None,
        currency: str = "USD",
        platform_fee: float = DEFAULT_PLATFORM_FEE,
    ):
        """Place a new pending order for a listing snapshot."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if str(buyer_id) == str(seller_id):
            raise ValidationError({"buyer_id": ["Sellers cannot buy their own listings"]})

        unit_price = round(float(listing["unit_price"]), 2)
        shipping_cost = round(float(shipping_cost or 0.0), 2)
        subtotal = round(unit_price * quantity, 2)
        fee = round(min(platform_fee, subtotal), 2)

        now = datetime.now(UTC)
        order = cls(
            order_number=generate_order_number(),
            buyer_id=buyer_id,
            seller_id=seller_id,
            listing=ListingSnapshot(**listing),
            economics=Economics(
                unit_price=unit_price,
                quantity=quantity,
                subtotal=subtotal,
                shipping_cost=shipping_cost,
                total_price=round(subtotal + shipping_cost, 2),
                platform_fee=fee,
                seller_earnings=round(subtotal - fee, 2),
                currency=currency,
            ),
            status=OrderStatus.PENDING.value,
            shipping_address=shipping_address,
            payment_reference=payment_reference,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                buyer_id=str(buyer_id),
                seller_id=str(seller_id),
                listing_id=str(order.listing.listing_id),
                quantity=quantity,
                total_price=order.economics.total_price,
                platform_fee=fee,
                seller_earnings=order.economics.seller_earnings,
                currency=currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def has_tracking_data(self) -> bool:
        t = self.tracking
        return bool(t and (t.tracking_number or t.tracking_url or t.label_url))

    def is_party(self, user_id: str) -> bool:
        return str(user_id) in (str(self.buyer_id), str(self.seller_id))

    def assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition(
                current.value,
                f"Cannot transition from {current.value} to {target_status.value}",
            )

    def return_eligibility(self, now: datetime | None = None):
        """Derived return eligibility at ``now`` (defaults to the current time)."""
        from ordering.order.eligibility import evaluate

        return evaluate(self, self.listing, now or datetime.now(UTC))

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_payment(self, payment_reference: str) -> None:
        """Record a confirmed payment capture."""
        self.assert_can_transition(OrderStatus.PAID)
        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.PAID.value
            self.payment_reference = payment_reference
            self.paid_at = now
            self.updated_at = now
        self.raise_(
            PaymentRecorded(
                order_id=str(self.id),
                order_number=self.order_number,
                payment_reference=payment_reference,
                amount=self.economics.total_price,
                paid_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Shipping
    # -------------------------------------------------------------------
    def mark_shipped(
        self,
        carrier: str | None = None,
        tracking_number: str | None = None,
        tracking_url: str | None = None,
        label_url: str | None = None,
    ) -> None:
        """Move a paid order to shipped, optionally recording tracking data."""
        current = OrderStatus(self.status)
        if current != OrderStatus.PAID:
            raise InvalidTransition(current.value, f"Only paid orders can be shipped (order is {current.value})")

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.SHIPPED.value
            self.tracking = Tracking(
                carrier=carrier,
                tracking_number=tracking_number,
                tracking_url=tracking_url,
                label_url=label_url,
            )
            self.shipped_at = now
            self.updated_at = now
        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                carrier=carrier,
                tracking_number=tracking_number,
                tracking_url=tracking_url,
                label_url=label_url,
                shipped_at=now,
            )
        )

    def update_shipping(
        self,
        updated_by: str,
        carrier: str | None = None,
        tracking_number: str | None = None,
        tracking_url: str | None = None,
        label_url: str | None = None,
    ) -> None:
        """Correct carrier or tracking data. A tracking number on a paid order ships it."""
        current = OrderStatus(self.status)
        if current not in (OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            raise InvalidTransition(
                current.value,
                f"Shipping details cannot be edited on a {current.value} order",
                field="tracking",
            )

        existing = self.tracking
        merged = {
            "carrier": carrier if carrier is not None else (existing.carrier if existing else None),
            "tracking_number": (
                tracking_number if tracking_number is not None else (existing.tracking_number if existing else None)
            ),
            "tracking_url": tracking_url if tracking_url is not None else (existing.tracking_url if existing else None),
            "label_url": label_url if label_url is not None else (existing.label_url if existing else None),
        }

        if current == OrderStatus.PAID and merged["tracking_number"]:
            self.mark_shipped(**merged)
            return

        now = datetime.now(UTC)
        with atomic_change(self):
            self.tracking = Tracking(**merged)
            self.updated_at = now
        self.raise_(ShippingDetailsUpdated(order_id=str(self.id), updated_by=updated_by, updated_at=now, **merged))

    # -------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------
    @property
    def is_delivered(self) -> bool:
        return OrderStatus(self.status) == OrderStatus.DELIVERED

    def confirm_delivery(self, funds_transfer_reference: str | None) -> None:
        """Record delivery after the seller's funds were released."""
        self.assert_can_transition(OrderStatus.DELIVERED)
        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.DELIVERED.value
            self.delivered_at = now
            self.funds_transfer_reference = funds_transfer_reference
            self.funds_released_at = now
            self.updated_at = now
        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                order_number=self.order_number,
                seller_id=str(self.seller_id),
                seller_earnings=self.economics.seller_earnings,
                funds_transfer_reference=funds_transfer_reference,
                delivered_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason: str | None, cancelled_by: str) -> None:
        """Cancel a pending or paid order. Irreversible."""
        self.assert_can_transition(OrderStatus.CANCELLED)
        previous = self.status
        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.CANCELLED.value
            self.cancellation_reason = reason
            self.cancelled_by = cancelled_by
            self.cancelled_at = now
            self.updated_at = now
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=previous,
                reason=reason,
                cancelled_by=cancelled_by,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Admin override
    # -------------------------------------------------------------------
    def force_status(self, target: OrderStatus, forced_by: str) -> None:
        """Set any status, bypassing trigger rules but not structural invariants.

        Timestamps for the target status are filled in when absent. No side
        effects (fund release, refunds) are attached to an override.
        """
        current = OrderStatus(self.status)
        if current == OrderStatus.DELIVERED and target != OrderStatus.DELIVERED and self.return_status:
            raise InvalidTransition(
                current.value,
                f"Cannot move a delivered order with a {self.return_status} return to {target.value}",
            )
        if target == OrderStatus.PENDING and self.has_tracking_data:
            raise InvalidTransition(current.value, "Cannot force pending while tracking data exists")

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            stamp = _STATUS_TIMESTAMPS.get(target)
            if stamp and getattr(self, stamp) is None:
                setattr(self, stamp, now)
            if target == OrderStatus.CANCELLED and not self.cancelled_by:
                self.cancelled_by = forced_by
            self.updated_at = now
        self.raise_(
            OrderStatusForced(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                forced_by=forced_by,
                forced_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Returns
    # -------------------------------------------------------------------
    def request_return(self, reason: str, now: datetime | None = None) -> None:
        """Open a return request. Only allowed while the order is eligible."""
        now = now or datetime.now(UTC)
        eligibility = self.return_eligibility(now)
        if not eligibility.eligible:
            raise Ineligible(eligibility.reason, field="return_status")

        with atomic_change(self):
            self.return_status = ReturnStatus.REQUESTED.value
            self.return_reason = reason
            self.return_requested_at = now
            self.updated_at = now
        self.raise_(
            ReturnRequested(
                order_id=str(self.id),
                seller_id=str(self.seller_id),
                reason=reason,
                days_left=eligibility.days_left,
                requested_at=now,
            )
        )

    def assert_return_requested(self) -> None:
        if self.return_status != ReturnStatus.REQUESTED.value:
            current = self.return_status or "none"
            raise InvalidTransition(current, f"No pending return request (return is {current})", field="return_status")

    def approve_return(self, resolved_by: str, refund_reference: str | None = None) -> None:
        self.assert_return_requested()
        now = datetime.now(UTC)
        with atomic_change(self):
            self.return_status = ReturnStatus.APPROVED.value
            self.return_resolved_at = now
            self.return_resolved_by = resolved_by
            self.refund_reference = refund_reference
            self.updated_at = now
        self.raise_(
            ReturnApproved(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                refund_reference=refund_reference,
                refund_amount=self.economics.total_price,
                resolved_by=resolved_by,
                resolved_at=now,
            )
        )

    def deny_return(self, resolved_by: str) -> None:
        self.assert_return_requested()
        now = datetime.now(UTC)
        with atomic_change(self):
            self.return_status = ReturnStatus.DENIED.value
            self.return_resolved_at = now
            self.return_resolved_by = resolved_by
            self.updated_at = now
        self.raise_(
            ReturnDenied(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                resolved_by=resolved_by,
                resolved_at=now,
            )
        )
