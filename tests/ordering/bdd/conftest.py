"""Shared BDD fixtures and step definitions for the Ordering domain."""

from datetime import UTC, datetime, timedelta

import pytest
from ordering.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderShipped,
    PaymentRecorded,
    ReturnApproved,
    ReturnDenied,
    ReturnRequested,
)
from ordering.order.order import Order
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

# Map event name strings to classes for dynamic lookup in Then steps
_ORDER_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "PaymentRecorded": PaymentRecorded,
    "OrderShipped": OrderShipped,
    "OrderDelivered": OrderDelivered,
    "OrderCancelled": OrderCancelled,
    "ReturnRequested": ReturnRequested,
    "ReturnApproved": ReturnApproved,
    "ReturnDenied": ReturnDenied,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def return_days():
    return {"value": 30}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("the listing accepts returns within {days:d} days"))
def listing_accepts_returns(return_days, days):
    return_days["value"] = days


@given("the listing accepts no returns")
def listing_accepts_no_returns(return_days):
    return_days["value"] = None


@given("a pending order", target_fixture="order")
def pending_order(return_days):
    order = Order.place(
        buyer_id="buyer-001",
        seller_id="seller-001",
        listing={
            "listing_id": "lst-001",
            "title": "Harbour at Dusk",
            "unit_price": 240.0,
            "return_days": return_days["value"],
        },
        quantity=1,
        shipping_address="Ada Buyer\n12 Elm St\nPortland, OR 97201\nUS",
        shipping_cost=15.0,
        payment_reference="pi_bdd_001",
    )
    order._events.clear()
    return order


@given("the order was paid")
def order_was_paid(order):
    order.record_payment("pi_bdd_001")
    order._events.clear()


@given("the order was shipped")
def order_was_shipped(order):
    order.mark_shipped(carrier="USPS", tracking_number="9400-BDD-1")
    order._events.clear()


@given(parsers.cfparse("the order was delivered {days:d} days ago"))
def order_was_delivered_days_ago(order, days):
    order.confirm_delivery("tr_bdd_001")
    order.delivered_at = datetime.now(UTC) - timedelta(days=days)
    order._events.clear()


@given("the order was delivered")
def order_was_delivered(order):
    order.confirm_delivery("tr_bdd_001")
    order._events.clear()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then("the order action fails with a validation error")
def order_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("the {event_type} event is raised"))
def event_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in order._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in order._events]}"
