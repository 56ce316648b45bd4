"""Tests for the return sub-workflow on the Order aggregate."""

from datetime import UTC, datetime, timedelta

import pytest
from ordering.order.events import ReturnApproved, ReturnDenied, ReturnRequested
from ordering.order.order import Order, OrderStatus, ReturnStatus
from shared.errors import Ineligible, InvalidTransition


def _delivered(return_days=30):
    order = Order.place(
        buyer_id="buyer-001",
        seller_id="seller-001",
        listing={"listing_id": "lst-1", "title": "Vase", "unit_price": 60.0, "return_days": return_days},
        quantity=1,
        shipping_address="Ada\n1 Main St\nSalem, OR 97301\nUS",
        shipping_cost=8.0,
        payment_reference="pi_1",
    )
    order.record_payment("pi_1")
    order.mark_shipped(tracking_number="9400-1")
    order.confirm_delivery("tr_1")
    order._events.clear()
    return order


class TestRequestReturn:
    def test_opens_request(self):
        order = _delivered()
        order.request_return("Arrived cracked")
        assert order.return_status == ReturnStatus.REQUESTED.value
        assert order.return_reason == "Arrived cracked"
        assert order.return_requested_at is not None
        assert order.status == OrderStatus.DELIVERED.value

    def test_raises_event(self):
        order = _delivered()
        order.request_return("Wrong colour")
        event = order._events[0]
        assert isinstance(event, ReturnRequested)
        assert event.days_left == 30

    def test_not_delivered_is_ineligible(self):
        order = Order.place(
            buyer_id="buyer-001",
            seller_id="seller-001",
            listing={"listing_id": "lst-1", "title": "Vase", "unit_price": 60.0, "return_days": 30},
            quantity=1,
            shipping_address="Ada\n1 Main St\nSalem, OR 97301\nUS",
        )
        with pytest.raises(Ineligible) as exc:
            order.request_return("reason")
        assert exc.value.reason == "Order not yet delivered"

    def test_after_denial_is_ineligible(self):
        order = _delivered()
        order.request_return("reason")
        order.deny_return(resolved_by="seller-001")
        with pytest.raises(Ineligible) as exc:
            order.request_return("again")
        assert exc.value.reason == "Return denied"
        assert order.return_status == ReturnStatus.DENIED.value

    def test_no_returns_policy(self):
        order = _delivered(return_days=None)
        with pytest.raises(Ineligible) as exc:
            order.request_return("reason")
        assert exc.value.reason == "No returns accepted"

    def test_window_expired(self):
        order = _delivered(return_days=7)
        order.delivered_at = datetime.now(UTC) - timedelta(days=8)
        with pytest.raises(Ineligible) as exc:
            order.request_return("reason")
        assert exc.value.reason == "Return window expired"


class TestResolveReturn:
    def test_approve(self):
        order = _delivered()
        order.request_return("reason")
        order._events.clear()
        order.approve_return(resolved_by="seller-001", refund_reference="re_1")
        assert order.return_status == ReturnStatus.APPROVED.value
        assert order.refund_reference == "re_1"
        assert order.return_resolved_by == "seller-001"
        assert isinstance(order._events[0], ReturnApproved)

    def test_deny(self):
        order = _delivered()
        order.request_return("reason")
        order._events.clear()
        order.deny_return(resolved_by="seller-001")
        assert order.return_status == ReturnStatus.DENIED.value
        assert isinstance(order._events[0], ReturnDenied)

    def test_cannot_resolve_without_request(self):
        with pytest.raises(InvalidTransition):
            _delivered().approve_return(resolved_by="seller-001")

    def test_resolved_return_is_terminal(self):
        order = _delivered()
        order.request_return("reason")
        order.approve_return(resolved_by="seller-001")
        with pytest.raises(InvalidTransition):
            order.deny_return(resolved_by="seller-001")

    def test_eligibility_after_resolution(self):
        order = _delivered()
        order.request_return("reason")
        order.approve_return(resolved_by="seller-001")
        eligibility = order.return_eligibility()
        assert not eligibility.eligible
        assert eligibility.reason == "Return approved"
