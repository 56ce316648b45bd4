"""Application tests for administrator overrides on orders."""

from unittest.mock import patch

import pytest
from ordering.gateway import get_gateway
from ordering.notifier import get_notifier
from ordering.order.admin import ForceOrderStatus, UpdateShippingDetails
from ordering.order.order import Order, OrderStatus
from ordering.order.returns import RequestReturn
from protean import current_domain
from shared.errors import AuthorizationFailure, InvalidTransition


def _force(order_id, principal, status):
    return current_domain.process(
        ForceOrderStatus(order_id=order_id, **principal.as_actor(), status=status),
        asynchronous=False,
    )


class TestForceStatus:
    def test_admin_forces_delivered_without_fund_release(self, paid_order, admin):
        _force(paid_order, admin, "delivered")

        order = current_domain.repository_for(Order).get(paid_order)
        assert order.status == OrderStatus.DELIVERED.value
        assert order.delivered_at is not None
        assert get_gateway().calls_to("release_funds") == []

    def test_forced_delivery_without_fund_release_is_flagged(self, paid_order, admin):
        with patch("ordering.order.admin.logger") as logger:
            _force(paid_order, admin, "delivered")

        events = [c.args[0] for c in logger.warning.call_args_list]
        assert "forced_delivery_without_fund_release" in events
        flagged = next(c for c in logger.warning.call_args_list if c.args[0] == "forced_delivery_without_fund_release")
        assert flagged.kwargs["order_id"] == paid_order
        assert flagged.kwargs["actor_id"] == admin.user_id

    def test_forced_shipped_is_not_flagged(self, paid_order, admin):
        with patch("ordering.order.admin.logger") as logger:
            _force(paid_order, admin, "shipped")

        events = [c.args[0] for c in logger.warning.call_args_list]
        assert events == ["order_status_forced"]

    def test_non_admin_rejected(self, paid_order, seller):
        with pytest.raises(AuthorizationFailure):
            _force(paid_order, seller, "shipped")
        assert current_domain.repository_for(Order).get(paid_order).status == OrderStatus.PAID.value

    def test_structural_invariant_still_holds(self, delivered_order, buyer, admin):
        current_domain.process(
            RequestReturn(order_id=delivered_order, **buyer.as_actor(), reason="Torn canvas"),
            asynchronous=False,
        )
        with pytest.raises(InvalidTransition):
            _force(delivered_order, admin, "paid")
        order = current_domain.repository_for(Order).get(delivered_order)
        assert order.status == OrderStatus.DELIVERED.value
        assert order.return_status == "requested"


class TestUpdateShipping:
    def test_tracking_on_paid_order_ships_and_notifies(self, paid_order, admin, buyer):
        current_domain.process(
            UpdateShippingDetails(order_id=paid_order, **admin.as_actor(), carrier="UPS", tracking_number="1Z999"),
            asynchronous=False,
        )
        order = current_domain.repository_for(Order).get(paid_order)
        assert order.status == OrderStatus.SHIPPED.value
        assert order.tracking.tracking_number == "1Z999"
        assert get_notifier().sent_to(buyer.user_id)[-1]["title"] == "Order shipped"

    def test_corrects_tracking_on_shipped_order(self, shipped_order, admin):
        current_domain.process(
            UpdateShippingDetails(order_id=shipped_order, **admin.as_actor(), tracking_number="9400-FIXED"),
            asynchronous=False,
        )
        order = current_domain.repository_for(Order).get(shipped_order)
        assert order.tracking.tracking_number == "9400-FIXED"
        assert order.tracking.carrier == "USPS"

    def test_non_admin_rejected(self, shipped_order, seller):
        with pytest.raises(AuthorizationFailure):
            current_domain.process(
                UpdateShippingDetails(order_id=shipped_order, **seller.as_actor(), tracking_number="X"),
                asynchronous=False,
            )
