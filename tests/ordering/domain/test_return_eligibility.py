"""Tests for the return eligibility evaluator."""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest
from ordering.order.eligibility import delivery_timestamp, evaluate

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=UTC)


def _order(status="delivered", return_status=None, delivered_at=None, updated_at=None, created_at=None):
    return SimpleNamespace(
        status=status,
        return_status=return_status,
        delivered_at=delivered_at,
        updated_at=updated_at,
        created_at=created_at or NOW - timedelta(days=60),
    )


def _snapshot(return_days=30):
    return SimpleNamespace(return_days=return_days)


class TestEvaluate:
    def test_delivered_ten_days_ago_has_twenty_days_left(self):
        result = evaluate(_order(delivered_at=NOW - timedelta(days=10)), _snapshot(30), NOW)
        assert result.eligible
        assert result.days_left == 20
        assert result.reason == "20 days left to return"

    def test_no_return_policy(self):
        result = evaluate(_order(delivered_at=NOW), _snapshot(None), NOW)
        assert not result.eligible
        assert result.reason == "No returns accepted"

    def test_zero_return_days(self):
        result = evaluate(_order(delivered_at=NOW), _snapshot(0), NOW)
        assert result.reason == "No returns accepted"

    @pytest.mark.parametrize("status", ["pending", "paid", "shipped", "cancelled"])
    def test_not_delivered(self, status):
        result = evaluate(_order(status=status), _snapshot(30), NOW)
        assert not result.eligible
        assert result.reason == "Order not yet delivered"

    @pytest.mark.parametrize("return_status", ["requested", "approved", "denied"])
    def test_existing_return(self, return_status):
        result = evaluate(_order(return_status=return_status, delivered_at=NOW), _snapshot(30), NOW)
        assert not result.eligible
        assert result.reason == f"Return {return_status}"

    def test_window_expired(self):
        result = evaluate(_order(delivered_at=NOW - timedelta(days=31)), _snapshot(30), NOW)
        assert not result.eligible
        assert result.reason == "Return window expired"

    def test_last_day_is_still_eligible(self):
        result = evaluate(_order(delivered_at=NOW - timedelta(days=30, hours=23)), _snapshot(30), NOW)
        assert result.eligible
        assert result.days_left == 0

    def test_partial_days_round_down(self):
        result = evaluate(_order(delivered_at=NOW - timedelta(days=2, hours=20)), _snapshot(7), NOW)
        assert result.days_left == 5

    def test_delivery_in_the_future_counts_as_day_zero(self):
        result = evaluate(_order(delivered_at=NOW + timedelta(hours=3)), _snapshot(7), NOW)
        assert result.days_left == 7

    @pytest.mark.parametrize("elapsed", [0, 1, 9, 17, 29])
    def test_not_eligible_days_left_plus_one_later(self, elapsed):
        order = _order(delivered_at=NOW - timedelta(days=elapsed))
        first = evaluate(order, _snapshot(30), NOW)
        assert first.eligible
        later = evaluate(order, _snapshot(30), NOW + timedelta(days=first.days_left + 1))
        assert not later.eligible


class TestDeliveryTimestamp:
    def test_prefers_delivered_at(self):
        delivered = NOW - timedelta(days=3)
        order = _order(delivered_at=delivered, updated_at=NOW - timedelta(days=1))
        assert delivery_timestamp(order) == delivered

    def test_legacy_falls_back_to_updated_at(self):
        updated = NOW - timedelta(days=4)
        assert delivery_timestamp(_order(updated_at=updated)) == updated

    def test_legacy_falls_back_to_created_at(self):
        created = NOW - timedelta(days=5)
        assert delivery_timestamp(_order(created_at=created)) == created

    def test_naive_timestamps_are_treated_as_utc(self):
        naive = datetime(2025, 3, 5, 12, 0)
        result = evaluate(_order(delivered_at=naive), _snapshot(30), NOW)
        assert result.days_left == 20
