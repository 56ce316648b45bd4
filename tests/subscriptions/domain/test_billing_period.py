"""Tests for calendar arithmetic on billing periods."""

from datetime import UTC, datetime

import pytest
from subscriptions.plan.plan import BillingPeriod
from subscriptions.subscription.subscription import add_billing_period


@pytest.mark.parametrize(
    "start, period, expected",
    [
        (datetime(2025, 3, 10, 9, 30, tzinfo=UTC), BillingPeriod.MONTHLY, datetime(2025, 4, 10, 9, 30, tzinfo=UTC)),
        (datetime(2024, 12, 15, tzinfo=UTC), BillingPeriod.MONTHLY, datetime(2025, 1, 15, tzinfo=UTC)),
        (datetime(2025, 1, 31, tzinfo=UTC), BillingPeriod.MONTHLY, datetime(2025, 2, 28, tzinfo=UTC)),
        (datetime(2024, 1, 31, tzinfo=UTC), BillingPeriod.MONTHLY, datetime(2024, 2, 29, tzinfo=UTC)),
        (datetime(2025, 3, 10, tzinfo=UTC), BillingPeriod.YEARLY, datetime(2026, 3, 10, tzinfo=UTC)),
        (datetime(2024, 2, 29, tzinfo=UTC), BillingPeriod.YEARLY, datetime(2025, 2, 28, tzinfo=UTC)),
    ],
)
def test_add_billing_period(start, period, expected):
    assert add_billing_period(start, period) == expected


def test_time_of_day_and_timezone_are_kept():
    start = datetime(2025, 5, 31, 23, 59, 59, tzinfo=UTC)
    end = add_billing_period(start, BillingPeriod.MONTHLY)
    assert end == datetime(2025, 6, 30, 23, 59, 59, tzinfo=UTC)
    assert end.tzinfo is UTC
