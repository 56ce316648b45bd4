"""Shared BDD fixtures and step definitions for the Subscriptions domain."""

from datetime import UTC, datetime

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from subscriptions.plan.plan import BillingPeriod, SubscriptionPlan
from subscriptions.subscription.events import (
    AutoRenewChanged,
    SubscriptionExpired,
    SubscriptionExtended,
    SubscriptionRenewed,
    SubscriptionStarted,
    SubscriptionSuperseded,
)
from subscriptions.subscription.subscription import Subscription

_SUBSCRIPTION_EVENT_CLASSES = {
    "SubscriptionStarted": SubscriptionStarted,
    "SubscriptionSuperseded": SubscriptionSuperseded,
    "AutoRenewChanged": AutoRenewChanged,
    "SubscriptionRenewed": SubscriptionRenewed,
    "SubscriptionExtended": SubscriptionExtended,
    "SubscriptionExpired": SubscriptionExpired,
}


def parse_date(value: str) -> datetime:
    return datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=UTC)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def clock():
    """The 'today' the scenario runs at."""
    return {"now": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('today is "{day}"'))
def today_is(clock, day):
    clock["now"] = parse_date(day)


@given(
    parsers.cfparse('a {period} subscription to a plan allowing {max_listings:d} listings started on "{day}"'),
    target_fixture="subscription",
)
def subscription_started_on(period, max_listings, day):
    plan = SubscriptionPlan.create(
        name="Studio",
        tier="pro",
        price_monthly=19.0,
        price_yearly=190.0,
        max_listings=max_listings,
    )
    subscription = Subscription.start(
        user_id="seller-001",
        plan=plan,
        billing_period=BillingPeriod(period),
        payment_reference="pi_bdd_sub",
        now=parse_date(day),
    )
    subscription._events.clear()
    return subscription


@given("auto-renew is switched off")
def auto_renew_off(subscription):
    subscription.cancel(cancelled_by="seller-001", now=subscription.start_date)
    subscription._events.clear()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the subscription reads as "{status}"'))
def subscription_reads_as(subscription, clock, status):
    assert subscription.effective_status(clock["now"]).value == status


@then(parsers.cfparse('the stored status is "{status}"'))
def stored_status_is(subscription, status):
    assert subscription.status == status


@then(parsers.cfparse('the subscription ends on "{day}"'))
def subscription_ends_on(subscription, day):
    assert subscription.end_date == parse_date(day)


@then("the subscription action fails with a validation error")
def subscription_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("the {event_type} event is raised"))
def event_raised(subscription, event_type):
    event_cls = _SUBSCRIPTION_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in subscription._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in subscription._events]}"
