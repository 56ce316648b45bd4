from datetime import timedelta

import pytest
from protean.integrations.pytest import DomainFixture

from shared.identity import Principal


@pytest.fixture(scope="session")
def subscriptions_bed():
    from subscriptions.domain import subscriptions

    bed = DomainFixture(subscriptions)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(subscriptions_bed):
    with subscriptions_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture()
def seller():
    return Principal.of("seller-001")


@pytest.fixture()
def other_seller():
    return Principal.of("seller-002")


@pytest.fixture()
def admin():
    return Principal.of("admin-001", "site_admin")


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
@pytest.fixture()
def billing():
    from subscriptions.billing import set_billing
    from subscriptions.billing.fake_adapter import FakeBillingGateway

    gateway = FakeBillingGateway()
    set_billing(gateway)
    return gateway


@pytest.fixture()
def directory():
    from subscriptions.listings import set_listing_directory
    from subscriptions.listings.fake_adapter import InMemoryListingDirectory

    listings = InMemoryListingDirectory()
    set_listing_directory(listings)
    return listings


# ---------------------------------------------------------------------------
# Plans and subscriptions
# ---------------------------------------------------------------------------
def _persist_plan(**overrides):
    from protean import current_domain

    from subscriptions.plan.plan import SubscriptionPlan

    values = {
        "name": "Studio",
        "tier": "pro",
        "price_monthly": 19.0,
        "price_yearly": 190.0,
        "max_listings": 50,
        "display_order": 2,
    }
    values.update(overrides)
    plan = SubscriptionPlan.create(**values)
    current_domain.repository_for(SubscriptionPlan).add(plan)
    return current_domain.repository_for(SubscriptionPlan).get(plan.id)


@pytest.fixture()
def plan():
    return _persist_plan()


@pytest.fixture()
def starter_plan():
    return _persist_plan(
        name="Starter",
        tier="basic",
        price_monthly=5.0,
        price_yearly=50.0,
        max_listings=5,
        display_order=1,
    )


@pytest.fixture()
def make_subscription():
    """Return a callable persisting a subscription that started ``days_ago`` days ago."""
    from protean import current_domain

    from shared.clock import utc_now
    from subscriptions.plan.plan import BillingPeriod
    from subscriptions.subscription.subscription import Subscription

    def _make(user_id, plan, days_ago=0, billing_period=BillingPeriod.MONTHLY, auto_renew=True, reference=None):
        subscription = Subscription.start(
            user_id=user_id,
            plan=plan,
            billing_period=billing_period,
            payment_reference=reference,
            auto_renew=auto_renew,
            now=utc_now() - timedelta(days=days_ago),
        )
        current_domain.repository_for(Subscription).add(subscription)
        return current_domain.repository_for(Subscription).get(subscription.id)

    return _make


@pytest.fixture()
def active_subscription(make_subscription, seller, plan):
    return make_subscription(seller.user_id, plan, days_ago=5)


@pytest.fixture()
def lapsed_subscription(make_subscription, seller, plan):
    """Monthly subscription whose end date passed about ten days ago, still stored as active."""
    return make_subscription(seller.user_id, plan, days_ago=40, auto_renew=False)
