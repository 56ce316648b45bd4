"""Application tests for plan catalogue administration."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from shared.errors import AuthorizationFailure
from subscriptions.plan.management import CreatePlan, DeletePlan, UpdatePlan, list_plans
from subscriptions.plan.plan import SubscriptionPlan
from subscriptions.subscription.queries import current_subscription


def _create(principal, **overrides):
    values = {
        "name": "Gallery",
        "tier": "premium",
        "price_monthly": 49.0,
        "price_yearly": 490.0,
        "max_listings": 200,
        "display_order": 3,
    }
    values.update(overrides)
    return current_domain.process(CreatePlan(**principal.as_actor(), **values), asynchronous=False)


class TestCreatePlan:
    def test_admin_creates_plan(self, admin):
        plan_id = _create(admin)

        plan = current_domain.repository_for(SubscriptionPlan).get(plan_id)
        assert plan.name == "Gallery"
        assert plan.max_listings == 200
        assert plan.is_active is True

    def test_seller_cannot_create_plan(self, seller):
        with pytest.raises(AuthorizationFailure):
            _create(seller)
        assert list_plans(include_inactive=True) == []


class TestUpdatePlan:
    def test_admin_updates_selected_fields(self, admin, plan):
        current_domain.process(
            UpdatePlan(plan_id=str(plan.id), **admin.as_actor(), price_monthly=24.0, is_active=False),
            asynchronous=False,
        )

        stored = current_domain.repository_for(SubscriptionPlan).get(plan.id)
        assert stored.price_monthly == 24.0
        assert stored.is_active is False
        assert stored.name == "Studio"

    def test_seller_cannot_update_plan(self, seller, plan):
        with pytest.raises(AuthorizationFailure):
            current_domain.process(
                UpdatePlan(plan_id=str(plan.id), **seller.as_actor(), max_listings=1000),
                asynchronous=False,
            )


class TestDeletePlan:
    def test_admin_deletes_plan(self, admin, plan):
        current_domain.process(DeletePlan(plan_id=str(plan.id), **admin.as_actor()), asynchronous=False)

        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(SubscriptionPlan).get(plan.id)

    def test_existing_subscriptions_survive_plan_deletion(self, admin, seller, plan, active_subscription):
        current_domain.process(DeletePlan(plan_id=str(plan.id), **admin.as_actor()), asynchronous=False)

        assert current_subscription(seller.user_id).max_listings == 50


class TestListPlans:
    def test_active_plans_in_display_order(self, admin, plan, starter_plan):
        _create(admin, name="Retired", is_active=False, display_order=0)

        assert [p.name for p in list_plans()] == ["Starter", "Studio"]
        assert [p.name for p in list_plans(include_inactive=True)] == ["Retired", "Starter", "Studio"]
