"""Application tests for listing quota checks."""

import pytest
from protean import current_domain
from shared.errors import Ineligible
from subscriptions.plan.plan import SubscriptionPlan
from subscriptions.subscription.lifecycle import CancelSubscription, process_with_expiry_sync
from subscriptions.subscription.quota import authorize_listing_activation, check_quota


class TestCheckQuota:
    def test_no_subscription_means_no_listings(self, seller, directory):
        quota = check_quota(seller.user_id)
        assert quota.to_dict() == {
            "max_listings": 0,
            "current_listings": 0,
            "remaining": 0,
            "can_activate": False,
            "subscribed": False,
        }

    def test_remaining_slots(self, seller, active_subscription, directory):
        directory.set_active_listings(seller.user_id, 10)

        quota = check_quota(seller.user_id)

        assert quota.subscribed is True
        assert quota.max_listings == 50
        assert quota.current_listings == 10
        assert quota.remaining == 40
        assert quota.can_activate is True

    def test_lapsed_subscription_grants_nothing(self, seller, lapsed_subscription, directory):
        directory.set_active_listings(seller.user_id, 3)

        quota = check_quota(seller.user_id)

        assert quota.subscribed is False
        assert quota.max_listings == 0
        assert quota.current_listings == 3
        assert quota.remaining == 0

    def test_cancelled_auto_renew_keeps_quota_until_end_date(self, seller, active_subscription, directory):
        process_with_expiry_sync(CancelSubscription(subscription_id=str(active_subscription.id), **seller.as_actor()))
        assert check_quota(seller.user_id).max_listings == 50

    def test_over_limit_never_goes_negative(self, seller, starter_plan, make_subscription, directory):
        make_subscription(seller.user_id, starter_plan, days_ago=1)
        directory.set_active_listings(seller.user_id, 8)

        quota = check_quota(seller.user_id)

        assert quota.remaining == 0
        assert quota.can_activate is False

    def test_plan_edits_do_not_change_existing_subscriptions(self, seller, plan, active_subscription, directory):
        repo = current_domain.repository_for(SubscriptionPlan)
        stored = repo.get(plan.id)
        stored.update(max_listings=5)
        repo.add(stored)

        assert check_quota(seller.user_id).max_listings == 50


class TestAuthorizeListingActivation:
    def test_slot_available(self, seller, active_subscription, directory):
        directory.set_active_listings(seller.user_id, 49)
        assert authorize_listing_activation(seller.user_id).remaining == 1

    def test_limit_reached(self, seller, starter_plan, make_subscription, directory):
        make_subscription(seller.user_id, starter_plan, days_ago=1)
        directory.set_active_listings(seller.user_id, 5)

        with pytest.raises(Ineligible) as exc:
            authorize_listing_activation(seller.user_id)
        assert exc.value.reason == "Listing limit reached (5/5)"

    def test_subscription_required(self, seller, lapsed_subscription, directory):
        with pytest.raises(Ineligible) as exc:
            authorize_listing_activation(seller.user_id)
        assert exc.value.reason == "An active subscription is required to activate listings"
