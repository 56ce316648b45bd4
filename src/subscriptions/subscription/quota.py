"""Listing quota: how many listings a seller may have active right now."""

from dataclasses import dataclass
from datetime import datetime

from shared.clock import utc_now
from shared.errors import Ineligible
from subscriptions.listings import get_listing_directory
from subscriptions.subscription.queries import current_subscription


@dataclass(frozen=True)
class QuotaStatus:
    max_listings: int
    current_listings: int
    remaining: int
    can_activate: bool
    subscribed: bool = True

    def to_dict(self) -> dict:
        return {
            "max_listings": self.max_listings,
            "current_listings": self.current_listings,
            "remaining": self.remaining,
            "can_activate": self.can_activate,
            "subscribed": self.subscribed,
        }


def check_quota(user_id: str, now: datetime | None = None) -> QuotaStatus:
    """Quota of ``user_id`` as of ``now``. Without an active subscription the limit is zero."""
    subscription = current_subscription(user_id)
    subscribed = subscription is not None and subscription.is_active(now or utc_now())
    max_listings = subscription.max_listings if subscribed else 0
    current = get_listing_directory().count_active_listings(user_id)
    remaining = max(0, max_listings - current)
    return QuotaStatus(
        max_listings=max_listings,
        current_listings=current,
        remaining=remaining,
        can_activate=remaining > 0,
        subscribed=subscribed,
    )


def authorize_listing_activation(user_id: str, now: datetime | None = None) -> QuotaStatus:
    """Raise Ineligible unless the seller can activate one more listing."""
    quota = check_quota(user_id, now)
    if not quota.subscribed:
        raise Ineligible("An active subscription is required to activate listings", field="subscription")
    if not quota.can_activate:
        raise Ineligible(
            f"Listing limit reached ({quota.current_listings}/{quota.max_listings})",
            field="subscription",
        )
    return quota
