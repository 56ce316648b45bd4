"""Scheduled sweep over lapsed subscriptions.

Persists the expiry of every subscription whose end date has passed, then
deactivates the listings of sellers left without an active subscription.
Safe to run repeatedly: a second run finds nothing to do.
"""

import structlog
from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from shared.clock import as_utc, utc_now
from shared.identity import Principal, require_admin
from subscriptions.domain import subscriptions
from subscriptions.listings import get_listing_directory
from subscriptions.subscription.queries import current_subscription
from subscriptions.subscription.subscription import Subscription, SubscriptionStatus

logger = structlog.get_logger(__name__)


@subscriptions.command(part_of="Subscription")
class ExpireLapsedSubscriptions:
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()


@subscriptions.command_handler(part_of=Subscription)
class SubscriptionExpiryHandler:
    @handle(ExpireLapsedSubscriptions)
    def expire_lapsed(self, command):
        principal = Principal.from_command(command)
        require_admin(principal, "run the subscription expiry sweep")

        now = utc_now()
        repo = current_domain.repository_for(Subscription)
        lapsed_users: set[str] = set()
        expired = 0
        for status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELLED):
            for subscription in repo._dao.query.filter(status=status.value).all().items:
                if as_utc(subscription.end_date) > now:
                    continue
                if subscription.refresh_expiry(now):
                    repo.add(subscription)
                    expired += 1
                    lapsed_users.add(str(subscription.user_id))

        directory = get_listing_directory()
        deactivated = 0
        for user_id in sorted(lapsed_users):
            current = current_subscription(user_id)
            if current is not None and current.is_active(now):
                continue
            count = directory.deactivate_active_listings(user_id)
            if count:
                logger.info("listings_deactivated", user_id=user_id, count=count)
            deactivated += count

        logger.info("subscription_sweep_completed", expired=expired, listings_deactivated=deactivated)
        return {"expired": expired, "listings_deactivated": deactivated}
