"""Seller-side subscription lifecycle: commands and handler.

Every write on a subscription is preceded by ``SyncSubscriptionExpiry``,
processed in its own unit of work, so a lapse observed by a rejected
command is still persisted.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from shared.clock import utc_now
from shared.identity import Principal, require_admin
from subscriptions.domain import subscriptions
from subscriptions.subscription.queries import load_subscription
from subscriptions.subscription.subscription import Subscription

logger = structlog.get_logger(__name__)


@subscriptions.command(part_of="Subscription")
class SyncSubscriptionExpiry:
    subscription_id = Identifier(required=True)


@subscriptions.command(part_of="Subscription")
class CancelSubscription:
    """Switch auto-renew off; access continues until the end date."""

    subscription_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()


@subscriptions.command(part_of="Subscription")
class ResumeSubscription:
    subscription_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()


@subscriptions.command(part_of="Subscription")
class RenewSubscription:
    """Issued by the billing side once a renewal charge succeeded."""

    subscription_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()


def process_with_expiry_sync(command):
    """Persist any lapse of the target subscription, then process ``command``."""
    current_domain.process(SyncSubscriptionExpiry(subscription_id=command.subscription_id), asynchronous=False)
    return current_domain.process(command, asynchronous=False)


@subscriptions.command_handler(part_of=Subscription)
class SubscriptionLifecycleHandler:
    @handle(SyncSubscriptionExpiry)
    def sync_expiry(self, command):
        repo = current_domain.repository_for(Subscription)
        subscription = repo.get(command.subscription_id)
        if subscription.refresh_expiry(utc_now()):
            repo.add(subscription)
            logger.info("subscription_lapsed", subscription_id=str(subscription.id))
        return str(subscription.id)

    @handle(CancelSubscription)
    def cancel(self, command):
        principal = Principal.from_command(command)
        subscription = load_subscription(command.subscription_id, principal)

        subscription.cancel(cancelled_by=principal.user_id, now=utc_now())
        current_domain.repository_for(Subscription).add(subscription)
        logger.info("subscription_cancelled", subscription_id=str(subscription.id), actor_id=principal.user_id)
        return str(subscription.id)

    @handle(ResumeSubscription)
    def resume(self, command):
        principal = Principal.from_command(command)
        subscription = load_subscription(command.subscription_id, principal)

        subscription.resume(resumed_by=principal.user_id, now=utc_now())
        current_domain.repository_for(Subscription).add(subscription)
        logger.info("subscription_resumed", subscription_id=str(subscription.id), actor_id=principal.user_id)
        return str(subscription.id)

    @handle(RenewSubscription)
    def renew(self, command):
        principal = Principal.from_command(command)
        subscription = load_subscription(command.subscription_id, principal)
        require_admin(principal, "renew a subscription")

        subscription.renew(now=utc_now())
        current_domain.repository_for(Subscription).add(subscription)
        logger.info(
            "subscription_renewed",
            subscription_id=str(subscription.id),
            actor_id=principal.user_id,
            end_date=str(subscription.end_date),
        )
        return str(subscription.id)
