"""Administrator overrides on subscriptions: commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from shared.clock import utc_now
from shared.identity import Principal, require_admin
from subscriptions.domain import subscriptions
from subscriptions.subscription.subscription import (
    MAX_EXTENSION_DAYS,
    MIN_EXTENSION_DAYS,
    Subscription,
)

logger = structlog.get_logger(__name__)


@subscriptions.command(part_of="Subscription")
class ExtendSubscription:
    subscription_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()
    days = Integer(required=True, min_value=MIN_EXTENSION_DAYS, max_value=MAX_EXTENSION_DAYS)


@subscriptions.command(part_of="Subscription")
class ExpireSubscription:
    subscription_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()


@subscriptions.command(part_of="Subscription")
class AdminCancelSubscription:
    subscription_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()


@subscriptions.command_handler(part_of=Subscription)
class SubscriptionAdminHandler:
    def _load(self, command, action: str):
        principal = Principal.from_command(command)
        require_admin(principal, action)
        return principal, current_domain.repository_for(Subscription).get(command.subscription_id)

    @handle(ExtendSubscription)
    def extend(self, command):
        principal, subscription = self._load(command, "extend subscriptions")

        subscription.extend(command.days, extended_by=principal.user_id, now=utc_now())
        current_domain.repository_for(Subscription).add(subscription)
        logger.info(
            "subscription_extended",
            subscription_id=str(subscription.id),
            actor_id=principal.user_id,
            days=command.days,
        )
        return str(subscription.id)

    @handle(ExpireSubscription)
    def expire(self, command):
        principal, subscription = self._load(command, "expire subscriptions")

        subscription.expire_now(expired_by=principal.user_id, now=utc_now())
        current_domain.repository_for(Subscription).add(subscription)
        logger.warning("subscription_force_expired", subscription_id=str(subscription.id), actor_id=principal.user_id)
        return str(subscription.id)

    @handle(AdminCancelSubscription)
    def cancel(self, command):
        principal, subscription = self._load(command, "cancel subscriptions")

        subscription.cancel(cancelled_by=principal.user_id, now=utc_now())
        current_domain.repository_for(Subscription).add(subscription)
        logger.info("subscription_cancelled", subscription_id=str(subscription.id), actor_id=principal.user_id)
        return str(subscription.id)
