"""Subscription domain events: immutable facts about a seller's subscription."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from subscriptions.domain import subscriptions


@subscriptions.event(part_of="Subscription")
class SubscriptionStarted:
    """A seller subscribed to a plan after a verified checkout."""

    __version__ = 1

    subscription_id = Identifier(required=True)
    user_id = Identifier(required=True)
    plan_id = Identifier(required=True)
    tier = String(required=True)
    billing_period = String(required=True)
    max_listings = Integer(required=True)
    auto_renew = Boolean(required=True)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)


@subscriptions.event(part_of="Subscription")
class SubscriptionSuperseded:
    """A newer subscription replaced this one."""

    __version__ = 1

    subscription_id = Identifier(required=True)
    user_id = Identifier(required=True)
    superseded_at = DateTime(required=True)


@subscriptions.event(part_of="Subscription")
class AutoRenewChanged:
    """Auto-renew was switched off (cancel) or back on (resume)."""

    __version__ = 1

    subscription_id = Identifier(required=True)
    user_id = Identifier(required=True)
    auto_renew = Boolean(required=True)
    changed_by = String(required=True)
    changed_at = DateTime(required=True)


@subscriptions.event(part_of="Subscription")
class SubscriptionRenewed:
    """The subscription was paid for another billing period."""

    __version__ = 1

    subscription_id = Identifier(required=True)
    user_id = Identifier(required=True)
    previous_end_date = DateTime(required=True)
    end_date = DateTime(required=True)
    renewed_at = DateTime(required=True)


@subscriptions.event(part_of="Subscription")
class SubscriptionExtended:
    """An administrator granted extra days."""

    __version__ = 1

    subscription_id = Identifier(required=True)
    user_id = Identifier(required=True)
    days = Integer(required=True)
    previous_end_date = DateTime(required=True)
    end_date = DateTime(required=True)
    extended_by = String(required=True)


@subscriptions.event(part_of="Subscription")
class SubscriptionExpired:
    """The subscription ended, either by lapsing or by administrator action."""

    __version__ = 1

    subscription_id = Identifier(required=True)
    user_id = Identifier(required=True)
    reason = String(required=True)  # "lapsed" or "forced"
    expired_by = String()
    expired_at = DateTime(required=True)
