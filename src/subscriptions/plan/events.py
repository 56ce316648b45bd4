"""Subscription plan domain events."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from subscriptions.domain import subscriptions


@subscriptions.event(part_of="SubscriptionPlan")
class PlanCreated:
    __version__ = 1

    plan_id = Identifier(required=True)
    name = String(required=True)
    tier = String(required=True)
    price_monthly = Float(required=True)
    price_yearly = Float(required=True)
    max_listings = Integer(required=True)
    created_at = DateTime(required=True)


@subscriptions.event(part_of="SubscriptionPlan")
class PlanUpdated:
    __version__ = 1

    plan_id = Identifier(required=True)
    changes = Text(required=True)  # JSON dict of changed fields
    updated_at = DateTime(required=True)
