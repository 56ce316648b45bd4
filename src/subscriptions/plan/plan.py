"""SubscriptionPlan aggregate (CQRS).

Plans are the catalogue sellers subscribe from. Subscriptions copy the
plan's limits at subscribe time, so editing a plan never changes an
existing subscription.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from subscriptions.domain import subscriptions
from subscriptions.plan.events import PlanCreated, PlanUpdated


class BillingPeriod(Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


_EDITABLE_FIELDS = (
    "name",
    "tier",
    "price_monthly",
    "price_yearly",
    "max_listings",
    "features",
    "is_active",
    "display_order",
)


@subscriptions.aggregate
class SubscriptionPlan:
    name = String(required=True, max_length=100)
    tier = String(required=True, max_length=50)
    price_monthly = Float(required=True, min_value=0.0)
    price_yearly = Float(required=True, min_value=0.0)
    max_listings = Integer(required=True, min_value=0)
    features = Text()
    is_active = Boolean(default=True)
    display_order = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def name_must_not_be_blank(self):
        if self.name is not None and not self.name.strip():
            raise ValidationError({"name": ["Plan name cannot be blank"]})

    @classmethod
    def create(
        cls,
        name: str,
        tier: str,
        price_monthly: float,
        price_yearly: float,
        max_listings: int,
        features: str | None = None,
        is_active: bool = True,
        display_order: int = 0,
    ):
        now = datetime.now(UTC)
        plan = cls(
            name=name,
            tier=tier,
            price_monthly=price_monthly,
            price_yearly=price_yearly,
            max_listings=max_listings,
            features=features,
            is_active=is_active,
            display_order=display_order,
            created_at=now,
            updated_at=now,
        )
        plan.raise_(
            PlanCreated(
                plan_id=str(plan.id),
                name=name,
                tier=tier,
                price_monthly=price_monthly,
                price_yearly=price_yearly,
                max_listings=max_listings,
                created_at=now,
            )
        )
        return plan

    def price_for(self, period: BillingPeriod) -> float:
        return self.price_yearly if period == BillingPeriod.YEARLY else self.price_monthly

    def update(self, **changes) -> None:
        """Apply the given field changes; unknown fields are rejected."""
        unknown = set(changes) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError({"plan": [f"Unknown plan fields: {', '.join(sorted(unknown))}"]})

        applied = {k: v for k, v in changes.items() if v is not None and getattr(self, k) != v}
        if not applied:
            return

        now = datetime.now(UTC)
        with atomic_change(self):
            for field_name, value in applied.items():
                setattr(self, field_name, value)
            self.updated_at = now
        self.raise_(PlanUpdated(plan_id=str(self.id), changes=json.dumps(applied), updated_at=now))
