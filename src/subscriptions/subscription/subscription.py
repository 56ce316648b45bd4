"""Subscription aggregate (CQRS): a seller's paid access to a plan.

State Machine:
    ACTIVE → EXPIRED        (end date passes, or administrator "expire now")
    ACTIVE → CANCELLED      (superseded by a newer subscription)
    CANCELLED → EXPIRED     (end date passes)

Cancelling a subscription from the seller's side only switches auto-renew
off; the status stays ACTIVE and access continues until the end date.

Expiry is evaluated lazily: ``effective_status(now)`` reports EXPIRED as soon
as the end date has passed, even before anything persisted it. Every write
goes through ``refresh_expiry`` first so the stored status catches up.
"""

import calendar
from datetime import datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from shared.clock import as_utc, utc_now
from shared.errors import InvalidTransition
from subscriptions.domain import subscriptions
from subscriptions.plan.plan import BillingPeriod
from subscriptions.subscription.events import (
    AutoRenewChanged,
    SubscriptionExpired,
    SubscriptionExtended,
    SubscriptionRenewed,
    SubscriptionStarted,
    SubscriptionSuperseded,
)

MIN_EXTENSION_DAYS = 1
MAX_EXTENSION_DAYS = 365


class SubscriptionStatus(Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


def add_billing_period(start: datetime, period: BillingPeriod) -> datetime:
    """One calendar month or year after ``start``.

    The day of month is clamped to the target month's length, so Jan 31 plus a
    month is the last day of February and Feb 29 plus a year is Feb 28.
    """
    if period == BillingPeriod.YEARLY:
        year, month = start.year + 1, start.month
    else:
        year, month = start.year + start.month // 12, start.month % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def effective_status(subscription, now: datetime) -> SubscriptionStatus:
    """Status as of ``now``: a lapsed active or cancelled subscription reads as expired."""
    stored = SubscriptionStatus(subscription.status)
    if stored in (SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELLED):
        if as_utc(subscription.end_date) <= as_utc(now):
            return SubscriptionStatus.EXPIRED
    return stored


@subscriptions.aggregate
class Subscription:
    user_id = Identifier(required=True)
    plan_id = Identifier(required=True)
    plan_name = String(max_length=100)
    tier = String(required=True, max_length=50)
    billing_period = String(required=True, choices=BillingPeriod)
    max_listings = Integer(required=True, min_value=0)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    status = String(choices=SubscriptionStatus, default=SubscriptionStatus.ACTIVE.value)
    auto_renew = Boolean(default=True)
    payment_reference = String(max_length=255)
    cancelled_at = DateTime()
    expired_at = DateTime()
    renewed_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def end_date_must_follow_start_date(self):
        if self.start_date and self.end_date and as_utc(self.end_date) <= as_utc(self.start_date):
            raise ValidationError({"end_date": ["End date must be after the start date"]})

    @invariant.post
    def cancelled_subscriptions_do_not_renew(self):
        if self.status == SubscriptionStatus.CANCELLED.value and self.auto_renew:
            raise ValidationError({"auto_renew": ["A cancelled subscription cannot auto-renew"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def start(
        cls,
        user_id: str,
        plan,
        billing_period: BillingPeriod,
        payment_reference: str | None = None,
        auto_renew: bool = True,
        now: datetime | None = None,
    ):
        """Open a new active subscription covering one billing period from ``now``."""
        now = now or utc_now()
        end_date = add_billing_period(now, billing_period)
        subscription = cls(
            user_id=user_id,
            plan_id=str(plan.id),
            plan_name=plan.name,
            tier=plan.tier,
            billing_period=billing_period.value,
            max_listings=plan.max_listings,
            start_date=now,
            end_date=end_date,
            status=SubscriptionStatus.ACTIVE.value,
            auto_renew=auto_renew,
            payment_reference=payment_reference,
            created_at=now,
            updated_at=now,
        )
        subscription.raise_(
            SubscriptionStarted(
                subscription_id=str(subscription.id),
                user_id=str(user_id),
                plan_id=str(plan.id),
                tier=plan.tier,
                billing_period=billing_period.value,
                max_listings=plan.max_listings,
                auto_renew=auto_renew,
                start_date=now,
                end_date=end_date,
            )
        )
        return subscription

    # -------------------------------------------------------------------
    # Expiry
    # -------------------------------------------------------------------
    def effective_status(self, now: datetime | None = None) -> SubscriptionStatus:
        return effective_status(self, now or utc_now())

    def is_active(self, now: datetime | None = None) -> bool:
        return self.effective_status(now) == SubscriptionStatus.ACTIVE

    def refresh_expiry(self, now: datetime | None = None) -> bool:
        """Persist a lapse that has already happened. Returns True when the status changed."""
        now = now or utc_now()
        if SubscriptionStatus(self.status) == SubscriptionStatus.EXPIRED:
            return False
        if self.effective_status(now) != SubscriptionStatus.EXPIRED:
            return False

        with atomic_change(self):
            self.status = SubscriptionStatus.EXPIRED.value
            self.auto_renew = False
            self.expired_at = as_utc(self.end_date)
            self.updated_at = now
        self.raise_(
            SubscriptionExpired(
                subscription_id=str(self.id),
                user_id=str(self.user_id),
                reason="lapsed",
                expired_at=as_utc(self.end_date),
            )
        )
        return True

    def _assert_active(self, action: str, now: datetime) -> None:
        current = self.effective_status(now)
        if current != SubscriptionStatus.ACTIVE:
            raise InvalidTransition(current.value, f"Cannot {action} a {current.value} subscription")

    # -------------------------------------------------------------------
    # Seller actions
    # -------------------------------------------------------------------
    def cancel(self, cancelled_by: str, now: datetime | None = None) -> None:
        """Switch auto-renew off. Access continues until the end date."""
        now = now or utc_now()
        self._assert_active("cancel", now)
        if not self.auto_renew:
            return

        with atomic_change(self):
            self.auto_renew = False
            self.cancelled_at = now
            self.updated_at = now
        self.raise_(
            AutoRenewChanged(
                subscription_id=str(self.id),
                user_id=str(self.user_id),
                auto_renew=False,
                changed_by=cancelled_by,
                changed_at=now,
            )
        )

    def resume(self, resumed_by: str, now: datetime | None = None) -> None:
        """Switch auto-renew back on while the subscription is still active."""
        now = now or utc_now()
        self._assert_active("resume", now)
        if self.auto_renew:
            return

        with atomic_change(self):
            self.auto_renew = True
            self.cancelled_at = None
            self.updated_at = now
        self.raise_(
            AutoRenewChanged(
                subscription_id=str(self.id),
                user_id=str(self.user_id),
                auto_renew=True,
                changed_by=resumed_by,
                changed_at=now,
            )
        )

    def supersede(self, now: datetime | None = None) -> None:
        """Close this subscription because the user subscribed again."""
        now = now or utc_now()
        with atomic_change(self):
            self.status = SubscriptionStatus.CANCELLED.value
            self.auto_renew = False
            self.cancelled_at = now
            self.updated_at = now
        self.raise_(SubscriptionSuperseded(subscription_id=str(self.id), user_id=str(self.user_id), superseded_at=now))

    # -------------------------------------------------------------------
    # Renewal
    # -------------------------------------------------------------------
    def renew(self, now: datetime | None = None) -> None:
        """Advance the end date by one billing period after a successful renewal charge."""
        now = now or utc_now()
        self._assert_active("renew", now)
        if not self.auto_renew:
            raise InvalidTransition(
                SubscriptionStatus(self.status).value,
                "Cannot renew a subscription with auto-renew switched off",
                field="auto_renew",
            )

        previous_end = as_utc(self.end_date)
        new_end = add_billing_period(previous_end, BillingPeriod(self.billing_period))
        with atomic_change(self):
            self.end_date = new_end
            self.renewed_at = now
            self.updated_at = now
        self.raise_(
            SubscriptionRenewed(
                subscription_id=str(self.id),
                user_id=str(self.user_id),
                previous_end_date=previous_end,
                end_date=new_end,
                renewed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Admin overrides
    # -------------------------------------------------------------------
    def extend(self, days: int, extended_by: str, now: datetime | None = None) -> None:
        """Push the end date out by ``days``. Status is unchanged."""
        if days is None or not MIN_EXTENSION_DAYS <= days <= MAX_EXTENSION_DAYS:
            raise ValidationError(
                {"days": [f"Extension must be between {MIN_EXTENSION_DAYS} and {MAX_EXTENSION_DAYS} days"]}
            )
        now = now or utc_now()
        self._assert_active("extend", now)

        previous_end = as_utc(self.end_date)
        new_end = previous_end + timedelta(days=days)
        with atomic_change(self):
            self.end_date = new_end
            self.updated_at = now
        self.raise_(
            SubscriptionExtended(
                subscription_id=str(self.id),
                user_id=str(self.user_id),
                days=days,
                previous_end_date=previous_end,
                end_date=new_end,
                extended_by=extended_by,
            )
        )

    def expire_now(self, expired_by: str, now: datetime | None = None) -> None:
        """End the subscription immediately. Irreversible."""
        now = now or utc_now()
        current = SubscriptionStatus(self.status)
        if current == SubscriptionStatus.EXPIRED:
            raise InvalidTransition(current.value, "Subscription is already expired")

        with atomic_change(self):
            self.status = SubscriptionStatus.EXPIRED.value
            self.auto_renew = False
            self.expired_at = now
            self.updated_at = now
        self.raise_(
            SubscriptionExpired(
                subscription_id=str(self.id),
                user_id=str(self.user_id),
                reason="forced",
                expired_by=expired_by,
                expired_at=now,
            )
        )
