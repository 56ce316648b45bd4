"""Subscribing to a plan: command and handler.

A subscription is opened only for a paid checkout session whose metadata
names the same user, plan and billing period as the request. The user's
previous active subscription is closed as superseded and kept as history.
"""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from shared.clock import utc_now
from shared.errors import Ineligible, UpstreamFailure
from shared.identity import Principal
from subscriptions.billing import get_billing
from subscriptions.domain import subscriptions
from subscriptions.plan.plan import BillingPeriod, SubscriptionPlan
from subscriptions.subscription.queries import subscriptions_for
from subscriptions.subscription.subscription import Subscription, SubscriptionStatus

logger = structlog.get_logger(__name__)


@subscriptions.command(part_of="Subscription")
class Subscribe:
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()
    plan_id = Identifier(required=True)
    billing_period = String(required=True, choices=BillingPeriod)
    session_id = String(required=True, max_length=255)
    auto_renew = Boolean(default=True)


def _verify_checkout(session_id: str, principal: Principal, plan, period: BillingPeriod):
    session = get_billing().verify_checkout(session_id)
    if session.error:
        logger.warning("checkout_verification_failed", session_id=session_id, error=session.error)
        raise UpstreamFailure("billing", session.error)
    if not session.paid:
        raise Ineligible("Checkout session has not been paid", field="session_id")

    metadata = session.metadata or {}
    expected = {
        "is_subscription": "true",
        "plan_id": str(plan.id),
        "billing_period": period.value,
        "user_id": principal.user_id,
    }
    mismatched = sorted(k for k, v in expected.items() if str(metadata.get(k)) != v)
    if mismatched:
        logger.warning("checkout_metadata_mismatch", session_id=session_id, fields=mismatched)
        raise Ineligible("Checkout session does not match this subscription", field="session_id")
    return session


@subscriptions.command_handler(part_of=Subscription)
class SubscribeHandler:
    @handle(Subscribe)
    def subscribe(self, command):
        principal = Principal.from_command(command)
        period = BillingPeriod(command.billing_period)

        plan = current_domain.repository_for(SubscriptionPlan).get(command.plan_id)
        if not plan.is_active:
            raise Ineligible(f"Plan {plan.name} is not available", field="plan_id")

        session = _verify_checkout(command.session_id, principal, plan, period)
        payment_reference = session.payment_reference or session.session_id

        repo = current_domain.repository_for(Subscription)
        history = subscriptions_for(principal.user_id)
        if any(s.payment_reference == payment_reference for s in history):
            raise Ineligible("Checkout session has already been used", field="session_id")

        now = utc_now()
        for previous in history:
            if previous.refresh_expiry(now):
                repo.add(previous)
            elif SubscriptionStatus(previous.status) == SubscriptionStatus.ACTIVE:
                previous.supersede(now)
                repo.add(previous)

        subscription = Subscription.start(
            user_id=principal.user_id,
            plan=plan,
            billing_period=period,
            payment_reference=payment_reference,
            auto_renew=command.auto_renew if command.auto_renew is not None else True,
            now=now,
        )
        repo.add(subscription)
        logger.info(
            "subscription_started",
            subscription_id=str(subscription.id),
            actor_id=principal.user_id,
            plan_id=str(plan.id),
            billing_period=period.value,
        )
        return str(subscription.id)
