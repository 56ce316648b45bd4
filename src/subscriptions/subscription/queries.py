"""Subscription reads and the visibility rule shared by subscription commands."""

from protean.utils.globals import current_domain

from shared.errors import NotVisible
from shared.identity import Principal
from subscriptions.subscription.subscription import Subscription


def subscriptions_for(user_id: str) -> list[Subscription]:
    """All subscriptions of a user, most recent first."""
    rows = current_domain.repository_for(Subscription)._dao.query.filter(user_id=str(user_id)).all().items
    return sorted(rows, key=lambda s: s.start_date, reverse=True)


def current_subscription(user_id: str) -> Subscription | None:
    """The user's current subscription: the one with the latest start date."""
    rows = subscriptions_for(user_id)
    return rows[0] if rows else None


def load_subscription(subscription_id: str, principal: Principal) -> Subscription:
    subscription = current_domain.repository_for(Subscription).get(subscription_id)
    if not principal.is_admin and str(subscription.user_id) != principal.user_id:
        raise NotVisible("Subscription", subscription_id)
    return subscription


def list_subscriptions(user_id: str | None = None) -> list[Subscription]:
    """Administrator listing, optionally for one user."""
    if user_id:
        return subscriptions_for(user_id)
    rows = current_domain.repository_for(Subscription)._dao.query.all().items
    return sorted(rows, key=lambda s: s.start_date, reverse=True)
