"""Subscriptions bounded context: seller plans, billing periods and listing quota.

A seller's subscription decides how many listings they may keep active.
Subscriptions lapse on their end date whether or not anything touches them;
reads always report the effective status.
"""

from protean.domain import Domain

from shared.logging import configure_logging, get_logger

configure_logging()

subscriptions = Domain(name="subscriptions")

logger = get_logger(__name__)
