"""Billing port: verification of subscription checkout sessions.

Subscriptions are paid through a hosted checkout. Before a subscription is
opened the session is fetched from the processor and its metadata compared
with the request, so a client cannot replay someone else's payment or claim
a more expensive plan than it paid for.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CheckoutSession:
    """What the processor reports about a checkout session."""

    session_id: str
    paid: bool
    payment_reference: str | None = None
    metadata: dict = field(default_factory=dict)
    error: str | None = None


class BillingGateway(ABC):
    @abstractmethod
    def verify_checkout(self, session_id: str) -> CheckoutSession:
        """Fetch a checkout session. Transport failures are reported on ``error``."""
        ...
