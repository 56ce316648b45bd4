"""Fake billing gateway: checkout sessions registered in memory by tests and demos."""

from uuid import uuid4

from subscriptions.billing.port import BillingGateway, CheckoutSession


class FakeBillingGateway(BillingGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Billing provider unavailable"
        self.sessions: dict[str, CheckoutSession] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Billing provider unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def register_checkout(
        self,
        user_id: str,
        plan_id: str,
        billing_period: str,
        paid: bool = True,
        session_id: str | None = None,
        is_subscription: bool = True,
    ) -> str:
        """Record a completed checkout and return its session id."""
        session_id = session_id or f"cs_fake_{uuid4().hex[:16]}"
        self.sessions[session_id] = CheckoutSession(
            session_id=session_id,
            paid=paid,
            payment_reference=f"pi_fake_{uuid4().hex[:12]}" if paid else None,
            metadata={
                "is_subscription": "true" if is_subscription else "false",
                "plan_id": str(plan_id),
                "billing_period": billing_period,
                "user_id": str(user_id),
            },
        )
        return session_id

    def verify_checkout(self, session_id: str) -> CheckoutSession:
        self.calls.append({"method": "verify_checkout", "session_id": session_id})

        if not self.should_succeed:
            return CheckoutSession(session_id=session_id, paid=False, error=self.failure_reason)
        return self.sessions.get(session_id, CheckoutSession(session_id=session_id, paid=False))
