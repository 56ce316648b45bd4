"""Configurable fake payment gateway for development and testing.

Simulates the processor without external calls. It can be told to fail
outright (processor unavailable) or to report individual payment references
as not captured, and it deduplicates fund releases and refunds by key the way
the real processor does with idempotency keys.
"""

from uuid import uuid4

from ordering.gateway.port import PaymentConfirmation, PaymentGateway, RefundResult, TransferResult


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment processor unavailable"
        self.uncaptured: set[str] = set()
        self.transfers: dict[str, TransferResult] = {}
        self.refunds: dict[str, RefundResult] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Payment processor unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def mark_uncaptured(self, payment_reference: str) -> None:
        """Report ``payment_reference`` as not (yet) captured."""
        self.uncaptured.add(payment_reference)

    def calls_to(self, method: str) -> list[dict]:
        return [c for c in self.calls if c["method"] == method]

    def confirm_payment(self, payment_reference: str) -> PaymentConfirmation:
        self.calls.append({"method": "confirm_payment", "payment_reference": payment_reference})

        if not self.should_succeed:
            return PaymentConfirmation(confirmed=False, error=self.failure_reason)
        if payment_reference in self.uncaptured:
            return PaymentConfirmation(confirmed=False, gateway_status="requires_payment_method")
        return PaymentConfirmation(confirmed=True, gateway_status="succeeded")

    def release_funds(
        self,
        order_number: str,
        payment_reference: str | None,
        amount: float,
        seller_id: str,
    ) -> TransferResult:
        self.calls.append(
            {
                "method": "release_funds",
                "order_number": order_number,
                "payment_reference": payment_reference,
                "amount": amount,
                "seller_id": seller_id,
            }
        )

        if not self.should_succeed:
            return TransferResult(success=False, failure_reason=self.failure_reason)
        if order_number not in self.transfers:
            self.transfers[order_number] = TransferResult(
                success=True,
                transfer_reference=f"fake_tr_{uuid4().hex[:12]}",
            )
        return self.transfers[order_number]

    def refund(
        self,
        payment_reference: str | None,
        amount: float,
        reason: str,
        idempotency_key: str,
    ) -> RefundResult:
        self.calls.append(
            {
                "method": "refund",
                "payment_reference": payment_reference,
                "amount": amount,
                "reason": reason,
                "idempotency_key": idempotency_key,
            }
        )

        if not self.should_succeed:
            return RefundResult(success=False, failure_reason=self.failure_reason)
        if idempotency_key not in self.refunds:
            self.refunds[idempotency_key] = RefundResult(
                success=True,
                gateway_refund_id=f"fake_ref_{uuid4().hex[:12]}",
                gateway_status="succeeded",
            )
        return self.refunds[idempotency_key]
