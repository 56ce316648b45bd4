"""Payment gateway port (abstract interface).

The marketplace uses a separate-charges-and-transfers model: the buyer pays
the platform at checkout, and the seller's earnings are transferred out when
the buyer confirms delivery. Adapters never raise for a declined or failed
call; they report it on the result so the command handler can tell a domain
outcome (payment not captured) from an infrastructure one (processor down).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentConfirmation:
    """Result of asking the processor whether a payment was captured."""

    confirmed: bool
    gateway_status: str | None = None
    amount: float | None = None
    error: str | None = None


@dataclass(frozen=True)
class TransferResult:
    """Result of releasing seller funds."""

    success: bool
    transfer_reference: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class RefundResult:
    """Result of a refund attempt."""

    success: bool
    gateway_refund_id: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def confirm_payment(self, payment_reference: str) -> PaymentConfirmation:
        """Check that the payment behind ``payment_reference`` was captured."""
        ...

    @abstractmethod
    def release_funds(
        self,
        order_number: str,
        payment_reference: str | None,
        amount: float,
        seller_id: str,
    ) -> TransferResult:
        """Transfer the seller's earnings.

        ``order_number`` is the idempotency key: the processor must return the
        original transfer for a repeated key instead of paying twice.
        """
        ...

    @abstractmethod
    def refund(
        self,
        payment_reference: str | None,
        amount: float,
        reason: str,
        idempotency_key: str,
    ) -> RefundResult:
        """Refund a captured payment to the buyer.

        A repeated ``idempotency_key`` must return the original refund instead
        of refunding twice.
        """
        ...
