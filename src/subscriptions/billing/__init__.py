"""Billing gateway factory, selected by the BILLING_GATEWAY environment variable."""

import os

from subscriptions.billing.port import BillingGateway

_current_billing: BillingGateway | None = None


def get_billing() -> BillingGateway:
    """Return the current billing gateway. Defaults to FakeBillingGateway."""
    global _current_billing
    if _current_billing is None:
        adapter = os.environ.get("BILLING_GATEWAY", "fake")
        if adapter == "fake":
            from subscriptions.billing.fake_adapter import FakeBillingGateway

            _current_billing = FakeBillingGateway()
        else:
            raise ValueError(f"Unknown billing gateway: {adapter}")
    return _current_billing


def set_billing(gateway: BillingGateway) -> None:
    """Override the active billing gateway (useful for tests)."""
    global _current_billing
    _current_billing = gateway


def reset_billing() -> None:
    global _current_billing
    _current_billing = None
