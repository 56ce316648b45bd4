"""Fake carrier adapter: deterministic carrier for testing and development.

Quotes a fixed rate card, issues mock tracking numbers and labels, and
counts label purchases so tests can assert a retry never buys twice.
"""

from datetime import UTC, datetime
from uuid import uuid4

from ordering.carrier.port import CarrierError, CarrierPort, LabelPurchase, Rate, TrackingStatus

_RATE_CARD = [
    ("USPS", "Priority Mail", 9.45, 2),
    ("USPS", "Ground Advantage", 6.80, 5),
    ("UPS", "Ground", 12.10, 4),
]


class FakeCarrier(CarrierPort):
    """Fake carrier that always succeeds by default."""

    def __init__(self):
        self.should_succeed = True
        self.failure_reason = "Carrier unavailable"
        self.service_available = True
        self.quoted: dict[str, Rate] = {}
        self.purchases: list[LabelPurchase] = []
        self.rate_requests: list[dict] = []

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Carrier unavailable",
        service_available: bool = True,
    ):
        """Configure the fake carrier behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.service_available = service_available

    def get_rates(self, address_from: dict, address_to: dict, parcel: dict) -> list[Rate]:
        self.rate_requests.append({"address_from": address_from, "address_to": address_to, "parcel": parcel})
        if not self.should_succeed:
            raise CarrierError(self.failure_reason)
        if not self.service_available:
            return []

        weight_factor = max(1.0, float(parcel.get("weight", 0)) / 24.0)
        rates = []
        for provider, service_level, base, days in _RATE_CARD:
            rate = Rate(
                rate_id=f"rate_{uuid4().hex[:12]}",
                provider=provider,
                service_level=service_level,
                amount=round(base * weight_factor, 2),
                currency="USD",
                estimated_days=days,
            )
            self.quoted[rate.rate_id] = rate
            rates.append(rate)
        return rates

    def purchase_label(self, rate_id: str) -> LabelPurchase:
        if not self.should_succeed:
            raise CarrierError(self.failure_reason)

        rate = self.quoted.get(rate_id)
        if rate is None:
            raise CarrierError(f"Rate {rate_id} not found or expired")

        tracking_number = f"FAKE-{uuid4().hex[:12].upper()}"
        transaction_id = f"txn-{uuid4().hex[:8]}"
        purchase = LabelPurchase(
            transaction_reference=transaction_id,
            tracking_number=tracking_number,
            tracking_url=f"https://fake-carrier.example.com/track/{tracking_number}",
            label_url=f"https://fake-carrier.example.com/labels/{transaction_id}.pdf",
            carrier=rate.provider,
            service_level=rate.service_level,
            amount=rate.amount,
        )
        self.purchases.append(purchase)
        return purchase

    def get_tracking(self, carrier: str, tracking_number: str) -> TrackingStatus:
        if not self.should_succeed:
            raise CarrierError(self.failure_reason)

        now = datetime.now(UTC).isoformat()
        return TrackingStatus(
            carrier=carrier,
            tracking_number=tracking_number,
            status="TRANSIT",
            status_date=now,
            location="Distribution Center, NY",
            tracking_url=f"https://fake-carrier.example.com/track/{tracking_number}",
            events=[
                {"status": "PRE_TRANSIT", "location": "Origin, CA", "occurred_at": now},
                {"status": "TRANSIT", "location": "Distribution Center, NY", "occurred_at": now},
            ],
        )
