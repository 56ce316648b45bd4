"""Carrier port: abstract interface for shipping-rate and label providers.

All carrier adapters implement this interface. The order workflow programs
against the port; adapters are swapped via configuration. Transport or
provider errors are raised as ``CarrierError`` so the workflow can report a
retryable upstream failure without touching the order.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class CarrierError(Exception):
    """The carrier API failed or rejected the request."""


@dataclass(frozen=True)
class Rate:
    """A purchasable shipping rate quoted for one parcel."""

    rate_id: str
    provider: str
    service_level: str
    amount: float
    currency: str = "USD"
    estimated_days: int | None = None

    def to_dict(self) -> dict:
        return {
            "rate_id": self.rate_id,
            "provider": self.provider,
            "service_level": self.service_level,
            "amount": self.amount,
            "currency": self.currency,
            "estimated_days": self.estimated_days,
        }


@dataclass(frozen=True)
class LabelPurchase:
    """A label bought from a rate."""

    transaction_reference: str
    tracking_number: str
    tracking_url: str | None = None
    label_url: str | None = None
    carrier: str | None = None
    service_level: str | None = None
    amount: float | None = None


@dataclass(frozen=True)
class TrackingStatus:
    """The carrier's current view of a shipment."""

    carrier: str
    tracking_number: str
    status: str
    status_date: str | None = None
    location: str | None = None
    eta: str | None = None
    tracking_url: str | None = None
    events: list[dict] = field(default_factory=list)


class CarrierPort(ABC):
    """Abstract interface for carrier adapters."""

    @abstractmethod
    def get_rates(self, address_from: dict, address_to: dict, parcel: dict) -> list[Rate]:
        """Quote rates for shipping ``parcel`` between two addresses.

        An empty list is a valid answer (no service for the route).
        """
        ...

    @abstractmethod
    def purchase_label(self, rate_id: str) -> LabelPurchase:
        """Buy a label for a previously quoted rate."""
        ...

    @abstractmethod
    def get_tracking(self, carrier: str, tracking_number: str) -> TrackingStatus:
        """Get current tracking status for a shipment."""
        ...
