"""Shippo carrier adapter: rates, labels and tracking over the Shippo REST API.

Docs: https://docs.goshippo.com/
"""

import requests
import structlog

from ordering.carrier.port import CarrierError, CarrierPort, LabelPurchase, Rate, TrackingStatus

logger = structlog.get_logger(__name__)

SHIPPO_BASE_URL = "https://api.goshippo.com"


class ShippoCarrier(CarrierPort):
    def __init__(self, api_key: str, base_url: str = SHIPPO_BASE_URL, timeout: float = 30.0, session=None):
        if not api_key:
            raise ValueError("SHIPPO_API_KEY is required for the shippo carrier adapter")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"ShippoToken {api_key}",
                "Content-Type": "application/json",
            }
        )

    def _request(self, method: str, path: str, payload: dict | None = None) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("shippo_request_failed", method=method, path=path, error=str(exc))
            raise CarrierError(f"Shippo request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            message = data.get("message") or data.get("detail") or data.get("error") or response.reason
            logger.warning("shippo_api_error", method=method, path=path, status=response.status_code, message=message)
            raise CarrierError(f"Shippo API error: {message}")
        return data

    def get_rates(self, address_from: dict, address_to: dict, parcel: dict) -> list[Rate]:
        shipment = self._request(
            "POST",
            "/shipments",
            {"address_from": address_from, "address_to": address_to, "parcels": [parcel], "async": False},
        )
        return [self._to_rate(r) for r in shipment.get("rates") or []]

    def purchase_label(self, rate_id: str) -> LabelPurchase:
        transaction = self._request("POST", "/transactions", {"rate": rate_id, "async": False})
        if transaction.get("status") not in (None, "SUCCESS"):
            messages = "; ".join(m.get("text", "") for m in transaction.get("messages") or [])
            raise CarrierError(f"Label purchase failed: {messages or transaction.get('status')}")

        # The label is bought at this point; rate details are informational only
        try:
            rate = self._request("GET", f"/rates/{rate_id}")
        except CarrierError as exc:
            logger.warning(
                "shippo_rate_lookup_failed",
                rate_id=rate_id,
                transaction_id=transaction.get("object_id"),
                error=str(exc),
            )
            rate = {}
        return LabelPurchase(
            transaction_reference=transaction.get("object_id"),
            tracking_number=transaction.get("tracking_number"),
            tracking_url=transaction.get("tracking_url_provider") or transaction.get("tracking_url"),
            label_url=transaction.get("label_url"),
            carrier=rate.get("provider"),
            service_level=(rate.get("servicelevel") or {}).get("name") or rate.get("provider"),
            amount=float(rate["amount"]) if rate.get("amount") is not None else None,
        )

    def get_tracking(self, carrier: str, tracking_number: str) -> TrackingStatus:
        track = self._request("POST", "/tracks", {"carrier": carrier, "tracking_number": tracking_number})
        status = track.get("tracking_status") or {}
        location = status.get("location") or {}
        return TrackingStatus(
            carrier=carrier,
            tracking_number=tracking_number,
            status=status.get("status") or "UNKNOWN",
            status_date=status.get("status_date"),
            location=", ".join(v for v in (location.get("city"), location.get("state")) if v) or None,
            eta=track.get("eta"),
            tracking_url=track.get("tracking_url_provider"),
            events=[
                {
                    "status": h.get("status"),
                    "status_details": h.get("status_details"),
                    "occurred_at": h.get("status_date"),
                }
                for h in track.get("tracking_history") or []
            ],
        )

    @staticmethod
    def _to_rate(raw: dict) -> Rate:
        return Rate(
            rate_id=raw["object_id"],
            provider=raw.get("provider"),
            service_level=(raw.get("servicelevel") or {}).get("name") or raw.get("provider"),
            amount=float(raw.get("amount") or 0),
            currency=raw.get("currency") or "USD",
            estimated_days=raw.get("estimated_days"),
        )
