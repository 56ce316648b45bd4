"""Tests for the Shippo carrier adapter against a stubbed HTTP session."""

from unittest.mock import MagicMock

import pytest
import requests
from ordering.carrier import get_carrier, reset_carrier
from ordering.carrier.fake_adapter import FakeCarrier
from ordering.carrier.port import CarrierError
from ordering.carrier.shippo_adapter import ShippoCarrier


def _response(payload, status=200):
    response = MagicMock()
    response.ok = status < 400
    response.status_code = status
    response.reason = "Bad Request" if status >= 400 else "OK"
    response.json.return_value = payload
    return response


@pytest.fixture()
def session():
    session = MagicMock()
    session.headers = {}
    return session


class TestShippoCarrier:
    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            ShippoCarrier(api_key="")

    def test_sets_auth_header(self, session):
        ShippoCarrier(api_key="shippo_test_key", session=session)
        assert session.headers["Authorization"] == "ShippoToken shippo_test_key"

    def test_get_rates(self, session):
        session.request.return_value = _response(
            {
                "rates": [
                    {
                        "object_id": "rate_1",
                        "provider": "USPS",
                        "servicelevel": {"name": "Priority Mail"},
                        "amount": "9.45",
                        "currency": "USD",
                        "estimated_days": 2,
                    }
                ]
            }
        )
        carrier = ShippoCarrier(api_key="k", session=session)

        rates = carrier.get_rates({"zip": "97209"}, {"zip": "97201"}, {"weight": "48"})

        assert rates[0].rate_id == "rate_1"
        assert rates[0].amount == 9.45
        assert rates[0].service_level == "Priority Mail"
        method, url = session.request.call_args.args
        assert (method, url) == ("POST", "https://api.goshippo.com/shipments")
        assert session.request.call_args.kwargs["json"]["parcels"] == [{"weight": "48"}]

    def test_purchase_label(self, session):
        session.request.side_effect = [
            _response(
                {
                    "status": "SUCCESS",
                    "object_id": "txn_1",
                    "tracking_number": "9400111",
                    "tracking_url_provider": "https://usps.example/9400111",
                    "label_url": "https://shippo.example/label.pdf",
                }
            ),
            _response({"provider": "USPS", "servicelevel": {"name": "Priority Mail"}, "amount": "9.45"}),
        ]
        carrier = ShippoCarrier(api_key="k", session=session)

        purchase = carrier.purchase_label("rate_1")

        assert purchase.transaction_reference == "txn_1"
        assert purchase.tracking_number == "9400111"
        assert purchase.tracking_url == "https://usps.example/9400111"
        assert purchase.carrier == "USPS"
        assert purchase.amount == 9.45

    def test_purchase_label_survives_rate_lookup_failure(self, session):
        session.request.side_effect = [
            _response(
                {
                    "status": "SUCCESS",
                    "object_id": "txn_1",
                    "tracking_number": "9400111",
                    "label_url": "https://shippo.example/label.pdf",
                }
            ),
            _response({"detail": "Service unavailable"}, status=503),
        ]
        carrier = ShippoCarrier(api_key="k", session=session)

        purchase = carrier.purchase_label("rate_1")

        assert purchase.transaction_reference == "txn_1"
        assert purchase.tracking_number == "9400111"
        assert purchase.label_url == "https://shippo.example/label.pdf"
        assert purchase.carrier is None
        assert purchase.amount is None
        posts = [c for c in session.request.call_args_list if c.args[0] == "POST"]
        assert len(posts) == 1
        assert posts[0].args[1].endswith("/transactions")

    def test_failed_transaction(self, session):
        session.request.return_value = _response({"status": "ERROR", "messages": [{"text": "Address invalid"}]})
        carrier = ShippoCarrier(api_key="k", session=session)
        with pytest.raises(CarrierError, match="Address invalid"):
            carrier.purchase_label("rate_1")

    def test_api_error(self, session):
        session.request.return_value = _response({"detail": "Invalid token"}, status=401)
        carrier = ShippoCarrier(api_key="k", session=session)
        with pytest.raises(CarrierError, match="Invalid token"):
            carrier.get_rates({}, {}, {})

    def test_transport_error(self, session):
        session.request.side_effect = requests.ConnectionError("timed out")
        carrier = ShippoCarrier(api_key="k", session=session)
        with pytest.raises(CarrierError):
            carrier.get_tracking("usps", "9400111")

    def test_tracking(self, session):
        session.request.return_value = _response(
            {
                "tracking_status": {
                    "status": "DELIVERED",
                    "status_date": "2025-03-01T10:00:00Z",
                    "location": {"city": "Portland", "state": "OR"},
                },
                "tracking_history": [{"status": "TRANSIT", "status_date": "2025-02-28T10:00:00Z"}],
            }
        )
        status = ShippoCarrier(api_key="k", session=session).get_tracking("usps", "9400111")
        assert status.status == "DELIVERED"
        assert status.location == "Portland, OR"
        assert status.events[0]["status"] == "TRANSIT"


class TestCarrierFactory:
    def test_defaults_to_fake(self, monkeypatch):
        monkeypatch.delenv("CARRIER_ADAPTER", raising=False)
        reset_carrier()
        assert isinstance(get_carrier(), FakeCarrier)

    def test_selects_shippo(self, monkeypatch):
        monkeypatch.setenv("CARRIER_ADAPTER", "shippo")
        monkeypatch.setenv("SHIPPO_API_KEY", "shippo_test_key")
        reset_carrier()
        assert isinstance(get_carrier(), ShippoCarrier)

    def test_unknown_adapter(self, monkeypatch):
        monkeypatch.setenv("CARRIER_ADAPTER", "pigeon")
        reset_carrier()
        with pytest.raises(ValueError):
            get_carrier()
