import json

import pytest
from protean.integrations.pytest import DomainFixture

from shared.identity import Principal


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture()
def buyer():
    return Principal.of("buyer-001")


@pytest.fixture()
def seller():
    return Principal.of("seller-001")


@pytest.fixture()
def admin():
    return Principal.of("admin-001", "site_admin")


@pytest.fixture()
def stranger():
    return Principal.of("stranger-001")


# ---------------------------------------------------------------------------
# Order builders
# ---------------------------------------------------------------------------
SHIPPING_ADDRESS = "Ada Buyer\n12 Elm St\nPortland, OR 97201\nUS"


@pytest.fixture()
def listing():
    return {
        "listing_id": "lst-204",
        "title": "Harbour at Dusk",
        "unit_price": 240.0,
        "return_days": 30,
        "weight_oz": 48.0,
        "length_in": 30.0,
        "width_in": 24.0,
        "height_in": 2.0,
    }


@pytest.fixture()
def place_order(buyer, seller, listing):
    """Return a callable placing an order through the command path."""
    from protean import current_domain

    from ordering.order.creation import PlaceOrder

    def _place(**overrides):
        values = {
            **buyer.as_actor(),
            "seller_id": seller.user_id,
            "listing": json.dumps(overrides.pop("listing", listing)),
            "quantity": 1,
            "shipping_address": SHIPPING_ADDRESS,
            "shipping_cost": 15.0,
            "payment_reference": "pi_test_001",
        }
        values.update(overrides)
        return current_domain.process(PlaceOrder(**values), asynchronous=False)

    return _place


@pytest.fixture()
def pending_order(place_order):
    return place_order()


@pytest.fixture()
def paid_order(pending_order, buyer):
    from protean import current_domain

    from ordering.order.payment import RecordPayment

    current_domain.process(RecordPayment(order_id=pending_order, **buyer.as_actor()), asynchronous=False)
    return pending_order


@pytest.fixture()
def shipped_order(paid_order, seller):
    from protean import current_domain

    from ordering.order.shipping import MarkShipped

    current_domain.process(
        MarkShipped(
            order_id=paid_order,
            **seller.as_actor(),
            carrier="USPS",
            tracking_number="9400-TEST-0001",
            tracking_url="https://tools.usps.com/go/TrackConfirmAction?tLabels=9400-TEST-0001",
        ),
        asynchronous=False,
    )
    return paid_order


@pytest.fixture()
def delivered_order(shipped_order, buyer):
    from protean import current_domain

    from ordering.order.delivery import ConfirmDelivery

    current_domain.process(ConfirmDelivery(order_id=shipped_order, **buyer.as_actor()), asynchronous=False)
    return shipped_order
