import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Sets PROTEAN_ENV so both domains pick the matching config overlay when
    their fixtures initialize them.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def reset_adapters():
    """Give every test fresh collaborator fakes."""
    from ordering.carrier import reset_carrier
    from ordering.carrier.addresses import reset_address_book
    from ordering.gateway import reset_gateway
    from ordering.notifier import reset_notifier
    from subscriptions.billing import reset_billing
    from subscriptions.listings import reset_listing_directory

    yield

    reset_gateway()
    reset_notifier()
    reset_carrier()
    reset_address_book()
    reset_billing()
    reset_listing_directory()
