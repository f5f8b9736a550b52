import os
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

TODAY = date(2026, 3, 15)


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay, then activate the storefront domain.

    The pushed domain context makes the domain available as `current_domain`
    to every test and handler.
    """
    os.environ["STOREFRONT_ENV"] = session.config.option.env
    os.environ["PROTEAN_ENV"] = session.config.option.env
    # Leave structlog unconfigured so tests can capture log entries
    os.environ["PROTEAN_NO_AUTO_LOGGING"] = "1"

    from storefront.domain import init_domain

    init_domain().domain_context().push()


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
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Drop the storefront wiring and drain the event store after every test."""
    yield

    from protean import current_domain

    from storefront.container import reset_storefront
    from storefront.store import reset_store

    reset_storefront()
    reset_store()
    for _, provider in current_domain.providers.items():
        provider._data_reset()
    current_domain.event_store.store._data_reset()


@pytest.fixture()
def settings():
    from storefront.config import load_settings

    return load_settings(env="test")


@pytest.fixture()
def store():
    from storefront.store.memory_adapter import InMemoryResourceStore

    return InMemoryResourceStore()


@pytest.fixture()
def session_cache():
    from storefront.session.cache import MemorySessionCache

    return MemorySessionCache()


@pytest.fixture()
def storefront(store, settings, session_cache):
    from storefront.container import Storefront, set_storefront

    storefront = Storefront(store=store, settings=settings, session_cache=session_cache, clock=lambda: TODAY)
    set_storefront(storefront)
    return storefront


@pytest.fixture()
def make_product(storefront):
    def _make(name="Wireless Earbuds", price="100.00", stock=20, category="Audio"):
        return storefront.catalogue.add_product(name=name, price=Decimal(price), stock=stock, category=category)

    return _make


@pytest.fixture()
def customer(storefront):
    from storefront.loyalty.directory import RegisterCustomer

    return storefront.process(RegisterCustomer(name="Asha Rao", email="asha@example.com", mobile="9820012345"))


@pytest.fixture()
def session(storefront, customer):
    storefront.sessions.open("sess-001")
    return storefront.login("sess-001", customer.email)


@pytest.fixture()
def address():
    return {
        "name": "Asha Rao",
        "line1": "221 Linking Road",
        "city": "Mumbai",
        "state": "MH",
        "postal_code": "400050",
    }
