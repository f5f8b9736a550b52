"""Storefront composition: the services handlers and routes share.

Aggregates, commands and handlers are registered with the Protean domain;
everything that is not a domain element (the resource store, settings,
session registry and the read-side services) hangs off one ``Storefront``
object. Command handlers reach it through ``get_storefront()``.
"""

from collections.abc import Callable
from datetime import date

import structlog
from protean.utils.globals import current_domain

from storefront.campaign.attribution import CampaignAttribution
from storefront.catalogue.cache import CatalogueCache
from storefront.config import Settings, get_settings
from storefront.fulfillment.phases import tracking_options
from storefront.loyalty.directory import CustomerDirectory
from storefront.loyalty.ledger import LoyaltyLedger
from storefront.order.dashboard import DashboardStats, build_dashboard
from storefront.order.order import Order
from storefront.session.cache import SessionCache, build_session_cache
from storefront.session.registry import SessionRegistry
from storefront.session.session import Session
from storefront.store import get_store, set_store
from storefront.store.port import ResourceStore

logger = structlog.get_logger(__name__)


class Storefront:
    def __init__(
        self,
        store: ResourceStore | None = None,
        settings: Settings | None = None,
        session_cache: SessionCache | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store or get_store()
        # Repositories read and write through the active store
        set_store(self.store)

        self.catalogue = CatalogueCache()
        self.customers = CustomerDirectory()
        self.loyalty = LoyaltyLedger(self.settings.loyalty)
        self.campaigns = CampaignAttribution(clock=clock)
        self.sessions = SessionRegistry(session_cache or build_session_cache(self.settings), self.settings)
        self.loyalty.subscribe(self.sessions.on_balance_changed)

    @property
    def orders(self):
        return current_domain.repository_for(Order)

    def process(self, command):
        """Run ``command`` through its handler and return the handler's result."""
        return current_domain.process(command, asynchronous=False)

    # -------------------------------------------------------------------
    # Session conveniences
    # -------------------------------------------------------------------
    def login(self, session_id: str, email: str) -> Session:
        session = self.sessions.open(session_id)
        session.login(self.customers.login(email))
        return session

    def add_to_cart(self, session_id: str, product_id: str, delta: int = 1) -> Session:
        session = self.sessions.get(session_id)
        product = self.catalogue.get(product_id) if delta <= 0 else self.catalogue.fresh(product_id)
        session.add_to_cart(product, delta)
        return session

    def set_quantity(self, session_id: str, product_id: str, quantity: int) -> Session:
        session = self.sessions.get(session_id)
        if quantity <= 0:
            session.remove_from_cart(product_id)
        else:
            session.set_quantity(self.catalogue.fresh(product_id), quantity)
        return session

    def refresh_balance(self, session_id: str) -> int:
        """Re-read the signed-in customer's balance into the session."""
        session = self.sessions.get(session_id)
        if session.user_id is None:
            return 0
        balance = self.loyalty.balance(session.user_id)
        session.set_balance(balance)
        return balance

    # -------------------------------------------------------------------
    # Admin views
    # -------------------------------------------------------------------
    def dashboard(self, low_stock_threshold: int = 10) -> DashboardStats:
        return build_dashboard(self.orders.list(), self.catalogue.refresh(), low_stock_threshold)

    def tracking_options(self, order_id: str) -> dict[str, list[str]]:
        return tracking_options(self.orders.get(order_id))


_current: Storefront | None = None


def get_storefront() -> Storefront:
    global _current
    if _current is None:
        _current = Storefront()
        logger.info("Storefront initialized", store=type(_current.store).__name__)
    return _current


def set_storefront(storefront: Storefront) -> None:
    global _current
    _current = storefront


def reset_storefront() -> None:
    global _current
    _current = None
