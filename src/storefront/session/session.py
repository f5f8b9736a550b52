"""Per-shopper session: current user, cart, loyalty balance and campaign attribution.

A ``Session`` is passed explicitly to whatever needs it. Its state is only
changed through the methods below, each of which mirrors the new state into
the local cache on a best-effort basis.
"""

import structlog

from storefront.cart.cart import Cart
from storefront.cart.pricing import CartTotals, FulfillmentMode
from storefront.catalogue.product import Product
from storefront.config import PricingSettings
from storefront.loyalty.customer import Customer
from storefront.session.cache import SessionCache
from storefront.session.state import SessionState, SessionUser

logger = structlog.get_logger(__name__)


class Session:
    def __init__(self, state: SessionState, cache: SessionCache, pricing: PricingSettings) -> None:
        self._state = state
        self._cache = cache
        self._pricing = pricing

    # -------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------
    @property
    def session_id(self) -> str:
        return self._state.session_id

    @property
    def user(self) -> SessionUser | None:
        return self._state.user.model_copy() if self._state.user else None

    @property
    def user_id(self) -> str | None:
        return self._state.user.id if self._state.user else None

    @property
    def loyalty_balance(self) -> int:
        return self._state.loyalty_balance

    @property
    def campaign_id(self) -> str | None:
        return self._state.campaign_id

    @property
    def cart(self) -> Cart:
        """A copy of the cart; mutate it through the session methods."""
        return self._state.cart.model_copy(deep=True)

    def snapshot(self) -> SessionState:
        return self._state.model_copy(deep=True)

    def totals(self, mode: FulfillmentMode) -> CartTotals:
        return self._state.cart.totals(mode, self._pricing)

    # -------------------------------------------------------------------
    # Mirror
    # -------------------------------------------------------------------
    def _mirror(self) -> None:
        try:
            self._cache.save(self._state)
        except (OSError, ValueError) as exc:
            logger.warning("Session cache write failed", session_id=self.session_id, error=str(exc))

    # -------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------
    def login(self, customer: Customer) -> None:
        self._state.user = SessionUser(id=customer.id, name=customer.name, email=customer.email)
        self._state.loyalty_balance = customer.loyalty_points
        logger.info("Session login", session_id=self.session_id, customer_id=customer.id)
        self._mirror()

    def logout(self) -> None:
        """Forget the user along with their cart, balance and attribution."""
        customer_id = self.user_id
        self._state.user = None
        self._state.cart.clear()
        self._state.loyalty_balance = 0
        self._state.campaign_id = None
        logger.info("Session logout", session_id=self.session_id, customer_id=customer_id)
        self._mirror()

    def set_balance(self, balance: int) -> None:
        self._state.loyalty_balance = balance
        self._mirror()

    # -------------------------------------------------------------------
    # Campaign attribution
    # -------------------------------------------------------------------
    def attribute_campaign(self, campaign_id: str) -> None:
        self._state.campaign_id = str(campaign_id)
        self._mirror()

    def clear_attribution(self) -> None:
        self._state.campaign_id = None
        self._mirror()

    # -------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------
    def add_to_cart(self, product: Product, delta: int = 1) -> Cart:
        self._state.cart.add_item(product, delta)
        self._mirror()
        return self.cart

    def remove_from_cart(self, product_id: str) -> Cart:
        self._state.cart.remove_item(product_id)
        self._mirror()
        return self.cart

    def set_quantity(self, product: Product, quantity: int) -> Cart:
        self._state.cart.set_quantity(product, quantity)
        self._mirror()
        return self.cart

    def clear_cart(self) -> None:
        self._state.cart.clear()
        self._mirror()

    def complete_checkout(self) -> None:
        """Empty the cart and drop the attribution once an order is persisted."""
        self._state.cart.clear()
        self._state.campaign_id = None
        self._mirror()
