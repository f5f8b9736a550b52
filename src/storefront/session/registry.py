"""Open, restore and look up shopper sessions."""

import threading
from uuid import uuid4

import structlog
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.config import Settings
from storefront.loyalty.customer import Customer
from storefront.session.cache import SessionCache
from storefront.session.session import Session
from storefront.session.state import SessionState
from storefront.shared.exceptions import NetworkError, NotFound

logger = structlog.get_logger(__name__)


class SessionRegistry:
    def __init__(self, cache: SessionCache, settings: Settings) -> None:
        self._cache = cache
        self._settings = settings
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def _restore(self, session_id: str) -> SessionState:
        state = self._cache.load(session_id)
        if state is None:
            return SessionState(session_id=session_id, cart=Cart(enforce_stock=self._settings.cart.enforce_stock))
        state.cart.enforce_stock = self._settings.cart.enforce_stock
        if state.user is None:
            return state

        # The cached balance is advisory; the customer record is authoritative
        try:
            customer = current_domain.repository_for(Customer).get(state.user.id)
        except NotFound:
            logger.warning("Cached session user no longer exists", session_id=session_id, customer_id=state.user.id)
            return SessionState(session_id=session_id, cart=Cart(enforce_stock=self._settings.cart.enforce_stock))
        except NetworkError as exc:
            logger.warning("Could not reconcile cached balance", session_id=session_id, error=str(exc))
            return state
        state.loyalty_balance = customer.loyalty_points
        return state

    def open(self, session_id: str | None = None) -> Session:
        """Return the live session, restoring it from the cache on first use."""
        session_id = session_id or str(uuid4())
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = Session(self._restore(session_id), self._cache, self._settings.pricing)
                self._sessions[session_id] = session
                logger.debug("Session opened", session_id=session_id)
            return session

    def get(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise NotFound("sessions", session_id) from None

    def close(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)
        self._cache.delete(session_id)

    def on_balance_changed(self, customer_id: str, balance: int) -> None:
        """Mirror a new loyalty balance into every live session of that customer."""
        for session in list(self._sessions.values()):
            if session.user_id == customer_id:
                session.set_balance(balance)
