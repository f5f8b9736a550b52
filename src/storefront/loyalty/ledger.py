"""Loyalty ledger: converts delivered order value into points, once per order.

Awards are a read-modify-write of the customer record. To keep two awards
for the same customer from overwriting each other:

1. awards for one customer id are serialized by a per-customer lock;
2. the customer is always re-read from the store, never taken from a
   session or cache;
3. the write is a full replace conditional on the version just read, and
   a conflicting write is retried from a fresh read.

Idempotency comes from the per-order entries on the customer record: an
order that already has an entry is skipped, however often the award is
retried.
"""

import threading
from collections.abc import Callable
from contextlib import contextmanager
from decimal import Decimal

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.config import LoyaltySettings
from storefront.loyalty.customer import Customer, LoyaltyEntry
from storefront.order.order import Order
from storefront.order.status import OrderStatus
from storefront.shared.exceptions import ConcurrencyHazard

logger = structlog.get_logger(__name__)

BalanceListener = Callable[[str, int], None]


def points_for(total: Decimal, currency_units_per_point: int = 10) -> int:
    """One point per ``currency_units_per_point`` of order total, rounded down."""
    if total <= 0:
        return 0
    return int(total // currency_units_per_point)


class _CustomerLock:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class LoyaltyLedger:
    def __init__(self, settings: LoyaltySettings) -> None:
        self._settings = settings
        # Entries live only while some award or reset holds or waits on them
        self._locks: dict[str, _CustomerLock] = {}
        self._locks_guard = threading.Lock()
        self._listeners: list[BalanceListener] = []

    def subscribe(self, listener: BalanceListener) -> None:
        """Call ``listener(customer_id, balance)`` whenever a balance changes."""
        self._listeners.append(listener)

    @property
    def _customers(self):
        return current_domain.repository_for(Customer)

    @property
    def _orders(self):
        return current_domain.repository_for(Order)

    @contextmanager
    def _serialized(self, customer_id: str):
        """Hold the lock for ``customer_id``, dropping it from the map once unused."""
        with self._locks_guard:
            entry = self._locks.get(customer_id)
            if entry is None:
                entry = self._locks[customer_id] = _CustomerLock()
            entry.holders += 1
        try:
            if not entry.lock.acquire(timeout=self._settings.lock_timeout):
                raise ConcurrencyHazard("customers", customer_id, "timed out waiting for another loyalty update")
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[customer_id]

    def _notify(self, customer: Customer) -> None:
        for listener in self._listeners:
            listener(customer.id, customer.loyalty_points)

    # -------------------------------------------------------------------
    # Award
    # -------------------------------------------------------------------
    def award(self, order: Order | str) -> int:
        """Credit points for a delivered order.

        Returns the points credited by this call: the earned amount the first
        time, 0 when the order was already credited.

        Raises:
            ValidationError: The order is not delivered.
            NotFound: The order or its customer does not exist.
            ConcurrencyHazard: Writes kept conflicting after all retries.
        """
        if not isinstance(order, Order):
            order = self._orders.get(str(order))
        if order.status != OrderStatus.DELIVERED.value:
            raise ValidationError(
                {"status": [f"Order {order.id} is {order.status}; points are awarded only on delivery"]}
            )

        earned = points_for(order.total, self._settings.currency_units_per_point)
        with self._serialized(order.user_id):
            for attempt in range(self._settings.award_retries + 1):
                customer = self._customers.get(order.user_id)
                if customer.has_been_credited(order.id):
                    logger.info(
                        "Loyalty points already credited for order",
                        order_id=order.id,
                        customer_id=customer.id,
                    )
                    return 0
                customer.credit(order.id, earned)
                try:
                    self._customers.add(customer)
                except ConcurrencyHazard:
                    if attempt == self._settings.award_retries:
                        raise
                    logger.warning(
                        "Customer record changed during loyalty award, retrying",
                        order_id=order.id,
                        customer_id=customer.id,
                        attempt=attempt + 1,
                    )
                    continue
                break

        logger.info(
            "Loyalty points awarded",
            order_id=order.id,
            customer_id=customer.id,
            points=earned,
            balance=customer.loyalty_points,
        )
        self._notify(customer)
        return earned

    # -------------------------------------------------------------------
    # Account queries and maintenance
    # -------------------------------------------------------------------
    def balance(self, customer_id: str) -> int:
        return self._customers.get(str(customer_id)).loyalty_points

    def history(self, customer_id: str) -> list[LoyaltyEntry]:
        return list(self._customers.get(str(customer_id)).loyalty_entries)

    def reset(self, customer_id: str) -> Customer:
        customer_id = str(customer_id)
        with self._serialized(customer_id):
            customer = self._customers.get(customer_id)
            customer.reset_points()
            self._customers.add(customer)
        logger.info("Loyalty balance reset", customer_id=customer_id)
        self._notify(customer)
        return customer
