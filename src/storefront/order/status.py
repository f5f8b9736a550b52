"""Canonical order status vocabulary used for filtering and metrics."""

from enum import Enum


class OrderStatus(Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Once finalized, an order's fulfillment state can no longer change
TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


class PaymentMethod(Enum):
    """How the customer chose to pay. Recorded only, never settled here."""

    CARD = "card"
    UPI = "upi"
    COD = "cod"
