"""Error taxonomy shared by every storefront component.

Input errors are Protean's ``ValidationError`` (a ``messages`` dict keyed by
field); everything else derives from ``StorefrontError`` and carries enough
context (operation, resource, identifier) for the caller to display or retry.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError

__all__ = [
    "ConcurrencyHazard",
    "InvalidTransition",
    "LoyaltyAwardError",
    "NetworkError",
    "NotFound",
    "OutOfStock",
    "StorefrontError",
    "ValidationError",
]


class StorefrontError(Exception):
    """Base class for all storefront errors."""


class OutOfStock(ValidationError):
    """Requested quantity exceeds the product's available stock."""

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            {"quantity": [f"Only {available} unit(s) of product {product_id} in stock, {requested} requested"]}
        )


class NotFound(StorefrontError, ObjectNotFoundError):
    """An order, customer, product or campaign id is unknown."""

    def __init__(self, resource: str, identifier: str) -> None:
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} '{identifier}' not found")


class InvalidTransition(StorefrontError):
    """A status change was attempted that the fulfillment machine forbids."""

    def __init__(self, order_id: str, current: str, requested: str, reason: str | None = None) -> None:
        self.order_id = order_id
        self.current = current
        self.requested = requested
        self.reason = reason
        message = f"Order {order_id}: cannot transition from {current} to {requested}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NetworkError(StorefrontError):
    """The resource store could not be reached. Safe to retry."""

    retryable = True

    def __init__(self, operation: str, resource: str, identifier: str | None = None, cause: str = "") -> None:
        self.operation = operation
        self.resource = resource
        self.identifier = identifier
        self.cause = cause
        target = f"{resource}/{identifier}" if identifier else resource
        super().__init__(f"{operation} {target} failed: {cause}" if cause else f"{operation} {target} failed")


class ConcurrencyHazard(StorefrontError):
    """A conflicting concurrent write was detected on a record."""

    retryable = True

    def __init__(self, resource: str, identifier: str, detail: str = "") -> None:
        self.resource = resource
        self.identifier = identifier
        self.detail = detail
        message = f"Concurrent modification of {resource} '{identifier}'"
        super().__init__(f"{message}: {detail}" if detail else message)


class LoyaltyAwardError(StorefrontError):
    """The order reached delivered but crediting its points failed.

    The status change is already persisted. Retry the award on its own with
    ``LoyaltyLedger.award(order_id)``.
    """

    retryable = True

    def __init__(self, order_id: str, customer_id: str, cause: Exception) -> None:
        self.order_id = order_id
        self.customer_id = customer_id
        self.cause = cause
        super().__init__(f"Order {order_id} delivered but loyalty award for customer {customer_id} failed: {cause}")
