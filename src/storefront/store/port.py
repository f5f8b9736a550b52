"""Resource store port (abstract interface).

The storefront persists products, orders, customers and campaigns in a
generic REST-style resource store. Every record is a JSON object with an
``id`` and a ``version`` that the store bumps on each write; ``replace`` can
be made conditional on the version the caller read.
"""

from abc import ABC, abstractmethod
from typing import Any

PRODUCTS = "products"
ORDERS = "orders"
CUSTOMERS = "customers"
CAMPAIGNS = "campaigns"

RESOURCES = (PRODUCTS, ORDERS, CUSTOMERS, CAMPAIGNS)

Record = dict[str, Any]


class ResourceStore(ABC):
    """Abstract resource store interface."""

    @abstractmethod
    def list(self, resource: str, **filters: Any) -> list[Record]:
        """Return every record whose fields equal the given filters."""
        ...

    @abstractmethod
    def get(self, resource: str, identifier: str) -> Record:
        """Return one record. Raises ``NotFound`` if it does not exist."""
        ...

    @abstractmethod
    def create(self, resource: str, body: Record) -> Record:
        """Store a new record. The store assigns an id when the body has none."""
        ...

    @abstractmethod
    def replace(
        self,
        resource: str,
        identifier: str,
        body: Record,
        expected_version: int | None = None,
    ) -> Record:
        """Overwrite a whole record.

        With ``expected_version`` the write only happens if the stored
        version still matches; otherwise ``ConcurrencyHazard`` is raised.
        """
        ...

    @abstractmethod
    def patch(self, resource: str, identifier: str, partial: Record) -> Record:
        """Merge ``partial`` into an existing record."""
        ...

    @abstractmethod
    def delete(self, resource: str, identifier: str) -> None:
        """Remove a record. Raises ``NotFound`` if it does not exist."""
        ...
