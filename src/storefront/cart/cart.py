"""Session-scoped shopping cart.

Holds at most one line per product id, each with quantity >= 1. A quantity
that drops to zero or below removes the line. When stock enforcement is on,
a change that would exceed the product's stock raises ``OutOfStock`` and
leaves the cart untouched.
"""

from decimal import Decimal

import structlog
from pydantic import BaseModel, Field

from storefront.cart.pricing import CartTotals, FulfillmentMode, compute_totals
from storefront.catalogue.product import Product
from storefront.config import PricingSettings
from storefront.shared.exceptions import OutOfStock

logger = structlog.get_logger(__name__)


class CartItem(BaseModel):
    """A product snapshot plus the quantity wanted."""

    product_id: str
    name: str
    price: Decimal = Field(ge=0)
    category: str = ""
    stock: int = Field(ge=0)
    quantity: int = Field(ge=1)

    @classmethod
    def from_product(cls, product: Product, quantity: int) -> "CartItem":
        return cls(
            product_id=product.id,
            name=product.name,
            price=product.price,
            category=product.category,
            stock=product.stock,
            quantity=quantity,
        )

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Cart(BaseModel):
    items: list[CartItem] = Field(default_factory=list)
    enforce_stock: bool = True

    def _find(self, product_id: str) -> CartItem | None:
        return next((item for item in self.items if item.product_id == str(product_id)), None)

    def _check_stock(self, product_id: str, quantity: int, available: int) -> None:
        if self.enforce_stock and quantity > available:
            raise OutOfStock(product_id, quantity, available)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def quantity_of(self, product_id: str) -> int:
        item = self._find(product_id)
        return item.quantity if item else 0

    def add_item(self, product: Product, delta: int = 1) -> None:
        """Add ``delta`` units of ``product`` (negative ``delta`` takes units away)."""
        item = self._find(product.id)
        if item is None:
            if delta <= 0:
                return
            self._check_stock(product.id, delta, product.stock)
            self.items.append(CartItem.from_product(product, delta))
            logger.debug("Cart item added", product_id=product.id, quantity=delta)
            return

        new_quantity = item.quantity + delta
        if new_quantity <= 0:
            self.remove_item(product.id)
            return
        self._check_stock(product.id, new_quantity, product.stock)
        # Refresh the snapshot so price and stock track the latest read
        self.items[self.items.index(item)] = CartItem.from_product(product, new_quantity)

    def remove_item(self, product_id: str) -> None:
        self.items = [item for item in self.items if item.product_id != str(product_id)]

    def set_quantity(self, product: Product, quantity: int) -> None:
        """Set the line for ``product`` to exactly ``quantity`` units.

        Stock is checked against ``product`` as the caller just read it, not
        against the snapshot taken when the line was added.
        """
        item = self._find(product.id)
        if quantity <= 0:
            self.remove_item(product.id)
            return
        if item is None:
            return
        self._check_stock(product.id, quantity, product.stock)
        self.items[self.items.index(item)] = CartItem.from_product(product, quantity)

    def clear(self) -> None:
        self.items = []

    def totals(self, mode: FulfillmentMode, pricing: PricingSettings) -> CartTotals:
        return compute_totals(((item.price, item.quantity) for item in self.items), mode, pricing)
