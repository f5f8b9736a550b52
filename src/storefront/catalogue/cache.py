"""Catalogue cache: read-mostly mirror of product records.

Browsing, carts and pricing read from the mirror. Anything that must see
current stock (order placement, stock adjustments) asks for a fresh read,
which also refreshes the mirror entry.
"""

import structlog
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.shared.exceptions import ConcurrencyHazard

logger = structlog.get_logger(__name__)

LOW_STOCK_THRESHOLD = 10


class CatalogueCache:
    def __init__(self, stock_retries: int = 3) -> None:
        self._products: dict[str, Product] = {}
        self._loaded = False
        self._stock_retries = stock_retries

    @property
    def _repository(self):
        return current_domain.repository_for(Product)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def refresh(self) -> list[Product]:
        products = self._repository.list()
        self._products = {product.id: product for product in products}
        self._loaded = True
        logger.debug("Catalogue refreshed", product_count=len(products))
        return list(self._products.values())

    def all(self) -> list[Product]:
        if not self._loaded:
            return self.refresh()
        return list(self._products.values())

    def by_category(self, category: str) -> list[Product]:
        return [product for product in self.all() if product.category == category]

    def get(self, product_id: str) -> Product:
        """Return the mirrored product, reading through on a miss."""
        product = self._products.get(str(product_id))
        if product is None:
            product = self.fresh(product_id)
        return product.model_copy(deep=True)

    def fresh(self, product_id: str) -> Product:
        """Read the product from the store, bypassing the mirror."""
        product = self._repository.get(str(product_id))
        self._products[product.id] = product
        return product.model_copy(deep=True)

    def low_stock(self, threshold: int = LOW_STOCK_THRESHOLD) -> list[Product]:
        return sorted(
            (product for product in self.all() if product.is_low_on_stock(threshold)),
            key=lambda product: product.stock,
        )

    # -------------------------------------------------------------------
    # Admin inventory operations
    # -------------------------------------------------------------------
    def add_product(self, **fields) -> Product:
        product = self._repository.add(Product.create(**fields))
        self._products[product.id] = product
        logger.info("Product added", product_id=product.id, name=product.name, stock=product.stock)
        return product.model_copy(deep=True)

    def update_product(self, product_id: str, **changes) -> Product:
        """Apply a partial update. Changes are validated before they are sent."""
        product = self.fresh(product_id)
        product.update_details(**changes)
        partial = {field: value for field, value in product.to_dict().items() if field in changes}
        updated = self._repository.patch(product.id, partial)
        self._products[updated.id] = updated
        logger.info("Product updated", product_id=updated.id, fields=sorted(changes))
        return updated.model_copy(deep=True)

    def delete_product(self, product_id: str) -> None:
        self._repository.delete(str(product_id))
        self._products.pop(str(product_id), None)
        logger.info("Product deleted", product_id=str(product_id))

    def adjust_stock(self, product_id: str, delta: int) -> Product:
        """Change stock by ``delta`` against the freshest record.

        The write is conditional on the version read, so a concurrent
        adjustment forces a re-read instead of being overwritten.
        """
        for attempt in range(self._stock_retries + 1):
            product = self._repository.get(str(product_id))
            product.adjust_stock(delta)
            try:
                self._repository.add(product)
            except ConcurrencyHazard:
                if attempt == self._stock_retries:
                    raise
                logger.warning("Stock write conflicted, retrying", product_id=product.id, attempt=attempt + 1)
                continue
            self._products[product.id] = product
            logger.info("Stock adjusted", product_id=product.id, delta=delta, stock=product.stock)
            return product.model_copy(deep=True)
