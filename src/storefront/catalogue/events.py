"""Domain events for the Product aggregate."""

from protean.fields import Decimal, Identifier, Integer, List, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    price: Decimal(required=True)
    stock: Integer(required=True)


@storefront.event(part_of="Product")
class ProductDetailsUpdated:
    """Admin changed one or more product fields."""

    __version__ = 1

    product_id: Identifier(required=True)
    changed_fields: List(content_type=String(max_length=50))


@storefront.event(part_of="Product")
class StockAdjusted:
    """Units were added to or removed from a product's stock."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)
