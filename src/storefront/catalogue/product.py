"""Product aggregate: the catalogue entry carts and orders snapshot from."""

from protean.exceptions import ValidationError
from protean.fields import Decimal, Float, Integer, String, Text

from storefront.catalogue.events import ProductAdded, ProductDetailsUpdated, StockAdjusted
from storefront.domain import storefront
from storefront.store.port import PRODUCTS
from storefront.store.repository import ResourceRepository

EDITABLE_FIELDS = frozenset({"name", "price", "stock", "category", "rating", "description", "image"})


@storefront.aggregate
class Product:
    name: String(required=True, max_length=255)
    price: Decimal(required=True, min_value=0)
    stock: Integer(default=0, min_value=0)
    category: String(max_length=100, default="")
    rating: Float(default=0.0, min_value=0, max_value=5)
    description: Text(default="")
    image: String(max_length=500)

    @classmethod
    def create(cls, name, price, stock=0, category="", rating=0.0, description="", image=None, id=None):
        """Create a catalogue entry. ``id`` is optional; one is generated otherwise."""
        fields = dict(
            name=name,
            price=price,
            stock=stock,
            category=category,
            rating=rating,
            description=description,
            image=image,
        )
        if id is not None:
            fields["id"] = str(id)
        product = cls(**fields)
        product.raise_(
            ProductAdded(
                product_id=product.id,
                name=product.name,
                price=product.price,
                stock=product.stock,
            )
        )
        return product

    def update_details(self, **changes) -> None:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError({field: ["Field cannot be edited"] for field in sorted(unknown)})
        for field, value in changes.items():
            setattr(self, field, value)
        self.raise_(ProductDetailsUpdated(product_id=self.id, changed_fields=sorted(changes)))

    def adjust_stock(self, delta: int) -> None:
        """Add (positive ``delta``) or remove units. Stock never goes negative."""
        new_stock = self.stock + delta
        if new_stock < 0:
            raise ValidationError(
                {"stock": [f"Cannot remove {-delta} unit(s) from product {self.id}; only {self.stock} in stock"]}
            )
        previous = self.stock
        self.stock = new_stock
        self.raise_(StockAdjusted(product_id=self.id, previous_stock=previous, new_stock=new_stock))

    def is_low_on_stock(self, threshold: int) -> bool:
        return self.stock < threshold


@storefront.repository(part_of=Product)
class ProductRepository(ResourceRepository):
    resource = PRODUCTS
