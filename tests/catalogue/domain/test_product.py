from decimal import Decimal

import pytest
from storefront.catalogue.events import ProductAdded, StockAdjusted
from storefront.catalogue.product import Product
from storefront.shared.exceptions import ValidationError


def _product(**overrides):
    fields = dict(name="Smartwatch", price=Decimal("5999.00"), stock=12, category="Wearables")
    fields.update(overrides)
    return Product.create(**fields)


class TestProductCreation:
    def test_create_raises_added_event(self):
        product = _product()
        assert product.id
        assert isinstance(product._events[0], ProductAdded)

    def test_explicit_id(self):
        assert _product(id="sku-1").id == "sku-1"

    def test_integer_ids_are_coerced(self):
        assert _product(id=42).id == "42"

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            _product(price=Decimal("-1"))


class TestDetails:
    def test_update_records_changed_fields(self):
        product = _product()
        product.update_details(price=Decimal("5499.00"), rating=4.2)
        assert product.price == Decimal("5499.00")
        assert product._events[-1].changed_fields == ["price", "rating"]

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _product().update_details(version=3)
        assert "version" in exc.value.messages


class TestStock:
    def test_adjust_stock_records_previous_level(self):
        product = _product(stock=3)
        product.adjust_stock(-2)
        event = product._events[-1]
        assert isinstance(event, StockAdjusted)
        assert (event.previous_stock, event.new_stock) == (3, 1)

    def test_stock_never_negative(self):
        product = _product(stock=1)
        with pytest.raises(ValidationError):
            product.adjust_stock(-2)
        assert product.stock == 1

    @pytest.mark.parametrize(("stock", "low"), [(0, True), (9, True), (10, False)])
    def test_low_stock(self, stock, low):
        assert _product(stock=stock).is_low_on_stock(10) is low
