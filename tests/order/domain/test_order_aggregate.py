"""Tests for the Order aggregate snapshot guarantees."""

from decimal import Decimal

import pytest
from protean.exceptions import IncorrectUsageError
from storefront.cart.cart import CartItem
from storefront.cart.pricing import FulfillmentMode, compute_totals
from storefront.config import PricingSettings
from storefront.order.events import OrderPlaced
from storefront.order.order import Order, OrderItem, PickupStore, ShippingAddress
from storefront.order.status import OrderStatus, PaymentMethod
from storefront.shared.exceptions import ValidationError

ADDRESS = ShippingAddress(name="Asha Rao", line1="221 Linking Road", postal_code="400050")
STORE = PickupStore(id=2, name="TechHaven West", address="Shop 45, Infinity Mall")


def _items():
    return [CartItem(product_id="p-1", name="Earbuds", price=Decimal("100.00"), stock=5, quantity=2)]


def _place(mode=FulfillmentMode.SHIP, **overrides):
    items = overrides.pop("items", _items())
    kwargs = dict(
        user_id="cust-1",
        items=items,
        totals=compute_totals([(i.price, i.quantity) for i in items], mode, PricingSettings()),
        fulfillment_mode=mode,
        shipping_address=ADDRESS,
        pickup_store=STORE,
    )
    kwargs.update(overrides)
    return Order.place(**kwargs)


class TestPlace:
    def test_ship_order(self):
        order = _place(payment_method=PaymentMethod.UPI)
        assert order.status == OrderStatus.PENDING.value
        assert order.tracking_status == "Processing"
        assert order.total == Decimal("270.00")
        assert order.pickup_store is None
        assert order.payment_method == PaymentMethod.UPI.value

    def test_pickup_order_drops_address(self):
        order = _place(FulfillmentMode.PICKUP)
        assert order.shipping_address is None
        assert order.pickup_store == STORE
        assert order.tracking_status == "Order Placed"

    def test_raises_order_placed_event(self):
        order = _place(campaign_id="cmp-1")
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderPlaced)
        assert event.item_count == 2
        assert event.campaign_id == "cmp-1"

    def test_empty_cart_rejected(self):
        with pytest.raises(ValidationError):
            _place(items=[])

    def test_incomplete_address_rejected(self):
        with pytest.raises(ValidationError):
            _place(shipping_address=ShippingAddress(name="Asha", line1="", postal_code="400050"))

    def test_pickup_requires_store(self):
        with pytest.raises(ValidationError):
            _place(FulfillmentMode.PICKUP, pickup_store=None)

    def test_ids_are_unique(self):
        assert len({_place().id for _ in range(50)}) == 50


class TestSnapshot:
    def test_items_copied_by_value(self):
        items = _items()
        order = _place(items=items)
        items[0].quantity = 9
        assert order.items[0].quantity == 2
        assert isinstance(order.items[0], OrderItem)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("total", Decimal("1.00")),
            ("subtotal", Decimal("1.00")),
            ("items", ()),
            ("campaign_id", "cmp-2"),
            ("user_id", "someone-else"),
        ],
    )
    def test_frozen_fields_cannot_be_reassigned(self, field, value):
        order = _place()
        with pytest.raises(ValidationError) as exc:
            setattr(order, field, value)
        assert field in exc.value.messages

    def test_fulfillment_fields_stay_mutable(self):
        order = _place()
        order.tracking_status = "Ready to Ship"
        assert order.tracking_status == "Ready to Ship"

    def test_order_items_are_immutable(self):
        order = _place()
        with pytest.raises(IncorrectUsageError):
            order.items[0].price = Decimal("1.00")

    def test_round_trips_through_store_format(self):
        order = _place(FulfillmentMode.PICKUP)
        record = order.to_dict()
        record.pop("_version", None)
        restored = Order(**record)
        assert restored.total == order.total
        assert restored.pickup_store == order.pickup_store
        assert restored.items == order.items
