from decimal import Decimal

from storefront.cart.cart import CartItem
from storefront.cart.pricing import CartTotals, FulfillmentMode
from storefront.catalogue.product import Product
from storefront.fulfillment.phases import FulfillmentState
from storefront.order.dashboard import build_dashboard
from storefront.order.order import Order, ShippingAddress
from storefront.order.status import OrderStatus


def _order(total, status=OrderStatus.PENDING):
    amount = Decimal(total)
    order = Order.place(
        user_id="cust-1",
        items=[CartItem(product_id="p-1", name="Speaker", price=amount, stock=5, quantity=1)],
        totals=CartTotals(subtotal=amount, tax=Decimal("0"), shipping=Decimal("0"), total=amount),
        fulfillment_mode=FulfillmentMode.SHIP,
        shipping_address=ShippingAddress(name="Asha Rao", line1="221 Linking Road", postal_code="400050"),
    )
    if status is not OrderStatus.PENDING:
        order.apply_fulfillment(FulfillmentState(status=status, tracking_status=status.value.title()))
    return order


def test_counts_every_status():
    stats = build_dashboard([_order("10"), _order("20", OrderStatus.SHIPPED)], [])
    assert stats.order_count == 2
    assert stats.orders_by_status == {"pending": 1, "shipped": 1, "delivered": 0, "cancelled": 0}


def test_revenue_excludes_cancelled_orders():
    stats = build_dashboard(
        [_order("100.50"), _order("40", OrderStatus.DELIVERED), _order("999", OrderStatus.CANCELLED)],
        [],
    )
    assert stats.revenue == Decimal("140.50")


def test_low_stock_products_sorted():
    products = [
        Product.create(name="A", price=Decimal("1"), stock=4),
        Product.create(name="B", price=Decimal("1"), stock=50),
        Product.create(name="C", price=Decimal("1"), stock=1),
    ]
    stats = build_dashboard([], products, low_stock_threshold=5)
    assert [p.name for p in stats.low_stock] == ["C", "A"]
    assert stats.revenue == Decimal("0.00")
