"""Admin dashboard figures derived from orders and products."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from storefront.catalogue.product import Product
from storefront.order.order import Order
from storefront.order.status import OrderStatus
from storefront.shared.money import ZERO, to_money


@dataclass(frozen=True)
class DashboardStats:
    order_count: int
    orders_by_status: dict[str, int]
    revenue: Decimal
    low_stock: list[Product] = field(default_factory=list)


def build_dashboard(orders: Iterable[Order], products: Iterable[Product], low_stock_threshold: int = 10) -> DashboardStats:
    """Count orders per canonical status and sum revenue of non-cancelled orders."""
    orders = list(orders)
    counts = {status.value: 0 for status in OrderStatus}
    revenue = ZERO
    for order in orders:
        counts[order.status] += 1
        if order.status != OrderStatus.CANCELLED.value:
            revenue += order.total
    return DashboardStats(
        order_count=len(orders),
        orders_by_status=counts,
        revenue=to_money(revenue),
        low_stock=sorted(
            (product for product in products if product.is_low_on_stock(low_stock_threshold)),
            key=lambda product: product.stock,
        ),
    )
