"""Cart pricing: subtotal, tax, shipping and total for a fulfillment mode.

``compute_totals`` is a pure function of the priced lines, the fulfillment
mode and the pricing settings.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from storefront.config import PricingSettings
from storefront.shared.money import ZERO, to_money


class FulfillmentMode(Enum):
    """Whether the order ships to an address or is collected in store."""

    SHIP = "ship"
    PICKUP = "pickup"


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal

    def as_dict(self) -> dict[str, Decimal]:
        return {
            "subtotal": self.subtotal,
            "tax": self.tax,
            "shipping": self.shipping,
            "total": self.total,
        }


def shipping_for(subtotal: Decimal, mode: FulfillmentMode, pricing: PricingSettings) -> Decimal:
    if mode is FulfillmentMode.PICKUP:
        return ZERO
    if subtotal > pricing.free_shipping_threshold:
        return ZERO
    return to_money(pricing.shipping_fee)


def compute_totals(
    lines: Iterable[tuple[Decimal, int]],
    mode: FulfillmentMode,
    pricing: PricingSettings,
) -> CartTotals:
    """Price ``(unit_price, quantity)`` lines.

    Tax is the subtotal times the configured rate, rounded half-up to cents.
    """
    subtotal = to_money(sum((Decimal(price) * quantity for price, quantity in lines), ZERO))
    tax = to_money(subtotal * pricing.tax_rate)
    shipping = shipping_for(subtotal, mode, pricing)
    return CartTotals(subtotal=subtotal, tax=tax, shipping=shipping, total=subtotal + tax + shipping)
