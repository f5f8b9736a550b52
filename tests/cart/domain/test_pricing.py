"""Tests for cart totals."""

from decimal import Decimal

import pytest
from storefront.cart.pricing import FulfillmentMode, compute_totals
from storefront.config import PricingSettings

PRICING = PricingSettings(
    tax_rate=Decimal("0.10"),
    shipping_fee=Decimal("50"),
    free_shipping_threshold=Decimal("500"),
)


class TestComputeTotals:
    def test_ship_below_threshold_pays_flat_fee(self):
        totals = compute_totals([(Decimal("100"), 2)], FulfillmentMode.SHIP, PRICING)
        assert totals.subtotal == Decimal("200.00")
        assert totals.tax == Decimal("20.00")
        assert totals.shipping == Decimal("50.00")
        assert totals.total == Decimal("270.00")

    def test_ship_above_threshold_is_free(self):
        totals = compute_totals([(Decimal("300"), 2)], FulfillmentMode.SHIP, PRICING)
        assert totals.shipping == Decimal("0.00")
        assert totals.total == Decimal("660.00")

    def test_threshold_itself_still_pays_fee(self):
        totals = compute_totals([(Decimal("500"), 1)], FulfillmentMode.SHIP, PRICING)
        assert totals.shipping == Decimal("50.00")

    def test_pickup_never_pays_shipping(self):
        totals = compute_totals([(Decimal("100"), 1)], FulfillmentMode.PICKUP, PRICING)
        assert totals.shipping == Decimal("0.00")
        assert totals.total == Decimal("110.00")

    def test_tax_rounds_half_up_to_cents(self):
        totals = compute_totals([(Decimal("409.09"), 1)], FulfillmentMode.PICKUP, PRICING)
        assert totals.tax == Decimal("40.91")
        assert totals.total == Decimal("450.00")

    def test_rate_is_configuration(self):
        pricing = PricingSettings(tax_rate=Decimal("0.08"))
        totals = compute_totals([(Decimal("200"), 1)], FulfillmentMode.PICKUP, pricing)
        assert totals.tax == Decimal("16.00")

    def test_empty_cart(self):
        totals = compute_totals([], FulfillmentMode.PICKUP, PRICING)
        assert totals.total == Decimal("0.00")

    @pytest.mark.parametrize("mode", list(FulfillmentMode))
    def test_total_is_sum_of_parts(self, mode):
        totals = compute_totals([(Decimal("19.99"), 3), (Decimal("5.55"), 2)], mode, PRICING)
        assert totals.total == totals.subtotal + totals.tax + totals.shipping
