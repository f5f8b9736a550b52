"""Storefront: order lifecycle, fulfillment tracking, loyalty points and campaign accounting."""

__version__ = "0.1.0"
