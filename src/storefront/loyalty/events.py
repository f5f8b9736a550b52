"""Domain events for the Customer aggregate."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Customer")
class CustomerRegistered:
    __version__ = 1

    customer_id: Identifier(required=True)
    email: String(required=True, max_length=254)


@storefront.event(part_of="Customer")
class LoyaltyPointsAwarded:
    """Points for one delivered order were credited."""

    __version__ = 1

    customer_id: Identifier(required=True)
    order_id: Identifier(required=True)
    points: Integer(required=True)
    new_balance: Integer(required=True)


@storefront.event(part_of="Customer")
class LoyaltyPointsReset:
    __version__ = 1

    customer_id: Identifier(required=True)
    previous_balance: Integer(required=True)
