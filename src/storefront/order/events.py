"""Domain events for the Order aggregate."""

from protean.fields import Decimal, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was converted into an immutable order snapshot."""

    __version__ = 1

    order_id: Identifier(required=True)
    user_id: Identifier(required=True)
    fulfillment_mode: String(required=True, max_length=20)
    item_count: Integer(required=True)
    total: Decimal(required=True)
    campaign_id: Identifier()


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """The fulfillment state of an order moved."""

    __version__ = 1

    order_id: Identifier(required=True)
    previous_status: String(required=True, max_length=20)
    new_status: String(required=True, max_length=20)
    tracking_status: String(required=True, max_length=50, sanitize=False)
    pickup_phase: String(max_length=20)
