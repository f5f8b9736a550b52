"""Order aggregate: an immutable purchase snapshot with a mutable fulfillment state.

Items, amounts, addresses, payment method and campaign are fixed when the
order is placed and cannot be reassigned afterwards. Only ``status``,
``tracking_status``, ``pickup_phase`` and ``updated_at`` change, and only
through ``apply_fulfillment``.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Decimal, Identifier, Integer, List, String, ValueObject

from storefront.cart.cart import CartItem
from storefront.cart.pricing import CartTotals, FulfillmentMode
from storefront.config import PickupLocation
from storefront.domain import storefront
from storefront.fulfillment.phases import FulfillmentState, PickupPhase, TrackingLabel, initial_state
from storefront.order.events import OrderPlaced, OrderStatusChanged
from storefront.order.status import TERMINAL_STATUSES, OrderStatus, PaymentMethod
from storefront.store.port import ORDERS
from storefront.store.repository import ResourceRepository

_REQUIRED_ADDRESS_FIELDS = ("name", "line1", "postal_code")

# Fixed at placement
SNAPSHOT_FIELDS = frozenset(
    {
        "user_id",
        "items",
        "subtotal",
        "tax",
        "shipping",
        "total",
        "fulfillment_mode",
        "shipping_address",
        "pickup_store",
        "payment_method",
        "campaign_id",
        "created_at",
    }
)


def _now() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where a ship order goes, captured at checkout and never changed."""

    name: String(max_length=100, default="")
    line1: String(max_length=255, default="")
    line2: String(max_length=255, default="")
    city: String(max_length=100, default="")
    state: String(max_length=100, default="")
    postal_code: String(max_length=20, default="")
    phone: String(max_length=20, default="")

    def missing_fields(self) -> list[str]:
        return [field for field in _REQUIRED_ADDRESS_FIELDS if not (getattr(self, field) or "").strip()]


@storefront.value_object(part_of="Order")
class PickupStore:
    """Store a pickup order is collected from."""

    id: Integer(required=True)
    name: String(required=True, max_length=100)
    address: String(required=True, max_length=255)

    @classmethod
    def from_location(cls, location: PickupLocation) -> "PickupStore":
        return cls(id=location.id, name=location.name, address=location.address)


@storefront.value_object(part_of="Order")
class OrderItem:
    """Cart line copied by value into the order; its price is frozen."""

    product_id: String(required=True, max_length=50)
    name: String(required=True, max_length=255)
    price: Decimal(required=True, min_value=0)
    quantity: Integer(required=True, min_value=1)
    category: String(max_length=100, default="")

    @classmethod
    def from_cart_item(cls, item: CartItem) -> "OrderItem":
        return cls(
            product_id=item.product_id,
            name=item.name,
            price=item.price,
            quantity=item.quantity,
            category=item.category,
        )

    @property
    def line_total(self):
        return self.price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    user_id: Identifier(required=True)
    items: List(content_type=ValueObject(OrderItem))
    subtotal: Decimal(required=True, min_value=0)
    tax: Decimal(required=True, min_value=0)
    shipping: Decimal(required=True, min_value=0)
    total: Decimal(required=True, min_value=0)
    fulfillment_mode: String(choices=FulfillmentMode, required=True)
    shipping_address: ValueObject(ShippingAddress)
    pickup_store: ValueObject(PickupStore)
    payment_method: String(choices=PaymentMethod, default=PaymentMethod.CARD.value)
    campaign_id: Identifier()
    status: String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    tracking_status: String(choices=TrackingLabel, required=True)
    pickup_phase: String(choices=PickupPhase)
    created_at: DateTime(default=_now)
    updated_at: DateTime(default=_now)

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order needs at least one item"]})

    def __setattr__(self, name, value):
        if name in SNAPSHOT_FIELDS and getattr(self, "_initialized", False):
            raise ValidationError({name: ["Cannot be changed once the order is placed"]})
        super().__setattr__(name, value)

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        items,
        totals: CartTotals,
        fulfillment_mode: FulfillmentMode,
        payment_method: PaymentMethod = PaymentMethod.CARD,
        shipping_address: ShippingAddress | None = None,
        pickup_store: PickupStore | None = None,
        campaign_id: str | None = None,
    ):
        """Create an order from priced cart lines.

        Args:
            user_id: Customer placing the order.
            items: Cart items; copied by value.
            totals: Amounts computed for ``fulfillment_mode``.
            shipping_address: Required for ship orders.
            pickup_store: Required for pickup orders.
            campaign_id: Campaign the order is attributed to, if any.
        """
        if not items:
            raise ValidationError({"items": ["Cart is empty"]})
        if fulfillment_mode is FulfillmentMode.SHIP:
            if shipping_address is None or shipping_address.missing_fields():
                raise ValidationError({"shipping_address": ["A complete shipping address is required"]})
            pickup_store = None
        else:
            if pickup_store is None:
                raise ValidationError({"store_id": ["Select a store for pickup"]})
            shipping_address = None

        state = initial_state(fulfillment_mode)
        now = _now()
        order = cls(
            user_id=str(user_id),
            items=[OrderItem.from_cart_item(item) for item in items],
            subtotal=totals.subtotal,
            tax=totals.tax,
            shipping=totals.shipping,
            total=totals.total,
            fulfillment_mode=fulfillment_mode.value,
            shipping_address=shipping_address,
            pickup_store=pickup_store,
            payment_method=payment_method.value,
            campaign_id=campaign_id,
            status=state.status.value,
            tracking_status=state.tracking_status,
            pickup_phase=state.pickup_phase.value if state.pickup_phase else None,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=order.id,
                user_id=order.user_id,
                fulfillment_mode=order.fulfillment_mode,
                item_count=sum(item.quantity for item in order.items),
                total=order.total,
                campaign_id=campaign_id,
            )
        )
        return order

    @property
    def is_finalized(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATUSES

    def apply_fulfillment(self, state: FulfillmentState) -> None:
        """Record a fulfillment state already validated by ``phases.resolve``."""
        previous = self.status
        self.status = state.status.value
        self.tracking_status = state.tracking_status
        self.pickup_phase = state.pickup_phase.value if state.pickup_phase else None
        self.updated_at = _now()

        self.raise_(
            OrderStatusChanged(
                order_id=self.id,
                previous_status=previous,
                new_status=self.status,
                tracking_status=self.tracking_status,
                pickup_phase=self.pickup_phase,
            )
        )


@storefront.repository(part_of=Order)
class OrderRepository(ResourceRepository):
    resource = ORDERS

    def history(self, user_id: str | None = None, status: str | None = None) -> list[Order]:
        """Orders newest first, optionally for one customer or one status."""
        filters = {}
        if user_id is not None:
            filters["user_id"] = str(user_id)
        if status is not None:
            filters["status"] = status
        return sorted(self.list(**filters), key=lambda order: order.created_at, reverse=True)
