"""Order placement: converts a session cart into a persisted order.

Steps, in order:

1. Validate the session (signed in, non-empty cart) and the checkout input
   (complete address for ship orders, a known store for pickup). Nothing is
   written when validation fails.
2. Re-check every line against freshly read stock.
3. Snapshot the cart lines, price them and set the initial fulfillment state.
4. Attach the session's campaign if it is still running.
5. Persist. If the store write fails the cart is left intact and the error
   propagates so the shopper can retry.
6. Empty the cart, drop the attribution and take the units out of stock.

No loyalty points are awarded here; points follow delivery.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Dict, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.pricing import FulfillmentMode
from storefront.container import Storefront, get_storefront
from storefront.domain import storefront
from storefront.order.order import Order, PickupStore, ShippingAddress
from storefront.order.status import PaymentMethod
from storefront.session.session import Session
from storefront.shared.exceptions import NotFound, OutOfStock, StorefrontError

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    """Check out the cart of ``session_id``."""

    session_id: String(required=True, max_length=100)
    fulfillment_mode: String(choices=FulfillmentMode, required=True)
    payment_method: String(choices=PaymentMethod, default=PaymentMethod.CARD.value)
    shipping_address: Dict()
    store_id: Integer()


def _validate(command, session: Session, sf: Storefront) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    if session.user_id is None:
        errors["user"] = ["Sign in to place an order"]
    if session.cart.is_empty:
        errors["items"] = ["Cart is empty"]

    if FulfillmentMode(command.fulfillment_mode) is FulfillmentMode.SHIP:
        if not command.shipping_address:
            errors["shipping_address"] = ["A shipping address is required"]
        else:
            for field in ShippingAddress(**command.shipping_address).missing_fields():
                errors[f"shipping_address.{field}"] = ["This field is required"]
    elif command.store_id is None:
        errors["store_id"] = ["Select a store for pickup"]
    elif sf.settings.pickup_location(command.store_id) is None:
        errors["store_id"] = [f"Unknown pickup store {command.store_id}"]
    return errors


def _check_stock(session: Session, sf: Storefront) -> None:
    for item in session.cart.items:
        try:
            product = sf.catalogue.fresh(item.product_id)
        except NotFound:
            raise ValidationError({"items": [f"{item.name} is no longer available"]}) from None
        if sf.settings.cart.enforce_stock and item.quantity > product.stock:
            raise OutOfStock(item.product_id, item.quantity, product.stock)


def _decrement_stock(order: Order, sf: Storefront) -> None:
    for item in order.items:
        try:
            sf.catalogue.adjust_stock(item.product_id, -item.quantity)
        except (StorefrontError, ValidationError) as exc:
            # The order stands; inventory is corrected by an admin
            logger.error(
                "Stock decrement failed after order placement",
                order_id=order.id,
                product_id=item.product_id,
                quantity=item.quantity,
                error=str(exc),
            )


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        sf = get_storefront()
        session = sf.sessions.get(command.session_id)
        errors = _validate(command, session, sf)
        if errors:
            raise ValidationError(errors)

        _check_stock(session, sf)

        cart = session.cart
        campaign_id = session.campaign_id
        if campaign_id is not None and not sf.campaigns.is_running(campaign_id):
            logger.info("Dropping attribution to campaign that is not running", campaign_id=campaign_id)
            campaign_id = None

        mode = FulfillmentMode(command.fulfillment_mode)
        shipping_address = None
        pickup_store = None
        if mode is FulfillmentMode.PICKUP:
            pickup_store = PickupStore.from_location(sf.settings.pickup_location(command.store_id))
        else:
            shipping_address = ShippingAddress(**command.shipping_address)

        order = Order.place(
            user_id=session.user_id,
            items=cart.items,
            totals=cart.totals(mode, sf.settings.pricing),
            fulfillment_mode=mode,
            payment_method=PaymentMethod(command.payment_method),
            shipping_address=shipping_address,
            pickup_store=pickup_store,
            campaign_id=campaign_id,
        )
        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order placed",
            order_id=order.id,
            user_id=order.user_id,
            total=str(order.total),
            fulfillment_mode=order.fulfillment_mode,
            campaign_id=order.campaign_id,
        )

        session.complete_checkout()
        _decrement_stock(order, sf)
        return order
