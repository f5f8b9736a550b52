"""Order status updates issued by the admin fulfillment tool.

This is the only place an order's fulfillment state changes after
placement, and the only caller of the loyalty ledger. Points are credited
when the destination is ``delivered`` and the admin asked for it. The
status write and the award are separate steps: if the award fails, the
delivered status stays persisted and ``LoyaltyAwardError`` tells the caller
to retry the award alone.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.container import get_storefront
from storefront.domain import storefront
from storefront.fulfillment.phases import resolve
from storefront.order.order import Order
from storefront.order.status import OrderStatus
from storefront.shared.exceptions import LoyaltyAwardError, StorefrontError

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    """Move an order to ``requested``, a status or a pickup phase."""

    order_id: Identifier(required=True)
    requested: String(required=True, max_length=50)
    tracking_label: String(max_length=50, sanitize=False)
    award_points: Boolean(default=False)


@storefront.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repository = current_domain.repository_for(Order)
        order = repository.get(command.order_id)
        previous = order.status
        state = resolve(order, command.requested, command.tracking_label)
        order.apply_fulfillment(state)
        repository.add(order)
        logger.info(
            "Order status updated",
            order_id=order.id,
            previous_status=previous,
            status=order.status,
            tracking_status=order.tracking_status,
        )

        if order.status == OrderStatus.DELIVERED.value and command.award_points:
            try:
                get_storefront().loyalty.award(order)
            except (StorefrontError, ValidationError) as exc:
                logger.error(
                    "Loyalty award failed after delivery",
                    order_id=order.id,
                    customer_id=order.user_id,
                    error=str(exc),
                )
                raise LoyaltyAwardError(order.id, order.user_id, exc) from exc
        return order
