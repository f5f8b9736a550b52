"""Fulfillment vocabularies and the pure mapping between them.

Every order carries a canonical ``status`` plus a customer-facing tracking
label. Ship orders pick labels from an ordered list, grouped by the status
they may accompany. Pickup orders move through an explicit three-phase
machine (pending, packed, picked up), stored alongside the canonical status
and mapped onto it here:

    pending  -> status pending,   "Order Placed"
    packed   -> status pending,   "Packed & Ready"
    pickedup -> status delivered, "Picked Up"
    cancelled-> status cancelled, "Cancelled"
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from storefront.cart.pricing import FulfillmentMode
from storefront.order.status import TERMINAL_STATUSES, OrderStatus
from storefront.shared.exceptions import InvalidTransition, ValidationError

if TYPE_CHECKING:
    from storefront.order.order import Order


class TrackingLabel(Enum):
    ORDER_PLACED = "Order Placed"
    PAYMENT_CONFIRMED = "Payment Confirmed"
    PROCESSING = "Processing"
    READY_TO_SHIP = "Ready to Ship"
    PICKED_AND_PACKED = "Picked & Packed"
    SHIPPED = "Shipped"
    IN_TRANSIT = "In Transit"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    PACKED_AND_READY = "Packed & Ready"
    PICKED_UP = "Picked Up"


class PickupPhase(Enum):
    PENDING = "pending"
    PACKED = "packed"
    PICKED_UP = "pickedup"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class FulfillmentState:
    status: OrderStatus
    tracking_status: str
    pickup_phase: PickupPhase | None = None


# ---------------------------------------------------------------------------
# Ship mode
# ---------------------------------------------------------------------------
SHIP_LABELS: dict[OrderStatus, tuple[TrackingLabel, ...]] = {
    OrderStatus.PENDING: (
        TrackingLabel.ORDER_PLACED,
        TrackingLabel.PAYMENT_CONFIRMED,
        TrackingLabel.PROCESSING,
        TrackingLabel.READY_TO_SHIP,
        TrackingLabel.PICKED_AND_PACKED,
    ),
    OrderStatus.SHIPPED: (
        TrackingLabel.SHIPPED,
        TrackingLabel.IN_TRANSIT,
        TrackingLabel.OUT_FOR_DELIVERY,
    ),
    OrderStatus.DELIVERED: (TrackingLabel.DELIVERED,),
    OrderStatus.CANCELLED: (TrackingLabel.CANCELLED,),
}

# Same-status entries allow the label to move on without a status change
_SHIP_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PENDING, OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.SHIPPED, OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# ---------------------------------------------------------------------------
# Pickup mode
# ---------------------------------------------------------------------------
_PICKUP_STATES = {
    PickupPhase.PENDING: (OrderStatus.PENDING, TrackingLabel.ORDER_PLACED),
    PickupPhase.PACKED: (OrderStatus.PENDING, TrackingLabel.PACKED_AND_READY),
    PickupPhase.PICKED_UP: (OrderStatus.DELIVERED, TrackingLabel.PICKED_UP),
    PickupPhase.CANCELLED: (OrderStatus.CANCELLED, TrackingLabel.CANCELLED),
}

_PICKUP_TRANSITIONS = {
    PickupPhase.PENDING: {PickupPhase.PACKED, PickupPhase.CANCELLED},
    PickupPhase.PACKED: {PickupPhase.PICKED_UP, PickupPhase.CANCELLED},
    PickupPhase.PICKED_UP: set(),  # Terminal
    PickupPhase.CANCELLED: set(),  # Terminal
}

# Canonical names an admin may send for a pickup order
_PICKUP_ALIASES = {
    OrderStatus.DELIVERED.value: PickupPhase.PICKED_UP,
    OrderStatus.CANCELLED.value: PickupPhase.CANCELLED,
}


def pickup_state(phase: PickupPhase) -> FulfillmentState:
    status, label = _PICKUP_STATES[phase]
    return FulfillmentState(status=status, tracking_status=label.value, pickup_phase=phase)


def initial_state(mode: FulfillmentMode) -> FulfillmentState:
    """State of a freshly placed order.

    Pickup starts the three-phase flow at "Order Placed"; ship orders start
    further along their longer label list, at "Processing".
    """
    if mode is FulfillmentMode.PICKUP:
        return pickup_state(PickupPhase.PENDING)
    return FulfillmentState(status=OrderStatus.PENDING, tracking_status=TrackingLabel.PROCESSING.value)


def _parse_status(requested: str) -> OrderStatus:
    try:
        return OrderStatus(requested.lower())
    except ValueError:
        raise ValidationError({"status": [f"Unknown order status '{requested}'"]}) from None


def _parse_phase(requested: str) -> PickupPhase:
    value = requested.lower()
    if value in _PICKUP_ALIASES:
        return _PICKUP_ALIASES[value]
    try:
        return PickupPhase(value)
    except ValueError:
        raise ValidationError({"status": [f"Unknown pickup phase '{requested}'"]}) from None


def _current_phase(order: "Order") -> PickupPhase:
    return PickupPhase(order.pickup_phase) if order.pickup_phase else PickupPhase.PENDING


def resolve(order: "Order", requested: str, tracking_label: str | None = None) -> FulfillmentState:
    """Compute the state ``order`` moves to for an admin request.

    ``requested`` is a canonical status for ship orders and a pickup phase
    (or ``delivered``/``cancelled``) for pickup orders. Without a tracking
    label, ship orders take the first label of the destination status.

    Raises:
        InvalidTransition: The order is finalized or the move goes backwards.
        ValidationError: Unknown status/phase, or a label that does not
            belong to the destination status.
    """
    status = OrderStatus(order.status)
    if status in TERMINAL_STATUSES:
        raise InvalidTransition(order.id, status.value, requested, "Order Finalized")

    if FulfillmentMode(order.fulfillment_mode) is FulfillmentMode.PICKUP:
        target_phase = _parse_phase(requested)
        current_phase = _current_phase(order)
        if target_phase not in _PICKUP_TRANSITIONS[current_phase]:
            raise InvalidTransition(order.id, current_phase.value, target_phase.value)
        state = pickup_state(target_phase)
        if tracking_label is not None and tracking_label != state.tracking_status:
            raise ValidationError(
                {"tracking_status": [f"Pickup phase {target_phase.value} is shown as '{state.tracking_status}'"]}
            )
        return state

    target = _parse_status(requested)
    if target not in _SHIP_TRANSITIONS[status]:
        raise InvalidTransition(order.id, status.value, target.value)
    allowed = [label.value for label in SHIP_LABELS[target]]
    label = tracking_label if tracking_label is not None else allowed[0]
    if label not in allowed:
        raise ValidationError(
            {"tracking_status": [f"'{label}' cannot accompany status {target.value}; choose one of {allowed}"]}
        )
    return FulfillmentState(status=target, tracking_status=label)


def tracking_options(order: "Order") -> dict[str, list[str]]:
    """Destinations the admin tool may offer, each with its allowed labels.

    Finalized orders get no options.
    """
    current = OrderStatus(order.status)
    if current in TERMINAL_STATUSES:
        return {}
    if FulfillmentMode(order.fulfillment_mode) is FulfillmentMode.PICKUP:
        current_phase = _current_phase(order)
        return {
            phase.value: [_PICKUP_STATES[phase][1].value]
            for phase in PickupPhase
            if phase in _PICKUP_TRANSITIONS[current_phase]
        }
    return {
        status.value: [label.value for label in SHIP_LABELS[status]]
        for status in OrderStatus
        if status in _SHIP_TRANSITIONS[current]
    }
