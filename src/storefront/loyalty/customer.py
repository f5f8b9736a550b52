"""Customer aggregate, carrying the loyalty account.

The point balance and the per-order entries that produced it live on the
same record, so crediting an order and remembering that it was credited
happen in one write.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, List, String, ValueObject

from storefront.domain import storefront
from storefront.loyalty.events import CustomerRegistered, LoyaltyPointsAwarded, LoyaltyPointsReset
from storefront.store.port import CUSTOMERS
from storefront.store.repository import ResourceRepository


def _now() -> datetime:
    return datetime.now(UTC)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@storefront.value_object(part_of="Customer")
class LoyaltyEntry:
    """Points credited for a single order."""

    order_id: String(required=True, max_length=50)
    points: Integer(required=True, min_value=0)
    awarded_at: DateTime(default=_now)


@storefront.aggregate
class Customer:
    name: String(required=True, max_length=150)
    email: String(required=True, max_length=254)
    mobile: String(max_length=20, default="")
    loyalty_points: Integer(default=0, min_value=0)
    loyalty_entries: List(content_type=ValueObject(LoyaltyEntry))
    created_at: DateTime(default=_now)

    @invariant.post
    def email_must_be_valid(self):
        local, _, domain = (self.email or "").partition("@")
        if not local or "." not in domain:
            raise ValidationError({"email": ["Invalid email address"]})

    @classmethod
    def register(cls, name, email, mobile=""):
        customer = cls(name=name, email=normalize_email(email), mobile=mobile or "")
        customer.raise_(CustomerRegistered(customer_id=customer.id, email=customer.email))
        return customer

    def has_been_credited(self, order_id: str) -> bool:
        return any(entry.order_id == order_id for entry in self.loyalty_entries)

    def credit(self, order_id: str, points: int) -> LoyaltyEntry:
        """Credit ``points`` for ``order_id``. Each order is credited at most once."""
        if self.has_been_credited(order_id):
            raise ValidationError({"order_id": [f"Points for order {order_id} were already credited"]})
        entry = LoyaltyEntry(order_id=order_id, points=points)
        self.loyalty_entries = [*self.loyalty_entries, entry]
        self.loyalty_points = self.loyalty_points + points
        self.raise_(
            LoyaltyPointsAwarded(
                customer_id=self.id,
                order_id=order_id,
                points=points,
                new_balance=self.loyalty_points,
            )
        )
        return entry

    def reset_points(self) -> None:
        """Zero the balance. Entries are kept so reset orders are not credited again."""
        previous = self.loyalty_points
        self.loyalty_points = 0
        self.raise_(LoyaltyPointsReset(customer_id=self.id, previous_balance=previous))


@storefront.repository(part_of=Customer)
class CustomerRepository(ResourceRepository):
    resource = CUSTOMERS

    def find_by_email(self, email: str) -> Customer | None:
        matches = self.list(email=normalize_email(email))
        return matches[0] if matches else None
