"""Customer registration and lookup."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.loyalty.customer import Customer
from storefront.shared.exceptions import NotFound

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Customer")
class RegisterCustomer:
    name: String(required=True, max_length=150)
    email: String(required=True, max_length=254)
    mobile: String(max_length=20, default="")


@storefront.command_handler(part_of=Customer)
class RegisterCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        repository = current_domain.repository_for(Customer)
        customer = Customer.register(name=command.name, email=command.email, mobile=command.mobile)
        if repository.find_by_email(customer.email) is not None:
            raise ValidationError({"email": [f"{customer.email} is already registered"]})
        repository.add(customer)
        logger.info("Customer registered", customer_id=customer.id)
        return customer


class CustomerDirectory:
    """Read side of the customer records."""

    @property
    def _customers(self):
        return current_domain.repository_for(Customer)

    def get(self, customer_id: str) -> Customer:
        return self._customers.get(str(customer_id))

    def find_by_email(self, email: str) -> Customer | None:
        return self._customers.find_by_email(email)

    def login(self, email: str) -> Customer:
        """Resolve the customer behind a sign-in. Credentials are checked upstream."""
        customer = self.find_by_email(email)
        if customer is None:
            raise NotFound("customers", email)
        return customer

    def list(self) -> list[Customer]:
        return self._customers.list()
