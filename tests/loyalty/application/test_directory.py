import pytest
from storefront.loyalty.directory import RegisterCustomer
from storefront.shared.exceptions import NotFound, ValidationError


class TestRegistration:
    def test_email_is_normalized(self, storefront):
        customer = storefront.process(RegisterCustomer(name="Ravi", email="  Ravi@Example.COM "))
        assert customer.email == "ravi@example.com"
        assert customer.loyalty_points == 0

    def test_duplicate_email(self, storefront, customer):
        with pytest.raises(ValidationError):
            storefront.process(RegisterCustomer(name="Other", email="ASHA@example.com"))

    def test_invalid_email(self, storefront):
        with pytest.raises(ValidationError) as exc:
            storefront.process(RegisterCustomer(name="Ravi", email="not-an-email"))
        assert "email" in exc.value.messages
        assert storefront.customers.list() == []


class TestLookup:
    def test_login_by_email(self, storefront, customer):
        assert storefront.customers.login("Asha@Example.com").id == customer.id

    def test_login_unknown(self, storefront):
        with pytest.raises(NotFound):
            storefront.customers.login("ghost@example.com")

    def test_list(self, storefront, customer):
        assert [c.id for c in storefront.customers.list()] == [customer.id]
