"""
Tests for customer lookup and registration.
"""
import pytest

from customers.exceptions import CustomerValidationError
from customers.models import Customer
from customers.services import CustomerService

CUSTOMERS_URL = "/api/customers/"


@pytest.mark.django_db
class TestCustomerService:

    def test_save_trims_name(self, tenant_a):
        customer = CustomerService.save_customer(tenant_a, {"name": "  Ana Lima ", "email": "ana@example.com"})

        assert customer.name == "Ana Lima"
        assert customer.tenant == tenant_a

    def test_name_required(self, tenant_a):
        with pytest.raises(CustomerValidationError) as exc_info:
            CustomerService.save_customer(tenant_a, {"name": " "})

        assert exc_info.value.errors == {"name": "Name is required."}
        assert not Customer.all_objects.exists()

    def test_search_is_case_insensitive_and_limited(self, tenant_a, tenant_b):
        for index in range(7):
            CustomerService.save_customer(tenant_a, {"name": f"Maria {index}"})
        CustomerService.save_customer(tenant_a, {"name": "João"})
        CustomerService.save_customer(tenant_b, {"name": "Maria do Beto"})

        results = CustomerService.search(tenant_a, "maria")

        assert [c.name for c in results] == ["Maria 0", "Maria 1", "Maria 2", "Maria 3", "Maria 4"]

    def test_blank_search(self, tenant_a, customer):
        assert CustomerService.search(tenant_a, "  ") == []


@pytest.mark.django_db
class TestCustomerAPI:

    def test_cashier_registers_customer(self, cashier_client, tenant_a):
        response = cashier_client.post(CUSTOMERS_URL, {"name": "Ana", "phone_number": "11 98888-1111"}, format="json")

        assert response.status_code == 201
        assert response.data["name"] == "Ana"
        assert Customer.all_objects.get().tenant == tenant_a

    def test_update(self, cashier_client, customer):
        response = cashier_client.patch(f"{CUSTOMERS_URL}{customer.pk}/", {"notes": "No sugar"}, format="json")

        assert response.status_code == 200
        assert Customer.all_objects.get(pk=customer.pk).notes == "No sugar"

    def test_search_action(self, cashier_client, customer):
        response = cashier_client.get(f"{CUSTOMERS_URL}search/", {"q": "souza"})

        assert response.status_code == 200
        assert [row["id"] for row in response.data] == [customer.pk]

    def test_other_tenant_is_invisible(self, api_client, user_tenant_b, customer):
        api_client.force_authenticate(user=user_tenant_b)

        assert api_client.get(CUSTOMERS_URL).data["count"] == 0
        assert api_client.get(f"{CUSTOMERS_URL}{customer.pk}/").status_code == 404
