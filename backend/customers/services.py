"""
Customer lookup and registration.
"""
import logging
from typing import Any, Dict, List, Optional

from .exceptions import CustomerValidationError
from .models import Customer

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "phone_number", "email", "notes")
SEARCH_LIMIT = 5


class CustomerService:

    @staticmethod
    def search(tenant, query: str, limit: int = SEARCH_LIMIT) -> List[Customer]:
        """Customers whose name contains ``query``, case-insensitive, by name."""
        query = (query or "").strip()
        if not query:
            return []
        return list(
            Customer.all_objects
            .filter(tenant=tenant, name__icontains=query)
            .order_by('name')[:limit]
        )

    @staticmethod
    def save_customer(tenant, data: Dict[str, Any], instance: Optional[Customer] = None) -> Customer:
        """
        Create or update a customer.

        Raises:
            CustomerValidationError: If the name is missing
        """
        name = data.get("name", instance.name if instance is not None else "")
        if not str(name or "").strip():
            raise CustomerValidationError({"name": "Name is required."})

        customer = instance or Customer(tenant=tenant)
        for field in EDITABLE_FIELDS:
            if field in data:
                setattr(customer, field, data[field] or "")
        customer.name = customer.name.strip()
        customer.save()

        if instance is None:
            logger.info(f"Customer {customer.pk} registered for tenant {tenant.pk}")
        return customer

    @staticmethod
    def get_for_tenant(tenant, customer_id) -> Optional[Customer]:
        if customer_id in (None, ""):
            return None
        return Customer.all_objects.filter(tenant=tenant, pk=customer_id).first()
