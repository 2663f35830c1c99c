import django_filters

from core_backend.base import BaseFilterSet
from payments.models import PaymentMethod
from .models import Order


class OrderFilter(BaseFilterSet):
    payment_method = django_filters.MultipleChoiceFilter(choices=PaymentMethod.choices)

    class Meta:
        model = Order
        fields = {
            'session': ['exact'],
            'cashier': ['exact'],
            'created_at': ['gte', 'lte'],
        }
