import django_filters

from core_backend.base import BaseFilterSet
from .models import LedgerEntry


class LedgerEntryFilter(BaseFilterSet):
    has_order = django_filters.BooleanFilter(field_name='order', lookup_expr='isnull', exclude=True)

    class Meta:
        model = LedgerEntry
        fields = {
            'kind': ['exact'],
            'category': ['exact'],
            'date': ['gte', 'lte'],
        }
