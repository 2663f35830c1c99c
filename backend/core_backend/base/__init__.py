"""
Core backend base components.

Foundational view, serializer and filter classes shared by every API app.
"""

from .viewsets import BaseViewSet, ReadOnlyBaseViewSet, BaseAPIView
from .serializers import BaseModelSerializer, TimestampedSerializer, user_display_name
from .mixins import TenantContextMixin, ArchivingViewSetMixin
from .filters import BaseFilterSet, FlexibleDateTimeFilter, normalize_datetime_value

__all__ = [
    # ViewSets
    'BaseViewSet',
    'ReadOnlyBaseViewSet',
    'BaseAPIView',

    # Serializers
    'BaseModelSerializer',
    'TimestampedSerializer',
    'user_display_name',

    # Mixins
    'TenantContextMixin',
    'ArchivingViewSetMixin',

    # Filters
    'BaseFilterSet',
    'FlexibleDateTimeFilter',
    'normalize_datetime_value',
]
