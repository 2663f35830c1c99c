import django_filters
from django.db import models
from django.utils import timezone
from django.utils.dateparse import parse_datetime, parse_date
from datetime import date, datetime, time


def normalize_datetime_value(value, *, is_end=False):
    """
    Normalize a date or datetime (or ISO string) to a timezone-aware datetime.

    Date-only values become the start of that day, or its last instant when
    ``is_end`` is True, so "2025-11-11" to "2025-11-11" covers the full day.
    Returns None for values that cannot be parsed.

    Examples:
        normalize_datetime_value("2025-11-11")               # 2025-11-11 00:00:00
        normalize_datetime_value("2025-11-11", is_end=True)  # 2025-11-11 23:59:59.999999
        normalize_datetime_value("2025-11-11T10:30:00Z")     # unchanged
    """
    if not value:
        return None

    if isinstance(value, datetime):
        return timezone.make_aware(value) if timezone.is_naive(value) else value

    if isinstance(value, str):
        # Date-only first: parse_datetime also accepts "2025-11-11" as midnight
        try:
            parsed_date = parse_date(value)
            parsed = None if parsed_date else parse_datetime(value)
        except ValueError:
            return None
        if parsed:
            return timezone.make_aware(parsed) if timezone.is_naive(parsed) else parsed
        if parsed_date is None:
            return None
        value = parsed_date

    if isinstance(value, date):
        return timezone.make_aware(datetime.combine(value, time.max if is_end else time.min))

    return None


class FlexibleDateTimeFilter(django_filters.DateTimeFilter):
    """
    A DateTimeFilter that treats a midnight value on lte/lt lookups as the
    end of that day, so date-only inputs behave as full-day ranges.
    """

    def filter(self, qs, value):
        if isinstance(value, datetime) and value.time() == time(0, 0, 0) and self.lookup_expr in ['lte', 'lt']:
            value = normalize_datetime_value(value.date(), is_end=True)
        return super().filter(qs, value)


class BaseFilterSet(django_filters.FilterSet):
    """
    Base filter set: every DateTimeField filter is a FlexibleDateTimeFilter.
    """

    @classmethod
    def filter_for_field(cls, field, field_name, lookup_expr='exact'):
        if isinstance(field, models.DateTimeField):
            return FlexibleDateTimeFilter(field_name=field_name, lookup_expr=lookup_expr)
        return super().filter_for_field(field, field_name, lookup_expr)
