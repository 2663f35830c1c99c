from django.utils import timezone
from rest_framework import serializers

from core_backend.base import BaseModelSerializer, user_display_name
from .models import LedgerEntry


class LedgerEntrySerializer(BaseModelSerializer):
    """
    A ledger line. Sale entries carry their ``order``; manual entries have
    none and can be deleted.
    """
    created_by_name = serializers.SerializerMethodField()
    is_sale = serializers.BooleanField(read_only=True)

    class Meta:
        model = LedgerEntry
        fields = [
            'id',
            'kind',
            'description',
            'amount',
            'category',
            'date',
            'order',
            'is_sale',
            'created_by',
            'created_by_name',
            'created_at',
        ]
        read_only_fields = ['id', 'order', 'is_sale', 'created_by', 'created_by_name', 'created_at']
        extra_kwargs = {
            'kind': {'required': False},
            'date': {'required': False},
        }

    def get_created_by_name(self, obj):
        return user_display_name(obj.created_by)


class LedgerSummaryParameterSerializer(serializers.Serializer):
    """Date range of a ledger summary; defaults to the current month."""

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, data):
        today = timezone.localdate()
        start_date = data.get("start_date") or today.replace(day=1)
        end_date = data.get("end_date") or today
        if start_date > end_date:
            raise serializers.ValidationError("Start date must be before end date")
        return {"start_date": start_date, "end_date": end_date}


class CategoryTotalSerializer(serializers.Serializer):
    kind = serializers.CharField()
    category = serializers.CharField()
    total = serializers.DecimalField(max_digits=14, decimal_places=2)


class LedgerSummarySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    currency = serializers.CharField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    expenses = serializers.DecimalField(max_digits=14, decimal_places=2)
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    by_category = CategoryTotalSerializer(many=True)
