from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from core_backend.base.serializers import user_display_name
from .models import CashSession


class CashSessionSerializer(BaseModelSerializer):
    operator_name = serializers.SerializerMethodField()
    closed_by_name = serializers.SerializerMethodField()
    verified_by_name = serializers.SerializerMethodField()
    discrepancy = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True, allow_null=True)
    needs_verification = serializers.BooleanField(read_only=True)

    class Meta:
        model = CashSession
        fields = [
            'id',
            'operator',
            'operator_name',
            'status',
            'opened_at',
            'closed_at',
            'initial_balance',
            'calculated_balance',
            'final_balance',
            'discrepancy',
            'notes',
            'closed_by',
            'closed_by_name',
            'verified_by',
            'verified_by_name',
            'verified_at',
            'needs_verification',
        ]
        read_only_fields = fields

    def get_operator_name(self, obj):
        return user_display_name(obj.operator)

    def get_closed_by_name(self, obj):
        return user_display_name(obj.closed_by)

    def get_verified_by_name(self, obj):
        return user_display_name(obj.verified_by)


class OpenSessionSerializer(serializers.Serializer):
    initial_balance = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, default=0)


class CloseSessionSerializer(serializers.Serializer):
    counted_cash = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ForceCloseSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class SessionSummarySerializer(serializers.Serializer):
    cash = serializers.DecimalField(max_digits=12, decimal_places=2)
    pix = serializers.DecimalField(max_digits=12, decimal_places=2)
    debit = serializers.DecimalField(max_digits=12, decimal_places=2)
    credit = serializers.DecimalField(max_digits=12, decimal_places=2)
    unclassified = serializers.DecimalField(max_digits=12, decimal_places=2)
    grand_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    order_count = serializers.IntegerField()
    unclassified_count = serializers.IntegerField()
    fee_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    expected_cash = serializers.DecimalField(max_digits=12, decimal_places=2)
