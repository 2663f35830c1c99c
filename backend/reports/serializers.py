from rest_framework import serializers

from core_backend.base import normalize_datetime_value


class ReportParameterSerializer(serializers.Serializer):
    """
    Report date range. Date-only values cover whole days: the start is the
    first instant of its day and the end the last instant of its day.
    """

    start_date = serializers.CharField()
    end_date = serializers.CharField()

    max_days = 366

    def validate(self, data):
        start_date = normalize_datetime_value(data["start_date"])
        end_date = normalize_datetime_value(data["end_date"], is_end=True)

        errors = {}
        if start_date is None:
            errors["start_date"] = "Enter a valid date or datetime."
        if end_date is None:
            errors["end_date"] = "Enter a valid date or datetime."
        if errors:
            raise serializers.ValidationError(errors)

        if start_date > end_date:
            raise serializers.ValidationError("Start date must be before end date")

        if (end_date - start_date).days > self.max_days:
            raise serializers.ValidationError(f"Date range cannot exceed {self.max_days} days")

        return {"start_date": start_date, "end_date": end_date}


class TopProductSerializer(serializers.Serializer):
    name = serializers.CharField()
    item_type = serializers.CharField()
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)
    total = serializers.DecimalField(max_digits=14, decimal_places=2)


class SalesReportSerializer(serializers.Serializer):
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    currency = serializers.CharField()
    total_sales = serializers.DecimalField(max_digits=14, decimal_places=2)
    order_count = serializers.IntegerField()
    average_ticket = serializers.DecimalField(max_digits=14, decimal_places=2)
    fee_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    net_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    by_payment_method = serializers.DictField(child=serializers.DecimalField(max_digits=14, decimal_places=2))
    top_products = TopProductSerializer(many=True)
