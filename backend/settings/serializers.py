from rest_framework import serializers

from costing.services.rollup_service import cost_per_minute
from payments.money import CURRENCY_EXPONENT, quantize_places
from .models import GlobalSettings, Employee, FixedCost


class EmployeeSerializer(serializers.ModelSerializer):
    cost_per_minute = serializers.SerializerMethodField()

    class Meta:
        model = Employee
        fields = ['id', 'name', 'salary', 'hours_monthly', 'cost_per_minute']
        read_only_fields = ['id']

    def get_cost_per_minute(self, obj):
        return str(quantize_places(cost_per_minute([obj])))

    def validate_salary(self, value):
        if value < 0:
            raise serializers.ValidationError("Salary cannot be negative.")
        return value

    def validate_hours_monthly(self, value):
        if value < 0:
            raise serializers.ValidationError("Hours cannot be negative.")
        return value


class FixedCostSerializer(serializers.ModelSerializer):

    class Meta:
        model = FixedCost
        fields = ['id', 'name', 'monthly_value']
        read_only_fields = ['id']

    def validate_monthly_value(self, value):
        if value < 0:
            raise serializers.ValidationError("Monthly value cannot be negative.")
        return value


class GlobalSettingsSerializer(serializers.ModelSerializer):
    """
    Rates plus the employee roster and fixed cost list.

    ``employees`` and ``fixed_costs`` replace the stored lists when sent;
    omitting them leaves the lists untouched. ``cost_per_minute`` is derived
    from the roster and read-only.
    """
    employees = EmployeeSerializer(many=True, required=False)
    fixed_costs = FixedCostSerializer(many=True, required=False)
    cost_per_minute = serializers.SerializerMethodField()

    class Meta:
        model = GlobalSettings
        fields = [
            'fixed_overhead_rate',
            'estimated_monthly_revenue',
            'default_tax_rate',
            'debit_fee_rate',
            'credit_fee_rate',
            'currency',
            'employees',
            'fixed_costs',
            'cost_per_minute',
            'updated_at',
        ]
        read_only_fields = ['updated_at']

    def get_cost_per_minute(self, obj):
        return str(quantize_places(cost_per_minute(obj.employees.all())))

    def _validate_rate(self, value):
        if value < 0 or value >= 100:
            raise serializers.ValidationError("Rate must be between 0 and 100.")
        return value

    validate_fixed_overhead_rate = _validate_rate
    validate_default_tax_rate = _validate_rate
    validate_debit_fee_rate = _validate_rate
    validate_credit_fee_rate = _validate_rate

    def validate_currency(self, value):
        value = value.upper()
        if value not in CURRENCY_EXPONENT:
            raise serializers.ValidationError(f"Unsupported currency '{value}'.")
        return value


class OverheadSuggestionSerializer(serializers.Serializer):
    fixed_costs_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    estimated_monthly_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    suggested_overhead_rate = serializers.DecimalField(max_digits=None, decimal_places=2)
    current_overhead_rate = serializers.DecimalField(max_digits=6, decimal_places=2)
