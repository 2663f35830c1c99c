from rest_framework import serializers

from core_backend.base import BaseModelSerializer, user_display_name
from payments.models import PaymentMethod
from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            'id',
            'item_type',
            'recipe',
            'product',
            'product_name',
            'quantity',
            'unit_price',
            'total_price',
        ]
        read_only_fields = fields


class OrderSerializer(BaseModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    display_number = serializers.CharField(read_only=True)
    cashier_name = serializers.SerializerMethodField()
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            'id',
            'display_number',
            'session',
            'cashier',
            'cashier_name',
            'customer',
            'customer_name',
            'status',
            'total_amount',
            'discount',
            'change_amount',
            'payment_method',
            'payment_method_label',
            'fee_amount',
            'net_amount',
            'created_at',
            'items',
        ]
        read_only_fields = fields

    def get_cashier_name(self, obj):
        return user_display_name(obj.cashier)


class SaleItemInputSerializer(serializers.Serializer):
    item_type = serializers.ChoiceField(choices=OrderItem.ItemType.choices)
    recipe = serializers.IntegerField(required=False, allow_null=True)
    product = serializers.IntegerField(required=False, allow_null=True)
    product_name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    quantity = serializers.DecimalField(max_digits=10, decimal_places=3, min_value=0, default=1)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)

    def validate(self, attrs):
        reference = 'recipe' if attrs['item_type'] == OrderItem.ItemType.RECIPE else 'product'
        if attrs.get(reference) is None:
            raise serializers.ValidationError({reference: f"Required for a {attrs['item_type']} item."})
        if attrs['quantity'] <= 0:
            raise serializers.ValidationError({'quantity': "Must be greater than 0."})
        return attrs


class SaleSerializer(serializers.Serializer):
    """
    Payload of a sale. The session defaults to the cashier's open session;
    ``customer`` optionally attributes the sale to a registered customer.
    """
    session = serializers.IntegerField(required=False)
    customer = serializers.IntegerField(required=False, allow_null=True)
    total_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    discount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, default=0)
    change_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, default=0)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    payment_method_label = serializers.CharField(required=False, allow_blank=True, max_length=50)
    items = SaleItemInputSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        if not attrs.get('payment_method') and not attrs.get('payment_method_label'):
            raise serializers.ValidationError({'payment_method': "Provide a payment method or its label."})
        return attrs
