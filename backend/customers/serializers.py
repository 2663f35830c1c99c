from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from .models import Customer


class CustomerSerializer(BaseModelSerializer):

    class Meta:
        model = Customer
        fields = ['id', 'name', 'phone_number', 'email', 'notes', 'created_at']
        read_only_fields = ['id', 'created_at']


class CustomerSearchSerializer(serializers.Serializer):
    q = serializers.CharField(allow_blank=True, default="")
