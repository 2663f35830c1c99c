from rest_framework import serializers


class BaseModelSerializer(serializers.ModelSerializer):
    """
    Base serializer for tenant-owned models.

    ``tenant`` is never accepted from the client; views pass it to the
    service layer explicitly.
    """

    def get_tenant(self):
        request = self.context.get('request')
        return getattr(request, 'tenant', None)


class TimestampedSerializer(BaseModelSerializer):
    """
    Base serializer for models with created_at/updated_at fields.
    """

    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)


def user_display_name(user):
    if user is None:
        return None
    full_name = f"{user.first_name} {user.last_name}".strip()
    return full_name or user.email
