import uuid
from django.db import models


class Tenant(models.Model):
    """
    Root entity for multi-tenancy.

    Each business (bakery, confectionery, kitchen) is a tenant. Ingredients,
    recipes, rate settings, cash sessions and orders all hang off a tenant and
    are never shared between tenants.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=255,
        help_text="Display name for the tenant (e.g., Doces da Ana)"
    )
    slug = models.SlugField(
        unique=True,
        help_text="URL-safe identifier, also accepted in the X-Tenant header"
    )
    contact_email = models.EmailField(blank=True)

    is_active = models.BooleanField(
        default=True,
        help_text="Inactive tenants cannot access the system"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tenants'
        ordering = ['name']
        indexes = [
            models.Index(fields=['slug']),
            models.Index(fields=['is_active']),
        ]

    def __str__(self):
        return self.name
