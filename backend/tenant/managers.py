from django.db import models
from threading import local

# Thread-local storage for current tenant
_thread_locals = local()


def set_current_tenant(tenant):
    """
    Set the current tenant for this thread.

    Args:
        tenant: Tenant instance or None to clear

    Called by TenantMiddleware and by the API views once DRF has
    authenticated the operator.
    """
    _thread_locals.tenant = tenant


def get_current_tenant():
    """
    Get the current tenant for this thread.

    Returns:
        Tenant instance or None if no tenant context is set
    """
    return getattr(_thread_locals, 'tenant', None)


class TenantManager(models.Manager):
    """
    Automatically filters querysets by current tenant.

    FAILS CLOSED: Returns empty queryset if no tenant context is set.

    Only top-level entities (ingredients, recipes, sessions, orders) use this
    as their default manager. Owned rows such as recipe items keep a plain
    manager, because reverse relations (recipe.items) are built from the
    related model's default manager and must not depend on thread state.

    Services that run outside a request (cascades, scripts) query through
    ``all_objects`` with an explicit ``tenant=`` filter instead.
    """

    def get_queryset(self):
        tenant = get_current_tenant()

        if tenant:
            return super().get_queryset().filter(tenant=tenant)

        return super().get_queryset().none()


class TenantSoftDeleteManager(models.Manager):
    """
    Combined manager for models with BOTH multi-tenancy AND soft delete.

    Provides:
    - Tenant filtering (fail closed)
    - Soft delete methods: active(), with_archived(), archived_only()
    """

    def _tenant_queryset(self):
        from core_backend.utils.archiving import SoftDeleteQuerySet

        qs = SoftDeleteQuerySet(self.model, using=self._db)

        tenant = get_current_tenant()
        if tenant:
            return qs.filter(tenant=tenant)
        return qs.none()

    def get_queryset(self):
        """Return tenant-filtered queryset, active records only."""
        return self._tenant_queryset().active()

    def active(self):
        return self.get_queryset()

    def with_archived(self):
        """Return both active and archived records for current tenant."""
        return self._tenant_queryset()

    def archived_only(self):
        """Return only archived records for current tenant."""
        return self._tenant_queryset().archived()


class TenantAwareUserManager(models.Manager):
    """
    Manager for the operator (User) model: tenant filtering plus the auth
    methods Django expects (create_user, create_superuser, get_by_natural_key).

    Unlike other models, users do NOT fail closed without a tenant context:
    Django's authentication backends load the user before any tenant is known.
    """

    def get_queryset(self):
        qs = super().get_queryset()

        tenant = get_current_tenant()
        if tenant:
            qs = qs.filter(tenant=tenant)
        return qs.filter(is_active=True)

    def get_by_natural_key(self, username):
        """
        Look the user up by email across all tenants.

        Called by Django's authentication system WITHOUT tenant context.
        """
        return self.model.all_objects.get(**{self.model.USERNAME_FIELD: username})

    def _create_user(self, email, password, **extra_fields):
        if not email:
            from django.utils.translation import gettext_lazy as _
            raise ValueError(_("The Email must be set"))

        from django.contrib.auth.models import BaseUserManager
        email = BaseUserManager.normalize_email(email)

        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        """Create and save a regular operator."""
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        """Create and save a superuser (owner role)."""
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)

        if hasattr(self.model, 'Role'):
            extra_fields.setdefault("role", self.model.Role.OWNER)

        if extra_fields.get("is_staff") is not True:
            from django.utils.translation import gettext_lazy as _
            raise ValueError(_("Superuser must have is_staff=True."))
        if extra_fields.get("is_superuser") is not True:
            from django.utils.translation import gettext_lazy as _
            raise ValueError(_("Superuser must have is_superuser=True."))

        return self._create_user(email, password, **extra_fields)
