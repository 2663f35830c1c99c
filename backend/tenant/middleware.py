from django.http import JsonResponse
from .models import Tenant
from .managers import set_current_tenant


class TenantNotFoundError(Exception):
    """Raised when tenant cannot be resolved from request."""
    pass


class TenantMiddleware:
    """
    Resolves tenant from request and attaches to request.tenant.

    Resolution precedence (highest to lowest):
    1. Session-authenticated operator's tenant
    2. X-Tenant header (slug)
    3. No tenant (request.tenant = None)

    Requests authenticated by DRF (basic auth, tokens) only know their user
    after the view starts, so API views re-bind the tenant in
    core_backend.base.mixins.TenantContextMixin.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path.startswith('/admin/'):
            request.tenant = None
            set_current_tenant(None)
            return self.get_response(request)

        try:
            tenant = self.get_tenant_from_request(request)
            request.tenant = tenant
            set_current_tenant(tenant)

            if tenant and not tenant.is_active:
                return JsonResponse({
                    'error': 'Tenant account is inactive',
                    'code': 'TENANT_INACTIVE'
                }, status=403)

            return self.get_response(request)

        except TenantNotFoundError as e:
            return JsonResponse({
                'error': str(e),
                'code': 'TENANT_NOT_FOUND'
            }, status=400)

        finally:
            # Never leak tenant context into the next request on this thread
            set_current_tenant(None)

    def get_tenant_from_request(self, request):
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated and getattr(user, 'tenant_id', None):
            return user.tenant

        tenant_header = request.META.get('HTTP_X_TENANT')
        if tenant_header:
            try:
                return Tenant.objects.get(slug=tenant_header)
            except Tenant.DoesNotExist:
                raise TenantNotFoundError(
                    f"Tenant '{tenant_header}' not found. Check X-Tenant header value."
                )

        return None
