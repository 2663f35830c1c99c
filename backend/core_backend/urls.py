"""
URL configuration for core_backend project.

Every API app is mounted under /api/<app>/; the tenant is taken from the
authenticated operator.
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("api/health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/costing/", include("costing.urls")),
    path("api/settings/", include("settings.urls")),
    path("api/cash-drawer/", include("cash_drawer.urls")),
    path("api/customers/", include("customers.urls")),
    path("api/orders/", include("orders.urls")),
    path("api/finance/", include("finance.urls")),
    path("api/reports/", include("reports.urls")),
]
