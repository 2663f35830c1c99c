from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import CustomerViewSet

app_name = "customers"

router = SimpleRouter()
router.register(r"", CustomerViewSet, basename="customer")

urlpatterns = [
    path("", include(router.urls)),
]
