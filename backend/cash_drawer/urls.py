from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import CashSessionViewSet

app_name = "cash_drawer"

router = DefaultRouter()
router.register(r"sessions", CashSessionViewSet, basename="cash-session")

urlpatterns = [
    path("", include(router.urls)),
]
