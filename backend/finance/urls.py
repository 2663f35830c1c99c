from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import LedgerEntryViewSet, LedgerSummaryView

app_name = "finance"

router = DefaultRouter()
router.register(r"entries", LedgerEntryViewSet, basename="ledger-entry")

urlpatterns = [
    path("summary/", LedgerSummaryView.as_view(), name="ledger-summary"),
    path("", include(router.urls)),
]
