from django.urls import path

from .views import GlobalSettingsView, OverheadSuggestionView

urlpatterns = [
    path('', GlobalSettingsView.as_view(), name='global-settings'),
    path('overhead-suggestion/', OverheadSuggestionView.as_view(), name='overhead-suggestion'),
]
