"""
URL configuration for the costing app.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from costing.views import (
    IngredientViewSet,
    RecipeViewSet,
    PricingSimulateView,
    BaseCostView,
)

router = DefaultRouter()
router.register(r'ingredients', IngredientViewSet, basename='ingredient')
router.register(r'recipes', RecipeViewSet, basename='recipe')

urlpatterns = [
    path('', include(router.urls)),
    path('pricing/simulate/', PricingSimulateView.as_view(), name='pricing-simulate'),
    path('units/base-cost/', BaseCostView.as_view(), name='unit-base-cost'),
]
