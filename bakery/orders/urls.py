"""
URL configuration for the bakery orders API.

Provides API endpoints for orders, production, dispatch and the accounting
service passthrough.
"""

from rest_framework.routers import DefaultRouter

from .views import OrderViewSet, ProductionViewSet, DispatchViewSet, AccountingViewSet

# Create router and register viewsets
router = DefaultRouter()
router.register(r'orders', OrderViewSet, basename='order')
router.register(r'production', ProductionViewSet, basename='production')
router.register(r'dispatch', DispatchViewSet, basename='dispatch')
router.register(r'accounting', AccountingViewSet, basename='accounting')

# URL patterns
urlpatterns = router.urls
