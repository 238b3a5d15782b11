"""
URL configuration for bakery project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView


@csrf_exempt
@require_http_methods(["GET"])
def api_root(request):
    """API root view with available endpoints."""
    return JsonResponse({
        'message': 'Bakery Orders API',
        'version': '1.0.0',
        'endpoints': {
            'authentication': {
                'token': '/api/auth/token/',
                'token_refresh': '/api/auth/token/refresh/',
            },
            'orders': {
                'orders': '/api/orders/',
                'batch_invoice': '/api/orders/batch-invoice/',
            },
            'production': {
                'tasks': '/api/production/',
                'aggregated': '/api/production/aggregated/',
                'register': '/api/production/register/',
                'batch': '/api/production/batch/',
            },
            'dispatch': {
                'register': '/api/dispatch/register/',
            },
            'analytics': {
                'dashboard': '/api/analytics/dashboard/',
                'sync': '/api/analytics/sync/',
                'reports': '/api/analytics/reports/',
            },
            'accounting': {
                'products': '/api/accounting/products/',
                'persons': '/api/accounting/persons/',
                'documents': '/api/accounting/documents/',
            },
        }
    })


urlpatterns = [
    path("admin/", admin.site.urls),

    # API endpoints
    path('api/', api_root, name='api-root'),  # Exact match for /api/ (must be first)
    path('api/auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('api/', include('analytics.urls')),
    path('api/', include('orders.urls')),
]
