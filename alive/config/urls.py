"""
URL configuration for the ALIVE backend.

Routes mirror the public REST surface: ``/health``, ``/api`` and one prefix
per app under ``/api/``.
"""
from django.contrib import admin
from django.urls import path, include

from alive.core.views import health_check, api_index

admin.site.site_header = "ALIVE Kirana Admin Panel"
admin.site.site_title = "ALIVE Admin Portal"
admin.site.index_title = "Welcome to ALIVE Kirana Administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health', health_check, name='health'),
    path('api', api_index, name='api-index'),
    path('api/auth', include('alive.core.urls')),
    path('api/kirana', include('alive.kirana.urls')),
    path('api/products', include('alive.products.urls')),
    path('api/orders', include('alive.orders.urls')),
    path('api/rebates', include('alive.rebates.urls')),
    path('api/screens', include('alive.screens.urls')),
]

handler404 = 'alive.core.views.route_not_found'
handler500 = 'alive.core.views.server_error'
