from django.urls import path
from alive.products.views import store_products, store_product_detail
from .views import (
    store_list_create, store_nearby, store_detail, store_analytics,
)

urlpatterns = [
    path('', store_list_create, name='store-list-create'),
    path('/nearby', store_nearby, name='store-nearby'),
    path('/<int:pk>', store_detail, name='store-detail'),
    path('/<int:pk>/analytics', store_analytics, name='store-analytics'),
    path('/<int:pk>/products', store_products, name='store-products'),
    path('/<int:pk>/products/<int:product_pk>', store_product_detail, name='store-product-detail'),
]
