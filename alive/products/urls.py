from django.urls import path
from .views import product_list, product_nearby, product_detail

urlpatterns = [
    path('', product_list, name='product-list'),
    path('/nearby', product_nearby, name='product-nearby'),
    path('/<int:pk>', product_detail, name='product-detail'),
]
