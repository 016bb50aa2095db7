from django.urls import path
from .views import order_list_create, order_detail, order_update_status, order_verify_pickup

urlpatterns = [
    path('', order_list_create, name='order-list-create'),
    path('/<int:pk>', order_detail, name='order-detail'),
    path('/<int:pk>/status', order_update_status, name='order-update-status'),
    path('/<int:pk>/verify-pickup', order_verify_pickup, name='order-verify-pickup'),
]
