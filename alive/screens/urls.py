from django.urls import path
from .views import screen_list_register, screen_heartbeat

urlpatterns = [
    path('', screen_list_register, name='screen-list-register'),
    path('/heartbeat', screen_heartbeat, name='screen-heartbeat'),
]
