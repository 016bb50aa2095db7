from django.urls import path
from .views import rebate_list_create, rebate_review

urlpatterns = [
    path('', rebate_list_create, name='rebate-list-create'),
    path('/<int:pk>/review', rebate_review, name='rebate-review'),
]
