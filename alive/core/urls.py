from django.urls import path
from .views import signup, login, verify_otp, me, logout, refresh_token

urlpatterns = [
    path('/signup', signup, name='auth-signup'),
    path('/login', login, name='auth-login'),
    path('/verify-otp', verify_otp, name='auth-verify-otp'),
    path('/me', me, name='auth-me'),
    path('/logout', logout, name='auth-logout'),
    path('/refresh', refresh_token, name='auth-refresh'),
]
