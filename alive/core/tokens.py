"""JWT issuing helpers"""
from rest_framework_simplejwt.tokens import RefreshToken


def tokens_for_user(user):
    """Return an access/refresh pair carrying the user's phone and role"""
    refresh = RefreshToken.for_user(user)
    refresh['phone'] = user.phone
    refresh['role'] = user.role
    # claims on the refresh token are copied onto the access token
    access = refresh.access_token
    return {
        'access': str(access),
        'refresh': str(refresh),
    }
