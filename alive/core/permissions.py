"""Role based permissions for the API views"""
from rest_framework.permissions import BasePermission

from .errors import ForbiddenError


def authorize(*roles):
    """
    Build a permission class that only lets the given roles through.

    Usage::

        @permission_classes([authorize('kirana', 'admin')])
    """
    allowed = tuple(roles)

    class RolePermission(BasePermission):
        def has_permission(self, request, view):
            user = request.user
            if not user or not user.is_authenticated:
                return False
            if not user.has_role(*allowed):
                raise ForbiddenError(f"Access denied. Required roles: {', '.join(allowed)}")
            return True

    RolePermission.__name__ = f"Authorize_{'_'.join(allowed)}"
    return RolePermission


IsCustomer = authorize('customer')
IsKirana = authorize('kirana')
IsAdmin = authorize('admin')


def can_manage_store(user, store):
    """Store owners manage their own stores; admins manage every store"""
    if not user or not user.is_authenticated:
        return False
    return user.is_admin or (store.owner_id is not None and store.owner_id == user.id)
