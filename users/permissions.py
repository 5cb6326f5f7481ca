from rest_framework.permissions import BasePermission

from .models import User


class HasRole(BasePermission):
    """Grant access to authenticated users whose role is in ``roles``."""

    roles = ()

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role in self.roles)


class IsAdminRole(HasRole):
    message = 'Only admins can perform this action'
    roles = (User.Role.ADMIN,)


class IsProviderOrAdmin(HasRole):
    message = 'Only admins and service providers can perform this action'
    roles = (User.Role.ADMIN, User.Role.SERVICE_PROVIDER)
