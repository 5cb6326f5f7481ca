"""
Role-based routing for the server-rendered areas.

Each role owns one URL area. Anonymous visitors are sent to sign in and
signed-in users who wander into another role's area land on their own
dashboard.
"""
import logging

from django.contrib.auth.views import redirect_to_login
from django.shortcuts import redirect

logger = logging.getLogger(__name__)

ROLE_AREAS = {
    '/admin': 'ADMIN',
    '/sp': 'SERVICE_PROVIDER',
    '/user': 'USER',
}


def area_role(path):
    for prefix, role in ROLE_AREAS.items():
        if path == prefix or path.startswith(prefix + '/'):
            return role
    return None


class RoleRouteMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        role = area_role(request.path)
        if role is None:
            return self.get_response(request)

        user = request.user
        if not user.is_authenticated:
            return redirect_to_login(request.get_full_path())

        if user.role != role:
            logger.debug("Redirecting %s (%s) away from %s", user.email, user.role, request.path)
            return redirect(user.dashboard_url)

        return self.get_response(request)
