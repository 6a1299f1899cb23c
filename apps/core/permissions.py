"""
DRF permission classes - role and capability enforcement
"""

from rest_framework.permissions import SAFE_METHODS, BasePermission

from apps.core.context import get_request_context
from apps.core.exceptions import PermissionDeniedException


class IsOrganizationMember(BasePermission):
    """Authenticated user that belongs to an organization."""

    message = 'Organization membership required.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return getattr(user, 'organization_id', None) is not None


class IsOrganizationAdmin(IsOrganizationMember):
    """Organization owner or admin."""

    message = 'Only owners and admins can perform this action.'

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        try:
            return get_request_context(request).is_admin
        except PermissionDeniedException:
            return False


class IsPlatformStaff(BasePermission):
    """Platform operators (Django staff / superusers)."""

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_staff or user.is_superuser))


class HasCapability(IsOrganizationMember):
    """
    Per-action capability check.

    Usage in ViewSet:
        permission_classes = [HasCapability]
        capability_map = {
            'create': Capability.SCHEDULING,
            'assign': Capability.SCHEDULING,
        }
        read_capability = None   # any member may read

    Actions missing from ``capability_map`` fall back to
    ``read_capability`` for safe methods and ``write_capability`` otherwise.
    """

    message = 'Your role does not include the permission required for this action.'

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False

        capability = self._required_capability(request, view)
        if capability is None:
            return True
        try:
            return get_request_context(request).has_capability(capability)
        except PermissionDeniedException:
            return False

    @staticmethod
    def _required_capability(request, view):
        capability_map = getattr(view, 'capability_map', {}) or {}
        action = getattr(view, 'action', None)
        if action in capability_map:
            return capability_map[action]
        if request.method in SAFE_METHODS:
            return getattr(view, 'read_capability', None)
        return getattr(view, 'write_capability', None)
