"""
Request Context

The caller's organization, user, role and capabilities, resolved once per
request and passed explicitly into every service call.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional
import logging

from apps.core.exceptions import PermissionDeniedException

logger = logging.getLogger(__name__)

ROLE_OWNER = 'OWNER'
ROLE_ADMIN = 'ADMIN'
ROLE_EMPLOYEE = 'EMPLOYEE'
ADMIN_ROLES = (ROLE_OWNER, ROLE_ADMIN)


@dataclass(frozen=True)
class RequestContext:
    organization: object
    user: Optional[object] = None
    staff: Optional[object] = None
    role: str = ROLE_EMPLOYEE
    capabilities: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_request(cls, request):
        user = getattr(request, 'user', None)
        if not user or not user.is_authenticated:
            raise PermissionDeniedException('Authentication required.')
        return cls.for_user(user)

    @classmethod
    def for_user(cls, user):
        organization = getattr(user, 'organization', None)
        if organization is None:
            raise PermissionDeniedException('Organization context required.')

        staff = getattr(user, 'staff_profile', None)
        if staff is not None and staff.organization_id != organization.id:
            logger.warning(
                "context_staff_org_mismatch user=%s staff=%s", user.pk, staff.pk,
            )
            staff = None

        if staff is None:
            return cls(organization=organization, user=user)

        return cls(
            organization=organization,
            user=user,
            staff=staff,
            role=staff.system_role,
            capabilities=frozenset(staff.effective_capabilities()),
        )

    @property
    def organization_id(self):
        return self.organization.id

    @property
    def is_owner(self) -> bool:
        return self.role == ROLE_OWNER

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def has_capability(self, capability) -> bool:
        if self.role == ROLE_OWNER:
            return True
        return str(capability) in self.capabilities

    def require_capability(self, capability) -> None:
        if not self.has_capability(capability):
            raise PermissionDeniedException(
                f"Your role does not include the '{capability}' permission."
            )

    def require_admin(self) -> None:
        if not self.is_admin:
            raise PermissionDeniedException('Only owners and admins can perform this action.')


def get_request_context(request) -> RequestContext:
    """Build the context once per request and cache it on the request."""
    cached = getattr(request, '_request_context', None)
    if cached is not None:
        return cached
    ctx = RequestContext.from_request(request)
    request._request_context = ctx
    return ctx
