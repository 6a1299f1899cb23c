"""
DRF throttle classes.

Rates are controlled from `REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]`.
"""

import hashlib
import logging
from typing import Optional

from rest_framework.request import Request
from rest_framework.throttling import SimpleRateThrottle

security_logger = logging.getLogger("security.audit")


def _ident(request: Request) -> str:
    return request.META.get("HTTP_X_FORWARDED_FOR", "").split(",")[0].strip() or request.META.get("REMOTE_ADDR", "unknown")


def _safe_hash(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:16]


class AuditedRateThrottle(SimpleRateThrottle):
    """Writes every refusal to the security audit log."""

    def throttle_failure(self):
        security_logger.warning("throttled scope=%s key=%s", self.scope, self.key)
        return super().throttle_failure()


class LoginRateThrottle(AuditedRateThrottle):
    scope = "login"

    def get_cache_key(self, request: Request, view=None) -> str:
        email = str(request.data.get("email", "")).strip().lower()
        email_key = _safe_hash(email) if email else "no-email"
        return f"throttle:login:{_ident(request)}:{email_key}"


class InvitationAcceptThrottle(AuditedRateThrottle):
    scope = "invitation_accept"

    def get_cache_key(self, request: Request, view=None) -> str:
        return f"throttle:invitation_accept:ip:{_ident(request)}"


class _PerUserThrottle(AuditedRateThrottle):

    def get_cache_key(self, request: Request, view=None) -> Optional[str]:
        user = getattr(request, "user", None)
        if user and user.is_authenticated:
            return f"throttle:{self.scope}:user:{user.pk}"
        return f"throttle:{self.scope}:ip:{_ident(request)}"


class ClockRateThrottle(_PerUserThrottle):
    scope = "attendance_clock"


class PaymentInitiateThrottle(_PerUserThrottle):
    scope = "payment_initiate"
