"""DRF mixin applying the billing access gate to tenant views."""
import logging

from django.db import DatabaseError

from apps.core.context import get_request_context
from apps.core.exceptions import SubscriptionSuspendedException

from .access import AppArea, evaluate_access, evaluate_unavailable

logger = logging.getLogger(__name__)

SUSPENDED_MESSAGES = {
    'suspended_admin': 'Your subscription is suspended. Complete payment to restore access.',
    'suspended_employee': 'Access is suspended for your organization. Please contact your employer.',
}


class BillingAccessMixin:
    """
    Refuses requests with 402 when the caller's organization is suspended.

    Usage::

        class ShiftViewSet(BillingAccessMixin, ModelViewSet):
            billing_area = AppArea.PROTECTED
    """

    billing_area = AppArea.PROTECTED

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        if not request.user or not request.user.is_authenticated:
            return

        ctx = get_request_context(request)
        decision = self.get_access_decision(ctx)
        if not decision.allowed:
            logger.info(
                "billing_access_denied org=%s area=%s state=%s path=%s",
                ctx.organization_id, decision.area, decision.state, request.path,
            )
            raise SubscriptionSuspendedException(
                SUSPENDED_MESSAGES.get(decision.notice, 'Access suspended.'),
                **decision.as_dict(),
            )

    def get_access_decision(self, ctx):
        from .services import SubscriptionService

        try:
            status = SubscriptionService.get_billing_status(ctx.organization)
        except DatabaseError:
            logger.exception("billing_status_unavailable org=%s", ctx.organization_id)
            return evaluate_unavailable(self.billing_area, ctx.role)
        return evaluate_access(status, self.billing_area, ctx.role)
