"""
Billing API views – subscription, status, usage, payments
"""
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsOrganizationAdmin, IsOrganizationMember
from apps.core.response import success_response
from apps.core.throttling import PaymentInitiateThrottle
from apps.core.viewsets import ContextMixin

from . import config as billing_config
from .access import AppArea, evaluate_access
from .mixins import BillingAccessMixin
from .serializers import (
    BillingLogSerializer,
    ChangePlanSerializer,
    DevSuspendSerializer,
    InitiatePaymentSerializer,
    PaymentModeSerializer,
    PaymentRecordSerializer,
    SimulatePaymentSerializer,
    SubscriptionSerializer,
)
from .services import PaymentService, SubscriptionService, UsageService


class BillingAPIView(BillingAccessMixin, ContextMixin, APIView):
    """Tenant billing endpoints stay reachable while suspended."""

    permission_classes = [permissions.IsAuthenticated, IsOrganizationMember]
    billing_area = AppArea.BILLING


# ======================================================================
# 1. Subscription & status
# ======================================================================
class SubscriptionView(BillingAPIView):
    """GET /billing/subscription/ – the organization's subscription record."""

    def get(self, request):
        subscription = SubscriptionService.get_subscription(self.ctx.organization)
        data = SubscriptionSerializer(subscription).data if subscription else None
        return success_response(data)


class BillingStatusView(BillingAPIView):
    """GET /billing/status/ – effective billing state right now."""

    def get(self, request):
        billing_status = SubscriptionService.get_billing_status(self.ctx.organization)
        return success_response(billing_status.as_dict())


class AccessDecisionView(BillingAPIView):
    """GET /billing/access/?area=protected – may the caller open an area?"""

    def get(self, request):
        billing_status = SubscriptionService.get_billing_status(self.ctx.organization)
        decision = evaluate_access(billing_status, request.query_params.get('area'), self.ctx.role)
        return success_response(decision.as_dict())


class UsageView(BillingAPIView):
    """GET /billing/usage/ – plan usage for the current organization."""

    def get(self, request):
        return success_response(UsageService.usage_summary(self.ctx.organization))


class BillingConfigView(APIView):
    """GET /billing/config/ – plans, cycle lengths and configured providers."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return success_response(billing_config.public_config())


# ======================================================================
# 2. Admin actions
# ======================================================================
class PaymentModeView(BillingAPIView):
    """POST /billing/payment-mode/ – switch between auto-pay and pay-as-you-go."""

    permission_classes = [permissions.IsAuthenticated, IsOrganizationAdmin]

    def post(self, request):
        serializer = PaymentModeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subscription = SubscriptionService.update_payment_mode(
            self.ctx, serializer.validated_data['payment_mode'],
        )
        return success_response(SubscriptionSerializer(subscription).data, message='Payment mode updated.')


class ChangePlanView(BillingAPIView):
    """POST /billing/plan/ – change the subscription plan."""

    permission_classes = [permissions.IsAuthenticated, IsOrganizationAdmin]

    def post(self, request):
        serializer = ChangePlanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subscription = SubscriptionService.change_plan(self.ctx, serializer.validated_data['plan'])
        return success_response(SubscriptionSerializer(subscription).data, message='Plan updated.')


# ======================================================================
# 3. Payments
# ======================================================================
class InitiatePaymentView(BillingAPIView):
    """POST /billing/payments/initiate/ – start an M-Pesa or Flutterwave payment."""

    permission_classes = [permissions.IsAuthenticated, IsOrganizationAdmin]
    throttle_classes = [PaymentInitiateThrottle]

    def post(self, request):
        serializer = InitiatePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        payment, result = PaymentService.initiate(
            self.ctx, data['provider'], data['contact'], plan=data.get('plan') or None,
        )
        return Response(
            {
                'success': result.success,
                'message': result.message,
                'data': {
                    'payment': PaymentRecordSerializer(payment).data,
                    'provider_reference': result.provider_reference,
                    'payment_link': result.payment_link,
                },
            },
            status=status.HTTP_201_CREATED,
        )


class PaymentHistoryView(BillingAPIView):
    """GET /billing/payments/ – latest payment attempts, newest first."""

    def get(self, request):
        payments = SubscriptionService.get_payment_history(self.ctx.organization)
        return success_response(PaymentRecordSerializer(payments, many=True).data)


class BillingLogView(BillingAPIView):
    """GET /billing/logs/ – billing audit trail, newest first."""

    permission_classes = [permissions.IsAuthenticated, IsOrganizationAdmin]

    def get(self, request):
        logs = SubscriptionService.get_billing_logs(self.ctx.organization)
        return success_response(BillingLogSerializer(logs, many=True).data)


# ======================================================================
# 4. Development helpers (BILLING_DEV_MODE only)
# ======================================================================
class SimulatePaymentView(BillingAPIView):
    permission_classes = [permissions.IsAuthenticated, IsOrganizationAdmin]

    def post(self, request):
        serializer = SimulatePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment, subscription = PaymentService.simulate_payment(
            self.ctx, plan=serializer.validated_data.get('plan') or None,
        )
        return success_response(
            {
                'payment': PaymentRecordSerializer(payment).data,
                'subscription': SubscriptionSerializer(subscription).data,
            },
            message=f"[DEV] Payment simulated for {payment.plan} plan. Subscription is now ACTIVE.",
        )


class DevSuspendView(BillingAPIView):
    permission_classes = [permissions.IsAuthenticated, IsOrganizationAdmin]

    def post(self, request):
        serializer = DevSuspendSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subscription = SubscriptionService.dev_simulate_suspension(
            self.ctx, serializer.validated_data.get('reason') or None,
        )
        return success_response(
            SubscriptionSerializer(subscription).data,
            message='[DEV] Subscription suspended. Access restricted to billing only.',
        )


class DevResetTrialView(BillingAPIView):
    permission_classes = [permissions.IsAuthenticated, IsOrganizationAdmin]

    def post(self, request):
        subscription = SubscriptionService.dev_reset_to_trial(self.ctx)
        return success_response(
            SubscriptionSerializer(subscription).data,
            message=f"[DEV] Reset to trial. Expires on {subscription.trial_ends_at:%d/%m/%Y}.",
        )
