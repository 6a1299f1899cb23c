"""Billing URLs"""
from django.urls import path

from .views import (
    AccessDecisionView,
    BillingConfigView,
    BillingLogView,
    BillingStatusView,
    ChangePlanView,
    DevResetTrialView,
    DevSuspendView,
    InitiatePaymentView,
    PaymentHistoryView,
    PaymentModeView,
    SimulatePaymentView,
    SubscriptionView,
    UsageView,
)
from .webhooks import FlutterwaveWebhookView, MpesaCallbackView

urlpatterns = [
    path('subscription/', SubscriptionView.as_view(), name='billing-subscription'),
    path('status/', BillingStatusView.as_view(), name='billing-status'),
    path('access/', AccessDecisionView.as_view(), name='billing-access'),
    path('usage/', UsageView.as_view(), name='billing-usage'),
    path('config/', BillingConfigView.as_view(), name='billing-config'),
    path('payment-mode/', PaymentModeView.as_view(), name='billing-payment-mode'),
    path('plan/', ChangePlanView.as_view(), name='billing-plan'),
    path('payments/', PaymentHistoryView.as_view(), name='billing-payments'),
    path('payments/initiate/', InitiatePaymentView.as_view(), name='billing-payment-initiate'),
    path('logs/', BillingLogView.as_view(), name='billing-logs'),

    # Development only; the services refuse unless BILLING_DEV_MODE is on
    path('dev/simulate-payment/', SimulatePaymentView.as_view(), name='billing-dev-simulate-payment'),
    path('dev/suspend/', DevSuspendView.as_view(), name='billing-dev-suspend'),
    path('dev/reset-trial/', DevResetTrialView.as_view(), name='billing-dev-reset-trial'),

    # Provider server-to-server webhooks (CSRF-exempt)
    path('webhooks/mpesa/<str:token>/', MpesaCallbackView.as_view(), name='mpesa-webhook'),
    path('webhooks/flutterwave/', FlutterwaveWebhookView.as_view(), name='flutterwave-webhook'),
]
