"""Billing Admin"""

from django.contrib import admin

from .models import BillingLog, PaymentRecord, Subscription


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = (
        "organization",
        "plan",
        "billing_state",
        "payment_mode",
        "trial_ends_at",
        "current_period_end",
        "last_payment_date",
    )
    list_filter = ("billing_state", "plan", "payment_mode")
    search_fields = ("organization__name",)
    readonly_fields = ("created_at", "updated_at")


@admin.register(PaymentRecord)
class PaymentRecordAdmin(admin.ModelAdmin):
    list_display = ("organization", "provider", "plan", "amount_cents", "status", "paid_at", "created_at")
    list_filter = ("provider", "status")
    search_fields = ("organization__name", "provider_reference", "provider_transaction_id")
    readonly_fields = [f.name for f in PaymentRecord._meta.fields]

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(BillingLog)
class BillingLogAdmin(admin.ModelAdmin):
    """Write-once audit trail – read only in the admin"""

    list_display = ("organization", "event_type", "previous_state", "new_state", "created_at")
    list_filter = ("event_type",)
    search_fields = ("organization__name", "description")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
