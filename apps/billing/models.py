from django.core.exceptions import ValidationError
from django.db import models

from apps.core.models import Organization, TimeStampedModel, OrganizationEntity


class Subscription(TimeStampedModel):
    """One subscription per organization; superseded in place, never deleted."""

    STATE_TRIAL = 'TRIAL'
    STATE_ACTIVE = 'ACTIVE'
    STATE_SUSPENDED = 'SUSPENDED'
    STATE_CHOICES = [
        (STATE_TRIAL, 'Trial'),
        (STATE_ACTIVE, 'Active'),
        (STATE_SUSPENDED, 'Suspended'),
    ]

    MODE_AUTO_PAY = 'AUTO_PAY'
    MODE_PAY_AS_YOU_GO = 'PAY_AS_YOU_GO'
    MODE_CHOICES = [
        (MODE_AUTO_PAY, 'Auto-pay'),
        (MODE_PAY_AS_YOU_GO, 'Pay as you go'),
    ]

    organization = models.OneToOneField(
        Organization,
        on_delete=models.CASCADE,
        related_name='subscription',
    )
    plan = models.CharField(max_length=20, choices=Organization.PLAN_CHOICES)
    billing_state = models.CharField(
        max_length=20, choices=STATE_CHOICES, default=STATE_TRIAL, db_index=True,
    )
    payment_mode = models.CharField(
        max_length=20, choices=MODE_CHOICES, default=MODE_PAY_AS_YOU_GO,
    )
    amount_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default='KES')
    billing_cycle_days = models.PositiveSmallIntegerField(default=31)
    trial_days = models.PositiveSmallIntegerField(default=10)

    trial_started_at = models.DateTimeField(null=True, blank=True)
    trial_ends_at = models.DateTimeField(null=True, blank=True)
    current_period_start = models.DateTimeField(null=True, blank=True)
    current_period_end = models.DateTimeField(null=True, blank=True)
    next_billing_date = models.DateTimeField(null=True, blank=True)
    auto_pay_enabled = models.BooleanField(default=False)

    last_payment_date = models.DateTimeField(null=True, blank=True)
    last_payment_provider = models.CharField(max_length=20, blank=True)

    suspended_at = models.DateTimeField(null=True, blank=True)
    suspension_reason = models.CharField(max_length=255, blank=True)
    reactivated_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'subscriptions'

    def __str__(self):
        return f"{self.organization} → {self.plan} ({self.billing_state})"


class PaymentRecord(OrganizationEntity):
    """Append-only log entry per payment attempt."""

    PROVIDER_MPESA = 'MPESA'
    PROVIDER_FLUTTERWAVE = 'FLUTTERWAVE'
    PROVIDER_SIMULATED = 'SIMULATED'
    PROVIDER_CHOICES = [
        (PROVIDER_MPESA, 'M-Pesa'),
        (PROVIDER_FLUTTERWAVE, 'Flutterwave'),
        (PROVIDER_SIMULATED, 'Simulated'),
    ]

    STATUS_PENDING = 'PENDING'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_FAILED = 'FAILED'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_FAILED, 'Failed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    subscription = models.ForeignKey(
        Subscription, on_delete=models.PROTECT, related_name='payments',
    )
    plan = models.CharField(max_length=20, choices=Organization.PLAN_CHOICES)
    amount_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default='KES')
    provider = models.CharField(max_length=20, choices=PROVIDER_CHOICES)
    provider_reference = models.CharField(max_length=100, blank=True, db_index=True)
    provider_transaction_id = models.CharField(max_length=100, blank=True)
    contact = models.CharField(max_length=255, blank=True, help_text="Phone or email used to pay")
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True,
    )
    failure_reason = models.TextField(blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    raw_payload = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'payment_records'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['organization', 'status'], name='payment_org_status_idx'),
            models.Index(fields=['provider', 'provider_reference'], name='payment_provider_ref_idx'),
        ]

    def __str__(self):
        return f"{self.provider} {self.amount_cents} {self.currency} ({self.status})"

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            stored = (
                PaymentRecord.objects.filter(pk=self.pk)
                .values_list('status', flat=True)
                .first()
            )
            if stored == self.STATUS_COMPLETED:
                raise ValidationError("Completed payment records are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.status == self.STATUS_COMPLETED:
            raise ValidationError("Completed payment records cannot be deleted.")
        return super().delete(*args, **kwargs)


class BillingLog(OrganizationEntity):
    """Write-once audit trail of billing transitions."""

    EVENT_TRIAL_START = 'TRIAL_START'
    EVENT_PAYMENT_RECEIVED = 'PAYMENT_RECEIVED'
    EVENT_SUSPENSION = 'SUSPENSION'
    EVENT_REACTIVATION = 'REACTIVATION'
    EVENT_PLAN_CHANGE = 'PLAN_CHANGE'
    EVENT_CHOICES = [
        (EVENT_TRIAL_START, 'Trial started'),
        (EVENT_PAYMENT_RECEIVED, 'Payment received'),
        (EVENT_SUSPENSION, 'Suspension'),
        (EVENT_REACTIVATION, 'Reactivation'),
        (EVENT_PLAN_CHANGE, 'Plan change'),
    ]

    subscription = models.ForeignKey(
        Subscription, on_delete=models.PROTECT, related_name='logs',
    )
    event_type = models.CharField(max_length=30, choices=EVENT_CHOICES, db_index=True)
    description = models.CharField(max_length=255, blank=True)
    previous_state = models.CharField(max_length=20, blank=True)
    new_state = models.CharField(max_length=20, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'billing_logs'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.event_type} {self.previous_state}→{self.new_state}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Billing log entries are write-once.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Billing log entries cannot be deleted.")
