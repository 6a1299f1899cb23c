"""
Billing Serializers
"""
from rest_framework import serializers

from . import config as billing_config
from .models import BillingLog, PaymentRecord, Subscription


# ======================================================================
# Subscription
# ======================================================================
class SubscriptionSerializer(serializers.ModelSerializer):
    amount_display = serializers.SerializerMethodField()
    plan_limits = serializers.SerializerMethodField()

    class Meta:
        model = Subscription
        fields = [
            'id', 'organization', 'plan', 'plan_limits', 'billing_state', 'payment_mode',
            'amount_cents', 'amount_display', 'currency',
            'billing_cycle_days', 'trial_days',
            'trial_started_at', 'trial_ends_at',
            'current_period_start', 'current_period_end', 'next_billing_date',
            'auto_pay_enabled', 'last_payment_date', 'last_payment_provider',
            'suspended_at', 'suspension_reason', 'reactivated_at', 'cancelled_at',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_amount_display(self, obj):
        return billing_config.format_kes(obj.amount_cents)

    def get_plan_limits(self, obj):
        try:
            return billing_config.get_plan_limits(obj.plan).as_dict()
        except KeyError:
            return None


# ======================================================================
# Payment records & billing log
# ======================================================================
class PaymentRecordSerializer(serializers.ModelSerializer):
    amount_display = serializers.SerializerMethodField()

    class Meta:
        model = PaymentRecord
        fields = [
            'id', 'plan', 'amount_cents', 'amount_display', 'currency',
            'provider', 'provider_reference', 'provider_transaction_id',
            'contact', 'status', 'failure_reason', 'paid_at',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_amount_display(self, obj):
        return billing_config.format_kes(obj.amount_cents)


class BillingLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillingLog
        fields = [
            'id', 'event_type', 'description', 'previous_state', 'new_state',
            'metadata', 'created_by', 'created_at',
        ]
        read_only_fields = fields


# ======================================================================
# Actions
# ======================================================================
class InitiatePaymentSerializer(serializers.Serializer):
    provider = serializers.ChoiceField(choices=[
        PaymentRecord.PROVIDER_MPESA,
        PaymentRecord.PROVIDER_FLUTTERWAVE,
    ])
    phone = serializers.CharField(required=False, allow_blank=True)
    email = serializers.CharField(required=False, allow_blank=True)
    plan = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        key = 'phone' if attrs['provider'] == PaymentRecord.PROVIDER_MPESA else 'email'
        if not attrs.get(key):
            raise serializers.ValidationError({key: 'This field is required.'})
        attrs['contact'] = attrs[key]
        return attrs


class PaymentModeSerializer(serializers.Serializer):
    payment_mode = serializers.ChoiceField(choices=Subscription.MODE_CHOICES)


class ChangePlanSerializer(serializers.Serializer):
    plan = serializers.CharField()


class SimulatePaymentSerializer(serializers.Serializer):
    plan = serializers.CharField(required=False, allow_blank=True)


class DevSuspendSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True)
