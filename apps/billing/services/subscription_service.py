"""Subscription lifecycle management"""
import logging
from datetime import timedelta

from django.db import transaction as db_transaction
from django.utils import timezone

from apps.billing import config as billing_config
from apps.billing.models import BillingLog, PaymentRecord, Subscription
from apps.billing.state_engine import BillingStatus, evaluate_billing_state
from apps.core.exceptions import PermissionDeniedException, ValidationException
from apps.core.models import Organization

logger = logging.getLogger(__name__)


def require_dev_mode():
    if not billing_config.is_dev_mode():
        raise PermissionDeniedException('Dev mode is not enabled.')


class SubscriptionService:
    """Trial provisioning, state transitions, plan and payment-mode changes."""

    DEFAULT_PLAN = Organization.PLAN_PROFESSIONAL
    DEFAULT_SUSPENSION_REASON = 'Non-payment'

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------
    @classmethod
    def get_subscription(cls, organization):
        if not organization:
            return None
        return Subscription.objects.filter(organization=organization).first()

    @classmethod
    def get_billing_status(cls, organization, now=None):
        now = now or timezone.now()
        subscription = cls.get_subscription(organization)
        if subscription is None:
            return BillingStatus(
                state=Subscription.STATE_TRIAL,
                days_remaining=billing_config.trial_days(),
            )
        return evaluate_billing_state(
            subscription, now, grace_period_days=billing_config.grace_period_days(),
        )

    @classmethod
    def can_access_platform(cls, organization, now=None):
        return not cls.get_billing_status(organization, now=now).is_suspended

    @classmethod
    def get_payment_history(cls, organization, limit=50):
        return list(
            PaymentRecord.objects.filter(organization=organization).order_by('-created_at')[:limit]
        )

    @classmethod
    def get_billing_logs(cls, organization, limit=100):
        return list(
            BillingLog.objects.filter(organization=organization).order_by('-created_at')[:limit]
        )

    # ------------------------------------------------------------------
    # Trial management
    # ------------------------------------------------------------------
    @classmethod
    def create_trial(cls, organization, plan=None):
        """Provision the organization's trial. Returns the existing record if there is one."""
        existing = cls.get_subscription(organization)
        if existing:
            return existing

        plan = (plan or organization.plan or cls.DEFAULT_PLAN).upper()
        limits = billing_config.get_plan_limits(plan)
        now = timezone.now()
        trial_days = billing_config.trial_days()

        with db_transaction.atomic():
            subscription = Subscription.objects.create(
                organization=organization,
                plan=plan,
                billing_state=Subscription.STATE_TRIAL,
                payment_mode=Subscription.MODE_PAY_AS_YOU_GO,
                amount_cents=limits.amount_cents,
                currency=billing_config.currency(),
                billing_cycle_days=billing_config.billing_cycle_days(),
                trial_days=trial_days,
                trial_started_at=now,
                trial_ends_at=now + timedelta(days=trial_days),
                auto_pay_enabled=False,
            )
            cls._log(
                subscription,
                BillingLog.EVENT_TRIAL_START,
                f"{trial_days}-day trial started on the {limits.name} plan",
                new_state=Subscription.STATE_TRIAL,
            )

        logger.info(
            "trial_created org=%s plan=%s trial_ends_at=%s",
            organization.id, plan, subscription.trial_ends_at.isoformat(),
        )
        return subscription

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------
    @classmethod
    def update_billing_state(cls, subscription, new_state, reason=None, performed_by=None):
        previous = subscription.billing_state
        now = timezone.now()

        if new_state == Subscription.STATE_SUSPENDED:
            subscription.suspended_at = now
            subscription.suspension_reason = reason or cls.DEFAULT_SUSPENSION_REASON
            event = BillingLog.EVENT_SUSPENSION
        elif new_state == Subscription.STATE_ACTIVE and previous == Subscription.STATE_SUSPENDED:
            subscription.reactivated_at = now
            subscription.suspended_at = None
            subscription.suspension_reason = ''
            event = BillingLog.EVENT_REACTIVATION
        elif new_state == Subscription.STATE_ACTIVE:
            event = BillingLog.EVENT_PAYMENT_RECEIVED
        elif new_state == Subscription.STATE_TRIAL:
            event = BillingLog.EVENT_TRIAL_START
        else:
            raise ValidationException(f"Unknown billing state: {new_state}", field='billing_state')

        subscription.billing_state = new_state
        with db_transaction.atomic():
            subscription.save()
            cls._sync_account_status(subscription.organization, new_state)
            cls._log(
                subscription,
                event,
                reason or '',
                previous_state=previous,
                new_state=new_state,
                performed_by=performed_by,
            )

        logger.info(
            "billing_state_change org=%s from=%s to=%s reason=%s",
            subscription.organization_id, previous, new_state, reason or '',
        )
        return subscription

    @classmethod
    def sync_billing_state(cls, subscription, now=None):
        """Persist a suspension the engine has derived. Returns True when a write happened."""
        now = now or timezone.now()
        if subscription.billing_state == Subscription.STATE_SUSPENDED:
            return False
        status = evaluate_billing_state(
            subscription, now, grace_period_days=billing_config.grace_period_days(),
        )
        if not status.is_suspended:
            return False
        cls.update_billing_state(
            subscription, Subscription.STATE_SUSPENDED, reason=status.suspension_reason,
        )
        return True

    @classmethod
    def process_successful_payment(cls, payment, provider=None, transaction_id=''):
        """Complete ``payment`` and activate its subscription for one billing cycle."""
        with db_transaction.atomic():
            payment = PaymentRecord.objects.select_for_update().get(pk=payment.pk)
            if payment.status == PaymentRecord.STATUS_COMPLETED:
                logger.info("payment_already_processed payment=%s", payment.pk)
                return payment.subscription

            now = timezone.now()
            payment.status = PaymentRecord.STATUS_COMPLETED
            payment.paid_at = now
            if transaction_id:
                payment.provider_transaction_id = transaction_id
            payment.failure_reason = ''
            payment.save()

            subscription = Subscription.objects.select_for_update().get(pk=payment.subscription_id)
            previous = subscription.billing_state
            if payment.plan and payment.plan != subscription.plan:
                cls._apply_plan(subscription, payment.plan, performed_by=payment.created_by)
            cycle_days = subscription.billing_cycle_days or billing_config.billing_cycle_days()

            subscription.billing_state = Subscription.STATE_ACTIVE
            subscription.current_period_start = now
            subscription.current_period_end = now + timedelta(days=cycle_days)
            subscription.next_billing_date = subscription.current_period_end
            subscription.last_payment_date = now
            subscription.last_payment_provider = provider or payment.provider
            if subscription.trial_ends_at and subscription.trial_ends_at > now:
                subscription.trial_ends_at = now
            if previous == Subscription.STATE_SUSPENDED:
                subscription.reactivated_at = now
            subscription.suspended_at = None
            subscription.suspension_reason = ''
            subscription.save()

            cls._sync_account_status(subscription.organization, Subscription.STATE_ACTIVE)
            cls._log(
                subscription,
                BillingLog.EVENT_PAYMENT_RECEIVED,
                f"Payment of {billing_config.format_kes(payment.amount_cents)} received via {subscription.last_payment_provider}",
                previous_state=previous,
                new_state=Subscription.STATE_ACTIVE,
                metadata={'payment_id': str(payment.pk), 'transaction_id': transaction_id},
            )
            if previous == Subscription.STATE_SUSPENDED:
                cls._log(
                    subscription,
                    BillingLog.EVENT_REACTIVATION,
                    'Subscription reactivated after payment',
                    previous_state=previous,
                    new_state=Subscription.STATE_ACTIVE,
                )

        logger.info(
            "payment_processed org=%s payment=%s provider=%s period_end=%s",
            subscription.organization_id, payment.pk,
            subscription.last_payment_provider, subscription.current_period_end.isoformat(),
        )
        return subscription

    # ------------------------------------------------------------------
    # Admin actions
    # ------------------------------------------------------------------
    @classmethod
    def ensure_subscription(cls, organization):
        subscription = cls.get_subscription(organization)
        if subscription is None:
            subscription = cls.create_trial(organization)
        return subscription

    @classmethod
    def update_payment_mode(cls, ctx, mode):
        ctx.require_admin()
        if mode not in dict(Subscription.MODE_CHOICES):
            raise ValidationException(f"Unknown payment mode: {mode}", field='payment_mode')
        subscription = cls.ensure_subscription(ctx.organization)
        subscription.payment_mode = mode
        subscription.auto_pay_enabled = mode == Subscription.MODE_AUTO_PAY
        subscription.save(update_fields=['payment_mode', 'auto_pay_enabled', 'updated_at'])
        logger.info("payment_mode_changed org=%s mode=%s", ctx.organization_id, mode)
        return subscription

    @classmethod
    def change_plan(cls, ctx, plan):
        ctx.require_admin()
        plan = (plan or '').upper()
        if plan not in billing_config.plan_codes():
            raise ValidationException(f"Unknown plan: {plan}", field='plan')

        from .usage_service import UsageService

        organization = ctx.organization
        limits = billing_config.get_plan_limits(plan)
        over = UsageService.limits_exceeded_by(organization, limits)
        if over:
            raise ValidationException(
                f"Current usage exceeds the {limits.name} plan limits: {', '.join(over)}.",
                field='plan',
                exceeded=over,
            )

        subscription = cls.ensure_subscription(organization)
        previous_plan = subscription.plan
        if previous_plan == plan:
            return subscription

        with db_transaction.atomic():
            cls._apply_plan(subscription, plan, performed_by=ctx.user)
        return subscription

    @classmethod
    def _apply_plan(cls, subscription, plan, performed_by=None):
        """Move ``subscription`` and its organization onto ``plan``. Caller owns the transaction."""
        previous_plan = subscription.plan
        subscription.plan = plan
        subscription.amount_cents = billing_config.get_plan_limits(plan).amount_cents
        subscription.save(update_fields=['plan', 'amount_cents', 'updated_at'])
        organization = subscription.organization
        organization.plan = plan
        organization.save(update_fields=['plan', 'updated_at'])
        cls._log(
            subscription,
            BillingLog.EVENT_PLAN_CHANGE,
            f"Plan changed from {previous_plan} to {plan}",
            previous_state=subscription.billing_state,
            new_state=subscription.billing_state,
            performed_by=performed_by,
            metadata={'from_plan': previous_plan, 'to_plan': plan},
        )
        logger.info("plan_changed org=%s from=%s to=%s", organization.id, previous_plan, plan)

    # ------------------------------------------------------------------
    # Development helpers
    # ------------------------------------------------------------------
    @classmethod
    def dev_simulate_suspension(cls, ctx, reason=None):
        require_dev_mode()
        ctx.require_admin()
        subscription = cls.ensure_subscription(ctx.organization)
        return cls.update_billing_state(
            subscription,
            Subscription.STATE_SUSPENDED,
            reason=reason or '[DEV] Simulated suspension for testing',
            performed_by=ctx.user,
        )

    @classmethod
    def dev_reset_to_trial(cls, ctx):
        require_dev_mode()
        ctx.require_admin()
        subscription = cls.get_subscription(ctx.organization)
        if subscription is None:
            return cls.create_trial(ctx.organization)

        previous = subscription.billing_state
        now = timezone.now()
        subscription.billing_state = Subscription.STATE_TRIAL
        subscription.trial_started_at = now
        subscription.trial_ends_at = now + timedelta(days=billing_config.trial_days())
        subscription.suspended_at = None
        subscription.suspension_reason = ''
        subscription.current_period_start = None
        subscription.current_period_end = None
        subscription.next_billing_date = None
        subscription.last_payment_date = None
        subscription.last_payment_provider = ''
        with db_transaction.atomic():
            subscription.save()
            cls._sync_account_status(subscription.organization, Subscription.STATE_TRIAL)
            cls._log(
                subscription,
                BillingLog.EVENT_TRIAL_START,
                '[DEV] Trial reset for testing',
                previous_state=previous,
                new_state=Subscription.STATE_TRIAL,
                performed_by=ctx.user,
            )
        logger.info("dev_trial_reset org=%s", ctx.organization_id)
        return subscription

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    @staticmethod
    def _sync_account_status(organization, billing_state):
        target = (
            Organization.ACCOUNT_SUSPENDED
            if billing_state == Subscription.STATE_SUSPENDED
            else Organization.ACCOUNT_ACTIVE
        )
        if organization.account_status == Organization.ACCOUNT_CLOSED:
            return
        if organization.account_status != target:
            organization.account_status = target
            organization.save(update_fields=['account_status', 'updated_at'])

    @staticmethod
    def _log(subscription, event_type, description='', previous_state='', new_state='',
             performed_by=None, metadata=None):
        return BillingLog.objects.create(
            organization_id=subscription.organization_id,
            subscription=subscription,
            event_type=event_type,
            description=description[:255],
            previous_state=previous_state or '',
            new_state=new_state or '',
            metadata=metadata or {},
            created_by=performed_by,
        )
