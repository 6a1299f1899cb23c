"""Payment initiation, confirmation and the development simulation path"""
import logging
import time

from django.db import transaction as db_transaction
from django.utils import timezone

from apps.billing import config as billing_config
from apps.billing.gateways import get_gateway
from apps.billing.models import PaymentRecord
from apps.core.exceptions import (
    ProviderException,
    ResourceNotFoundException,
    TransientException,
    ValidationException,
)

from .subscription_service import SubscriptionService, require_dev_mode
from .usage_service import UsageService

logger = logging.getLogger(__name__)


class PaymentService:
    """Creates ``PaymentRecord`` rows and drives them to a terminal status."""

    @classmethod
    def _resolve_plan(cls, subscription, plan):
        plan = (plan or subscription.plan).upper()
        if plan not in billing_config.plan_codes():
            raise ValidationException(f"Unknown plan: {plan}", field='plan')
        return plan

    # ------------------------------------------------------------------
    # Initiate
    # ------------------------------------------------------------------
    @classmethod
    def initiate(cls, ctx, provider, contact, plan=None, session=None):
        """
        1. Validate the contact locally (no network on bad input)
        2. Persist a ``PENDING`` PaymentRecord
        3. Call the provider and store its reference
        Returns ``(payment, GatewayResult)``.
        """
        ctx.require_admin()
        gateway = get_gateway(provider, session=session)
        normalized_contact = gateway.validate_contact(contact)

        subscription = SubscriptionService.ensure_subscription(ctx.organization)
        plan = cls._resolve_plan(subscription, plan)
        limits = billing_config.get_plan_limits(plan)
        amount_cents = limits.amount_cents
        if plan != subscription.plan:
            over = UsageService.limits_exceeded_by(ctx.organization, limits)
            if over:
                raise ValidationException(
                    f"Current usage exceeds the {limits.name} plan limits: {', '.join(over)}.",
                    field='plan',
                    exceeded=over,
                )

        payment = PaymentRecord.objects.create(
            organization=ctx.organization,
            subscription=subscription,
            plan=plan,
            amount_cents=amount_cents,
            currency=subscription.currency or billing_config.currency(),
            provider=gateway.provider,
            contact=normalized_contact,
            status=PaymentRecord.STATUS_PENDING,
            created_by=ctx.user,
        )

        try:
            result = gateway.initiate(
                organization=ctx.organization,
                contact=contact,
                amount_cents=amount_cents,
                plan=plan,
            )
        except (ProviderException, TransientException) as exc:
            payment.status = PaymentRecord.STATUS_FAILED
            payment.failure_reason = exc.message
            payment.save(update_fields=['status', 'failure_reason', 'updated_at'])
            logger.warning(
                "payment_initiate_failed org=%s payment=%s provider=%s error=%s",
                ctx.organization_id, payment.pk, gateway.provider, exc.message,
            )
            raise

        payment.provider_reference = result.provider_reference or ''
        payment.save(update_fields=['provider_reference', 'updated_at'])
        logger.info(
            "payment_initiated org=%s payment=%s provider=%s plan=%s reference=%s",
            ctx.organization_id, payment.pk, gateway.provider, plan, payment.provider_reference,
        )
        return payment, result

    # ------------------------------------------------------------------
    # Confirm (webhook path)
    # ------------------------------------------------------------------
    @classmethod
    def confirm_payment(cls, provider, provider_reference, success, transaction_id='',
                        failure_reason='', cancelled=False, payload=None):
        try:
            payment = PaymentRecord.objects.get(
                provider=provider, provider_reference=provider_reference,
            )
        except PaymentRecord.DoesNotExist as exc:
            raise ResourceNotFoundException('Payment', provider_reference) from exc

        if payment.status == PaymentRecord.STATUS_COMPLETED:
            logger.info("payment_confirm_duplicate payment=%s reference=%s", payment.pk, provider_reference)
            return payment

        if payload is not None:
            payment.raw_payload = payload

        if success:
            if payload is not None:
                payment.save(update_fields=['raw_payload', 'updated_at'])
            SubscriptionService.process_successful_payment(payment, provider, transaction_id)
            payment.refresh_from_db()
            return payment

        payment.status = PaymentRecord.STATUS_CANCELLED if cancelled else PaymentRecord.STATUS_FAILED
        payment.failure_reason = failure_reason or ''
        payment.save(update_fields=['status', 'failure_reason', 'raw_payload', 'updated_at'])
        logger.info(
            "payment_not_completed payment=%s provider=%s status=%s reason=%s",
            payment.pk, provider, payment.status, failure_reason,
        )
        return payment

    # ------------------------------------------------------------------
    # Development simulation
    # ------------------------------------------------------------------
    @classmethod
    def simulate_payment(cls, ctx, plan=None):
        require_dev_mode()
        ctx.require_admin()

        subscription = SubscriptionService.ensure_subscription(ctx.organization)
        plan = cls._resolve_plan(subscription, plan)
        reference = f"TEST-{int(time.time() * 1000)}"

        with db_transaction.atomic():
            if plan != subscription.plan:
                subscription = SubscriptionService.change_plan(ctx, plan)
            payment = PaymentRecord.objects.create(
                organization=ctx.organization,
                subscription=subscription,
                plan=plan,
                amount_cents=billing_config.get_plan_limits(plan).amount_cents,
                currency=subscription.currency,
                provider=PaymentRecord.PROVIDER_SIMULATED,
                provider_reference=reference,
                contact=getattr(ctx.user, 'email', '') or '',
                status=PaymentRecord.STATUS_PENDING,
                created_by=ctx.user,
            )
            subscription = SubscriptionService.process_successful_payment(
                payment, PaymentRecord.PROVIDER_SIMULATED, reference,
            )

        logger.info("dev_payment_simulated org=%s plan=%s at=%s", ctx.organization_id, plan, timezone.now().isoformat())
        payment.refresh_from_db()
        return payment, subscription
