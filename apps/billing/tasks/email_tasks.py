"""Celery tasks for billing email notifications."""
import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

from apps.billing import config as billing_config
from apps.billing.models import Subscription

logger = logging.getLogger(__name__)


@shared_task(bind=True, ignore_result=True, name='billing.tasks.send_suspension_notice')
def send_suspension_notice(self, subscription_id):
    subscription = (
        Subscription.objects.select_related('organization')
        .filter(id=subscription_id)
        .first()
    )
    if not subscription:
        logger.warning('Subscription %s not found for suspension notice', subscription_id)
        return {'sent': False, 'reason': 'missing_subscription'}

    organization = subscription.organization
    if not organization.email:
        return {'sent': False, 'reason': 'no_recipient'}

    body = (
        f"Hello {organization.name},\n\n"
        "Your HURE Core subscription has been suspended "
        f"({subscription.suspension_reason or 'payment required'}).\n"
        f"Pay {billing_config.format_kes(subscription.amount_cents)} from the billing page to restore access.\n\n"
        f"Need help? Contact {getattr(settings, 'BILLING_SUPPORT_EMAIL', 'support@gethure.com')}."
    )
    sent = send_mail(
        subject='Your HURE Core subscription is suspended',
        message=body,
        from_email=getattr(settings, 'DEFAULT_FROM_EMAIL', None),
        recipient_list=[organization.email],
        fail_silently=False,
    )
    logger.info('suspension_notice_sent org=%s sent=%s', organization.id, sent)
    return {'sent': bool(sent)}
