"""
Celery task: sweep_billing_states

Runs daily via Celery Beat. Persists suspensions the billing state engine
derives from elapsed time (expired trials, overdue periods). Request-time
access decisions do not depend on this task having run.
"""
import logging

from celery import shared_task
from django.utils import timezone

from apps.billing.models import Subscription

logger = logging.getLogger(__name__)


@shared_task(bind=True, ignore_result=True, name='billing.tasks.sweep_billing_states')
def sweep_billing_states(self):
    from apps.billing.services import SubscriptionService
    from .email_tasks import send_suspension_notice

    now = timezone.now()
    logger.info('[sweep_billing_states] Running at %s', now.isoformat())

    candidates = (
        Subscription.objects
        .select_related('organization')
        .exclude(billing_state=Subscription.STATE_SUSPENDED)
    )

    stats = {
        'at': now.isoformat(),
        'processed': 0,
        'suspended': 0,
        'errors': 0,
    }

    for subscription in candidates.iterator():
        stats['processed'] += 1
        try:
            suspended = SubscriptionService.sync_billing_state(subscription, now=now)
        except Exception:
            stats['errors'] += 1
            logger.exception('billing_sweep_failed subscription=%s', subscription.pk)
            continue
        if suspended:
            stats['suspended'] += 1
            send_suspension_notice.delay(str(subscription.pk))

    logger.info('[sweep_billing_states] Complete: %s', stats)
    return stats
