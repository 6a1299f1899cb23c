"""
Signal handlers for subscription automation.

 - Trial auto-provisioned on Organization creation
"""
import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.core.models import Organization

from .services import SubscriptionService

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Organization)
def ensure_trial_subscription(sender, instance, created, **kwargs):
    """Provision the trial for every newly created organization."""
    if created:
        try:
            SubscriptionService.create_trial(instance)
        except Exception:
            logger.exception('Failed to create trial subscription for %s', instance)
