"""Seed default leave types for new organizations."""
import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.core.models import Organization

from .services import seed_default_leave_types

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Organization)
def seed_leave_types(sender, instance, created, **kwargs):
    if created:
        try:
            seed_default_leave_types(instance)
        except Exception:
            logger.exception('Failed to seed leave types for %s', instance)
