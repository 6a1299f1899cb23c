"""Billing tasks package – re-exports for Celery auto-discovery."""
from .billing_sweep_task import sweep_billing_states
from .email_tasks import send_suspension_notice

__all__ = [
    'sweep_billing_states',
    'send_suspension_notice',
]
