"""
Billing state engine.

``evaluate_billing_state`` derives the effective billing state of a
subscription at a point in time. It reads attributes only and never writes,
so it can be called on model instances, unsaved copies or plain objects.
"""
import math
from dataclasses import asdict, dataclass
from datetime import timedelta
from typing import Optional

STATE_TRIAL = 'TRIAL'
STATE_ACTIVE = 'ACTIVE'
STATE_SUSPENDED = 'SUSPENDED'

REASON_TRIAL_EXPIRED = 'trial_expired'
REASON_PAYMENT_OVERDUE = 'payment_overdue'

SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class BillingStatus:
    state: str
    days_remaining: int
    is_trial_expired: bool = False
    is_payment_due: bool = False
    suspension_reason: Optional[str] = None

    @property
    def is_suspended(self):
        return self.state == STATE_SUSPENDED

    def as_dict(self):
        return asdict(self)


def days_until(end, now):
    """Whole days left until ``end``, rounded up and never negative."""
    if end is None or now is None:
        return 0
    seconds = (end - now).total_seconds()
    if seconds <= 0:
        return 0
    return math.ceil(seconds / SECONDS_PER_DAY)


def evaluate_billing_state(subscription, now, grace_period_days=0):
    stored_state = getattr(subscription, 'billing_state', None)
    trial_ends_at = getattr(subscription, 'trial_ends_at', None)
    trial_started_at = getattr(subscription, 'trial_started_at', None)
    period_end = getattr(subscription, 'current_period_end', None)
    period_start = getattr(subscription, 'current_period_start', None)
    has_paid = getattr(subscription, 'last_payment_date', None) is not None
    grace = timedelta(days=max(grace_period_days or 0, 0))

    if stored_state == STATE_SUSPENDED:
        return BillingStatus(
            state=STATE_SUSPENDED,
            days_remaining=0,
            is_trial_expired=not has_paid and trial_ends_at is not None and now >= trial_ends_at,
            is_payment_due=True,
            suspension_reason=getattr(subscription, 'suspension_reason', None) or None,
        )

    # Inverted windows are treated as already elapsed
    if trial_ends_at and trial_started_at and trial_ends_at < trial_started_at:
        trial_ends_at = trial_started_at
    if period_end and period_start and period_end < period_start:
        period_end = period_start

    if not has_paid:
        if trial_ends_at is None or now < trial_ends_at:
            return BillingStatus(
                state=STATE_TRIAL,
                days_remaining=days_until(trial_ends_at, now),
            )
        if now < trial_ends_at + grace:
            return BillingStatus(state=STATE_TRIAL, days_remaining=0, is_trial_expired=True)
        return BillingStatus(
            state=STATE_SUSPENDED,
            days_remaining=0,
            is_trial_expired=True,
            is_payment_due=True,
            suspension_reason=REASON_TRIAL_EXPIRED,
        )

    days_remaining = days_until(period_end, now)
    if period_end is None or now < period_end:
        return BillingStatus(
            state=STATE_ACTIVE,
            days_remaining=days_remaining,
            is_payment_due=days_remaining <= 0,
        )

    if getattr(subscription, 'auto_pay_enabled', False) or now < period_end + grace:
        return BillingStatus(state=STATE_ACTIVE, days_remaining=0, is_payment_due=True)

    return BillingStatus(
        state=STATE_SUSPENDED,
        days_remaining=0,
        is_payment_due=True,
        suspension_reason=REASON_PAYMENT_OVERDUE,
    )
