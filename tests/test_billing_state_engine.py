"""
Billing state engine and access gate
====================================
Pure evaluation: no database access.
"""
from datetime import datetime, timedelta, timezone as dt_timezone
from types import SimpleNamespace

from django.test import SimpleTestCase

from apps.billing.access import AppArea, evaluate_access, evaluate_unavailable
from apps.billing.state_engine import (
    REASON_PAYMENT_OVERDUE,
    REASON_TRIAL_EXPIRED,
    STATE_ACTIVE,
    STATE_SUSPENDED,
    STATE_TRIAL,
    days_until,
    evaluate_billing_state,
)

D0 = datetime(2025, 3, 1, 0, 0, tzinfo=dt_timezone.utc)


def trial_subscription(**overrides):
    fields = dict(
        billing_state=STATE_TRIAL,
        trial_started_at=D0,
        trial_ends_at=D0 + timedelta(days=10),
        current_period_start=None,
        current_period_end=None,
        last_payment_date=None,
        auto_pay_enabled=False,
        suspension_reason='',
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def paid_subscription(period_end, **overrides):
    fields = dict(
        billing_state=STATE_ACTIVE,
        current_period_start=period_end - timedelta(days=31),
        current_period_end=period_end,
        last_payment_date=period_end - timedelta(days=31),
    )
    fields.update(overrides)
    return trial_subscription(**fields)


class TrialWindowTests(SimpleTestCase):

    def test_last_minute_of_trial_has_one_day_left(self):
        status = evaluate_billing_state(trial_subscription(), D0 + timedelta(days=9, hours=23, minutes=59))
        self.assertEqual(status.state, STATE_TRIAL)
        self.assertEqual(status.days_remaining, 1)
        self.assertFalse(status.is_trial_expired)

    def test_trial_expires_without_payment(self):
        status = evaluate_billing_state(trial_subscription(), D0 + timedelta(days=10, minutes=1))
        self.assertEqual(status.state, STATE_SUSPENDED)
        self.assertTrue(status.is_trial_expired)
        self.assertTrue(status.is_payment_due)
        self.assertEqual(status.suspension_reason, REASON_TRIAL_EXPIRED)

    def test_trial_days_remaining_never_negative(self):
        for hours in (0, 1, 47, 239):
            status = evaluate_billing_state(trial_subscription(), D0 + timedelta(hours=hours))
            self.assertEqual(status.state, STATE_TRIAL)
            self.assertGreaterEqual(status.days_remaining, 0)

    def test_grace_period_keeps_expired_trial_open(self):
        status = evaluate_billing_state(
            trial_subscription(), D0 + timedelta(days=11), grace_period_days=2,
        )
        self.assertEqual(status.state, STATE_TRIAL)
        self.assertTrue(status.is_trial_expired)

    def test_inverted_trial_window_is_elapsed(self):
        subscription = trial_subscription(trial_ends_at=D0 - timedelta(days=1))
        status = evaluate_billing_state(subscription, D0 + timedelta(minutes=1))
        self.assertEqual(status.state, STATE_SUSPENDED)


class PaidPeriodTests(SimpleTestCase):
    D1 = D0 + timedelta(days=40)

    def test_day_before_period_end_is_not_due(self):
        status = evaluate_billing_state(paid_subscription(self.D1), self.D1 - timedelta(days=1))
        self.assertEqual(status.state, STATE_ACTIVE)
        self.assertFalse(status.is_payment_due)
        self.assertEqual(status.days_remaining, 1)

    def test_hour_after_period_end_is_due(self):
        status = evaluate_billing_state(paid_subscription(self.D1), self.D1 + timedelta(hours=1))
        self.assertTrue(status.is_payment_due)
        self.assertEqual(status.state, STATE_SUSPENDED)
        self.assertEqual(status.suspension_reason, REASON_PAYMENT_OVERDUE)

    def test_auto_pay_stays_active_when_due(self):
        subscription = paid_subscription(self.D1, auto_pay_enabled=True)
        status = evaluate_billing_state(subscription, self.D1 + timedelta(hours=1))
        self.assertEqual(status.state, STATE_ACTIVE)
        self.assertTrue(status.is_payment_due)


class StickinessTests(SimpleTestCase):

    def test_stored_suspension_wins_over_open_windows(self):
        subscription = paid_subscription(
            D0 + timedelta(days=60),
            billing_state=STATE_SUSPENDED,
            suspension_reason='Non-payment',
        )
        status = evaluate_billing_state(subscription, D0 + timedelta(days=31))
        self.assertEqual(status.state, STATE_SUSPENDED)
        self.assertEqual(status.days_remaining, 0)
        self.assertEqual(status.suspension_reason, 'Non-payment')

    def test_stored_suspension_during_trial(self):
        subscription = trial_subscription(billing_state=STATE_SUSPENDED)
        status = evaluate_billing_state(subscription, D0 + timedelta(days=1))
        self.assertEqual(status.state, STATE_SUSPENDED)

    def test_evaluation_is_idempotent(self):
        subscription = trial_subscription()
        now = D0 + timedelta(days=4, hours=3)
        first = evaluate_billing_state(subscription, now)
        second = evaluate_billing_state(subscription, now)
        self.assertEqual(first, second)
        self.assertEqual(subscription.billing_state, STATE_TRIAL)


class DaysUntilTests(SimpleTestCase):

    def test_rounds_partial_days_up(self):
        self.assertEqual(days_until(D0 + timedelta(hours=1), D0), 1)
        self.assertEqual(days_until(D0 + timedelta(days=2, seconds=1), D0), 3)

    def test_past_and_missing_are_zero(self):
        self.assertEqual(days_until(D0 - timedelta(days=1), D0), 0)
        self.assertEqual(days_until(None, D0), 0)


class AccessGateTests(SimpleTestCase):

    def setUp(self):
        self.suspended = evaluate_billing_state(trial_subscription(), D0 + timedelta(days=30))
        self.trial = evaluate_billing_state(trial_subscription(), D0 + timedelta(days=1))

    def test_trial_opens_every_area(self):
        for area in AppArea.ALL:
            self.assertTrue(evaluate_access(self.trial, area, 'EMPLOYEE').allowed)

    def test_suspended_blocks_protected_area(self):
        decision = evaluate_access(self.suspended, AppArea.PROTECTED, 'OWNER')
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.notice, 'suspended_admin')
        self.assertTrue(decision.can_pay)

    def test_suspended_employee_gets_employer_notice(self):
        decision = evaluate_access(self.suspended, AppArea.PROTECTED, 'EMPLOYEE')
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.notice, 'suspended_employee')
        self.assertFalse(decision.can_pay)

    def test_billing_and_verification_stay_open(self):
        for area in AppArea.ALWAYS_OPEN:
            self.assertTrue(evaluate_access(self.suspended, area, 'EMPLOYEE').allowed)

    def test_unknown_area_is_protected(self):
        self.assertFalse(evaluate_access(self.suspended, 'reports', 'ADMIN').allowed)

    def test_unavailable_status_fails_closed_for_protected(self):
        self.assertFalse(evaluate_unavailable(AppArea.PROTECTED, 'OWNER').allowed)
        self.assertTrue(evaluate_unavailable(AppArea.BILLING, 'OWNER').allowed)
