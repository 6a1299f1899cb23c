"""
Subscription lifecycle, payment confirmation and the daily sweep
"""
from datetime import timedelta
from unittest import mock

from django.core import mail
from django.test import TestCase, override_settings
from django.utils import timezone

from apps.billing.models import BillingLog, PaymentRecord, Subscription
from apps.billing.services import PaymentService, SubscriptionService
from apps.billing.tasks import sweep_billing_states
from apps.core.exceptions import PermissionDeniedException, ResourceNotFoundException, ValidationException
from apps.core.models import Organization
from apps.staff.models import StaffMember

from .factories import LocationFactory, OrganizationFactory, make_context, make_member


class TrialProvisioningTests(TestCase):

    def test_new_organization_gets_trial(self):
        organization = OrganizationFactory()
        subscription = Subscription.objects.get(organization=organization)
        self.assertEqual(subscription.billing_state, Subscription.STATE_TRIAL)
        self.assertEqual(subscription.payment_mode, Subscription.MODE_PAY_AS_YOU_GO)
        self.assertFalse(subscription.auto_pay_enabled)
        self.assertEqual(subscription.amount_cents, 1500000)
        self.assertEqual(subscription.trial_ends_at - subscription.trial_started_at, timedelta(days=10))
        self.assertTrue(
            BillingLog.objects.filter(subscription=subscription, event_type=BillingLog.EVENT_TRIAL_START).exists()
        )

    def test_create_trial_is_idempotent(self):
        organization = OrganizationFactory()
        first = Subscription.objects.get(organization=organization)
        again = SubscriptionService.create_trial(organization)
        self.assertEqual(first.pk, again.pk)
        self.assertEqual(Subscription.objects.filter(organization=organization).count(), 1)

    def test_status_without_subscription_defaults_to_trial(self):
        organization = OrganizationFactory()
        with mock.patch.object(SubscriptionService, 'get_subscription', return_value=None):
            status = SubscriptionService.get_billing_status(organization)
        self.assertEqual(status.state, Subscription.STATE_TRIAL)
        self.assertEqual(status.days_remaining, 10)


class PaymentProcessingTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        self.subscription = Subscription.objects.get(organization=self.organization)
        self.payment = PaymentRecord.objects.create(
            organization=self.organization,
            subscription=self.subscription,
            plan=self.subscription.plan,
            amount_cents=self.subscription.amount_cents,
            provider=PaymentRecord.PROVIDER_MPESA,
            provider_reference='ws_CO_123',
        )

    def test_successful_payment_activates_for_one_cycle(self):
        subscription = SubscriptionService.process_successful_payment(self.payment, 'MPESA', 'QK12ABC')
        self.assertEqual(subscription.billing_state, Subscription.STATE_ACTIVE)
        self.assertEqual(
            subscription.current_period_end - subscription.current_period_start, timedelta(days=31),
        )
        self.assertEqual(subscription.next_billing_date, subscription.current_period_end)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentRecord.STATUS_COMPLETED)
        self.assertEqual(self.payment.provider_transaction_id, 'QK12ABC')

    def test_processing_twice_is_a_noop(self):
        SubscriptionService.process_successful_payment(self.payment, 'MPESA', 'QK12ABC')
        SubscriptionService.process_successful_payment(self.payment, 'MPESA', 'QK12ABC')
        self.assertEqual(
            BillingLog.objects.filter(event_type=BillingLog.EVENT_PAYMENT_RECEIVED).count(), 1,
        )

    def test_payment_reactivates_suspended_subscription(self):
        SubscriptionService.update_billing_state(self.subscription, Subscription.STATE_SUSPENDED)
        self.organization.refresh_from_db()
        self.assertEqual(self.organization.account_status, Organization.ACCOUNT_SUSPENDED)

        subscription = SubscriptionService.process_successful_payment(self.payment)
        self.assertEqual(subscription.billing_state, Subscription.STATE_ACTIVE)
        self.assertIsNotNone(subscription.reactivated_at)
        self.assertEqual(subscription.suspension_reason, '')
        self.organization.refresh_from_db()
        self.assertEqual(self.organization.account_status, Organization.ACCOUNT_ACTIVE)
        self.assertTrue(BillingLog.objects.filter(event_type=BillingLog.EVENT_REACTIVATION).exists())

    def test_confirmed_payment_for_another_plan_moves_subscription_to_it(self):
        payment = PaymentRecord.objects.create(
            organization=self.organization,
            subscription=self.subscription,
            plan='ENTERPRISE',
            amount_cents=2500000,
            provider=PaymentRecord.PROVIDER_MPESA,
            provider_reference='ws_CO_456',
        )
        PaymentService.confirm_payment('MPESA', 'ws_CO_456', True, transaction_id='QK99XYZ')

        self.subscription.refresh_from_db()
        self.organization.refresh_from_db()
        self.assertEqual(self.subscription.plan, 'ENTERPRISE')
        self.assertEqual(self.subscription.amount_cents, 2500000)
        self.assertEqual(self.subscription.billing_state, Subscription.STATE_ACTIVE)
        self.assertEqual(self.organization.plan, 'ENTERPRISE')
        log = BillingLog.objects.get(subscription=self.subscription, event_type=BillingLog.EVENT_PLAN_CHANGE)
        self.assertEqual(log.metadata, {'from_plan': 'PROFESSIONAL', 'to_plan': 'ENTERPRISE'})

    def test_payment_for_current_plan_logs_no_plan_change(self):
        SubscriptionService.process_successful_payment(self.payment)
        self.assertFalse(BillingLog.objects.filter(event_type=BillingLog.EVENT_PLAN_CHANGE).exists())

    def test_confirm_failure_marks_record(self):
        payment = PaymentService.confirm_payment(
            'MPESA', 'ws_CO_123', success=False, failure_reason='Request cancelled by user', cancelled=True,
        )
        self.assertEqual(payment.status, PaymentRecord.STATUS_CANCELLED)
        self.subscription.refresh_from_db()
        self.assertEqual(self.subscription.billing_state, Subscription.STATE_TRIAL)

    def test_confirm_unknown_reference(self):
        with self.assertRaises(ResourceNotFoundException):
            PaymentService.confirm_payment('MPESA', 'missing', success=True)

    def test_completed_payment_is_immutable(self):
        SubscriptionService.process_successful_payment(self.payment)
        self.payment.refresh_from_db()
        self.payment.amount_cents = 1
        from django.core.exceptions import ValidationError
        with self.assertRaises(ValidationError):
            self.payment.save()
        with self.assertRaises(ValidationError):
            self.payment.delete()

    def test_billing_log_is_write_once(self):
        log = BillingLog.objects.filter(subscription=self.subscription).first()
        from django.core.exceptions import ValidationError
        with self.assertRaises(ValidationError):
            log.save()


class SweepTaskTests(TestCase):

    def test_sweep_persists_expired_trials_only(self):
        expired = OrganizationFactory()
        fresh = OrganizationFactory()
        Subscription.objects.filter(organization=expired).update(
            trial_started_at=timezone.now() - timedelta(days=12),
            trial_ends_at=timezone.now() - timedelta(days=2),
        )

        stats = sweep_billing_states.apply().get()

        self.assertEqual(stats['processed'], 2)
        self.assertEqual(stats['suspended'], 1)
        self.assertEqual(
            Subscription.objects.get(organization=expired).billing_state, Subscription.STATE_SUSPENDED,
        )
        self.assertEqual(
            Subscription.objects.get(organization=fresh).billing_state, Subscription.STATE_TRIAL,
        )
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('suspended', mail.outbox[0].subject)

    def test_sweep_is_idempotent(self):
        organization = OrganizationFactory()
        Subscription.objects.filter(organization=organization).update(
            trial_ends_at=timezone.now() - timedelta(days=1),
        )
        sweep_billing_states.apply()
        stats = sweep_billing_states.apply().get()
        self.assertEqual(stats['suspended'], 0)
        self.assertEqual(
            BillingLog.objects.filter(organization=organization, event_type=BillingLog.EVENT_SUSPENSION).count(), 1,
        )


class AdminActionTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        _, self.owner = make_member(self.organization, StaffMember.ROLE_OWNER)
        _, self.employee = make_member(self.organization)
        self.ctx = make_context(self.owner)

    def test_payment_mode_toggles_auto_pay(self):
        subscription = SubscriptionService.update_payment_mode(self.ctx, Subscription.MODE_AUTO_PAY)
        self.assertTrue(subscription.auto_pay_enabled)
        subscription = SubscriptionService.update_payment_mode(self.ctx, Subscription.MODE_PAY_AS_YOU_GO)
        self.assertFalse(subscription.auto_pay_enabled)

    def test_employee_cannot_change_payment_mode(self):
        with self.assertRaises(PermissionDeniedException):
            SubscriptionService.update_payment_mode(make_context(self.employee), Subscription.MODE_AUTO_PAY)

    def test_plan_change_updates_amount_and_logs(self):
        subscription = SubscriptionService.change_plan(self.ctx, 'enterprise')
        self.assertEqual(subscription.plan, 'ENTERPRISE')
        self.assertEqual(subscription.amount_cents, 2500000)
        self.organization.refresh_from_db()
        self.assertEqual(self.organization.plan, 'ENTERPRISE')
        self.assertTrue(BillingLog.objects.filter(event_type=BillingLog.EVENT_PLAN_CHANGE).exists())

    def test_downgrade_refused_when_usage_exceeds_limits(self):
        LocationFactory(organization=self.organization)
        LocationFactory(organization=self.organization)
        with self.assertRaises(ValidationException) as caught:
            SubscriptionService.change_plan(self.ctx, 'ESSENTIAL')
        self.assertIn('locations', caught.exception.extra['exceeded'])

    def test_unknown_plan_rejected(self):
        with self.assertRaises(ValidationException):
            SubscriptionService.change_plan(self.ctx, 'PLATINUM')


class DevModeTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        _, owner = make_member(self.organization, StaffMember.ROLE_OWNER)
        self.ctx = make_context(owner)

    @override_settings(BILLING_DEV_MODE=False)
    def test_simulation_unreachable_outside_dev_mode(self):
        with self.assertRaises(PermissionDeniedException):
            PaymentService.simulate_payment(self.ctx)
        with self.assertRaises(PermissionDeniedException):
            SubscriptionService.dev_simulate_suspension(self.ctx)
        with self.assertRaises(PermissionDeniedException):
            SubscriptionService.dev_reset_to_trial(self.ctx)
        self.assertFalse(PaymentRecord.objects.filter(provider=PaymentRecord.PROVIDER_SIMULATED).exists())

    @override_settings(BILLING_DEV_MODE=True)
    def test_simulated_payment_activates(self):
        payment, subscription = PaymentService.simulate_payment(self.ctx)
        self.assertEqual(payment.status, PaymentRecord.STATUS_COMPLETED)
        self.assertTrue(payment.provider_reference.startswith('TEST-'))
        self.assertEqual(subscription.billing_state, Subscription.STATE_ACTIVE)

    @override_settings(BILLING_DEV_MODE=True)
    def test_suspend_then_reset_to_trial(self):
        subscription = SubscriptionService.dev_simulate_suspension(self.ctx)
        self.assertEqual(subscription.billing_state, Subscription.STATE_SUSPENDED)
        subscription = SubscriptionService.dev_reset_to_trial(self.ctx)
        self.assertEqual(subscription.billing_state, Subscription.STATE_TRIAL)
        self.assertIsNone(subscription.last_payment_date)
        self.assertTrue(SubscriptionService.can_access_platform(self.organization))


class PaymentInitiationTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        _, owner = make_member(self.organization, StaffMember.ROLE_OWNER)
        self.ctx = make_context(owner)

    def test_invalid_phone_rejected_before_any_request(self):
        session = mock.Mock()
        with self.assertRaises(ValidationException):
            PaymentService.initiate(self.ctx, 'MPESA', '12345', session=session)
        session.request.assert_not_called()
        self.assertFalse(PaymentRecord.objects.exists())

    def test_unsupported_provider(self):
        with self.assertRaises(ValidationException):
            PaymentService.initiate(self.ctx, 'PAYPAL', 'a@b.co')

    def test_employee_cannot_initiate(self):
        _, employee = make_member(self.organization)
        with self.assertRaises(PermissionDeniedException):
            PaymentService.initiate(make_context(employee), 'MPESA', '0712345678')

    def test_payment_for_plan_below_current_usage_refused(self):
        LocationFactory(organization=self.organization)
        LocationFactory(organization=self.organization)
        session = mock.Mock()
        with self.assertRaises(ValidationException) as caught:
            PaymentService.initiate(self.ctx, 'MPESA', '0712345678', plan='ESSENTIAL', session=session)
        self.assertIn('locations', caught.exception.extra['exceeded'])
        session.request.assert_not_called()
        self.assertFalse(PaymentRecord.objects.exists())
