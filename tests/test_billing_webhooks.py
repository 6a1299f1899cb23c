"""
Provider webhooks
=================
  1. M-Pesa callbacks are authenticated by the token in the URL
  2. Flutterwave callbacks are authenticated by the verif-hash header
  3. Unknown references are acknowledged without side effects
"""
import json

from django.test import Client, TestCase, override_settings

from apps.billing.models import PaymentRecord, Subscription

from .factories import OrganizationFactory

CALLBACK_TOKEN = 'test-callback-token'
SECRET_HASH = 'test-secret-hash'


def stk_callback(checkout_id, result_code=0, receipt='QK12ABC345'):
    callback = {
        'MerchantRequestID': '29115-34620561-1',
        'CheckoutRequestID': checkout_id,
        'ResultCode': result_code,
        'ResultDesc': 'The service request is processed successfully.' if result_code == 0 else 'Request cancelled by user',
    }
    if result_code == 0:
        callback['CallbackMetadata'] = {
            'Item': [
                {'Name': 'Amount', 'Value': 15000},
                {'Name': 'MpesaReceiptNumber', 'Value': receipt},
                {'Name': 'PhoneNumber', 'Value': 254712345678},
            ]
        }
    return {'Body': {'stkCallback': callback}}


class WebhookTestBase(TestCase):
    provider = None
    reference = None

    def setUp(self):
        self.client = Client()
        self.organization = OrganizationFactory()
        self.subscription = Subscription.objects.get(organization=self.organization)
        self.payment = PaymentRecord.objects.create(
            organization=self.organization,
            subscription=self.subscription,
            plan=self.subscription.plan,
            amount_cents=self.subscription.amount_cents,
            provider=self.provider,
            provider_reference=self.reference,
        )

    def post_json(self, url, payload, **headers):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json', **headers)


@override_settings(MPESA_CALLBACK_TOKEN=CALLBACK_TOKEN)
class MpesaCallbackTests(WebhookTestBase):
    provider = PaymentRecord.PROVIDER_MPESA
    reference = 'ws_CO_191220191020363925'

    def url(self, token=CALLBACK_TOKEN):
        return f'/api/v1/billing/webhooks/mpesa/{token}/'

    def test_successful_callback_activates_subscription(self):
        response = self.post_json(self.url(), stk_callback(self.reference))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['ResultCode'], 0)

        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentRecord.STATUS_COMPLETED)
        self.assertEqual(self.payment.provider_transaction_id, 'QK12ABC345')
        self.subscription.refresh_from_db()
        self.assertEqual(self.subscription.billing_state, Subscription.STATE_ACTIVE)
        self.assertEqual(self.subscription.last_payment_provider, 'MPESA')

    def test_cancelled_prompt_marks_payment_cancelled(self):
        response = self.post_json(self.url(), stk_callback(self.reference, result_code=1032))
        self.assertEqual(response.status_code, 200)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentRecord.STATUS_CANCELLED)
        self.subscription.refresh_from_db()
        self.assertEqual(self.subscription.billing_state, Subscription.STATE_TRIAL)

    def test_other_failure_marks_payment_failed(self):
        self.post_json(self.url(), stk_callback(self.reference, result_code=1))
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentRecord.STATUS_FAILED)

    def test_wrong_token_rejected(self):
        response = self.post_json(self.url('forged'), stk_callback(self.reference))
        self.assertEqual(response.status_code, 400)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentRecord.STATUS_PENDING)

    @override_settings(MPESA_CALLBACK_TOKEN='')
    def test_unconfigured_token_refuses(self):
        response = self.post_json(self.url(), stk_callback(self.reference))
        self.assertEqual(response.status_code, 500)

    def test_malformed_payload(self):
        response = self.client.post(self.url(), data='not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)

    def test_unknown_reference_acknowledged(self):
        response = self.post_json(self.url(), stk_callback('ws_CO_unknown'))
        self.assertEqual(response.status_code, 200)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentRecord.STATUS_PENDING)

    def test_duplicate_callback_is_idempotent(self):
        self.post_json(self.url(), stk_callback(self.reference))
        self.subscription.refresh_from_db()
        period_end = self.subscription.current_period_end

        response = self.post_json(self.url(), stk_callback(self.reference))
        self.assertEqual(response.status_code, 200)
        self.subscription.refresh_from_db()
        self.assertEqual(self.subscription.current_period_end, period_end)

    def test_get_not_allowed(self):
        self.assertEqual(self.client.get(self.url()).status_code, 405)


@override_settings(FLUTTERWAVE_SECRET_HASH=SECRET_HASH)
class FlutterwaveWebhookTests(WebhookTestBase):
    provider = PaymentRecord.PROVIDER_FLUTTERWAVE
    reference = 'HURE-org-1700000000000'
    url = '/api/v1/billing/webhooks/flutterwave/'

    def event(self, status='successful', event='charge.completed'):
        return {
            'event': event,
            'data': {'id': 4975363, 'tx_ref': self.reference, 'status': status, 'amount': 15000},
        }

    def test_successful_charge_activates(self):
        response = self.post_json(self.url, self.event(), HTTP_VERIF_HASH=SECRET_HASH)
        self.assertEqual(response.status_code, 200)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentRecord.STATUS_COMPLETED)
        self.assertEqual(self.payment.provider_transaction_id, '4975363')
        self.subscription.refresh_from_db()
        self.assertEqual(self.subscription.billing_state, Subscription.STATE_ACTIVE)

    def test_failed_charge(self):
        self.post_json(self.url, self.event(status='failed'), HTTP_VERIF_HASH=SECRET_HASH)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentRecord.STATUS_FAILED)

    def test_bad_signature_rejected(self):
        response = self.post_json(self.url, self.event(), HTTP_VERIF_HASH='nope')
        self.assertEqual(response.status_code, 400)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentRecord.STATUS_PENDING)

    def test_missing_signature_rejected(self):
        response = self.post_json(self.url, self.event())
        self.assertEqual(response.status_code, 400)

    def test_unhandled_event_ignored(self):
        response = self.post_json(self.url, self.event(event='transfer.completed'), HTTP_VERIF_HASH=SECRET_HASH)
        self.assertEqual(response.status_code, 200)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentRecord.STATUS_PENDING)
