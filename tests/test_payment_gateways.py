"""
Gateway clients against a mocked requests session
"""
from unittest import mock

import requests
from django.test import TestCase, override_settings

from apps.billing.gateways import FlutterwaveGateway, MpesaGateway, get_gateway
from apps.billing.models import PaymentRecord
from apps.billing.services import PaymentService
from apps.core.exceptions import ProviderException, TransientException, ValidationException
from apps.staff.models import StaffMember

from .factories import OrganizationFactory, make_context, make_member


def fake_response(status_code=200, body=None):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = body if body is not None else {}
    return response


MPESA_SETTINGS = dict(
    MPESA_CONSUMER_KEY='key',
    MPESA_CONSUMER_SECRET='secret',
    MPESA_PASSKEY='passkey',
    MPESA_SHORTCODE='174379',
    MPESA_ENVIRONMENT='sandbox',
    MPESA_CALLBACK_URL='https://api.example.test/api/v1/billing/webhooks/mpesa',
    MPESA_CALLBACK_TOKEN='tok',
)


@override_settings(**MPESA_SETTINGS)
class MpesaGatewayTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        self.session = mock.Mock()

    def test_stk_push_sends_msisdn_and_callback(self):
        self.session.request.side_effect = [
            fake_response(body={'access_token': 'abc', 'expires_in': '3599'}),
            fake_response(body={'ResponseCode': '0', 'CheckoutRequestID': 'ws_CO_1'}),
        ]
        result = MpesaGateway(session=self.session).initiate(
            organization=self.organization, contact='0712 345 678', amount_cents=1500000, plan='PROFESSIONAL',
        )

        self.assertTrue(result.success)
        self.assertEqual(result.provider_reference, 'ws_CO_1')
        self.assertIn('KES 15,000', result.message)

        auth_call, push_call = self.session.request.call_args_list
        self.assertEqual(auth_call.args[0], 'GET')
        self.assertEqual(auth_call.kwargs['auth'], ('key', 'secret'))
        payload = push_call.kwargs['json']
        self.assertEqual(payload['PhoneNumber'], '254712345678')
        self.assertEqual(payload['Amount'], 15000)
        self.assertEqual(payload['CallBackURL'], 'https://api.example.test/api/v1/billing/webhooks/mpesa/tok/')
        self.assertEqual(push_call.kwargs['headers']['Authorization'], 'Bearer abc')

    def test_rejected_push_raises_provider_error(self):
        self.session.request.side_effect = [
            fake_response(body={'access_token': 'abc'}),
            fake_response(body={'ResponseCode': '1', 'ResponseDescription': 'Invalid shortcode'}),
        ]
        with self.assertRaises(ProviderException) as caught:
            MpesaGateway(session=self.session).initiate(
                organization=self.organization, contact='+254712345678', amount_cents=800000, plan='ESSENTIAL',
            )
        self.assertEqual(caught.exception.message, 'Invalid shortcode')

    def test_timeout_is_transient(self):
        self.session.request.side_effect = requests.Timeout('read timed out')
        with self.assertRaises(TransientException):
            MpesaGateway(session=self.session).get_access_token()

    def test_server_error_is_transient(self):
        self.session.request.return_value = fake_response(503)
        with self.assertRaises(TransientException):
            MpesaGateway(session=self.session).get_access_token()

    def test_client_error_is_provider_error(self):
        self.session.request.return_value = fake_response(400, {'errorMessage': 'Invalid credentials'})
        with self.assertRaises(ProviderException) as caught:
            MpesaGateway(session=self.session).get_access_token()
        self.assertEqual(caught.exception.message, 'Invalid credentials')

    def test_landline_is_not_accepted(self):
        with self.assertRaises(ValidationException):
            MpesaGateway(session=self.session).validate_contact('020 123 4567')
        self.session.request.assert_not_called()

    @override_settings(MPESA_CONSUMER_KEY='')
    def test_unconfigured_credentials(self):
        with self.assertRaises(ProviderException):
            MpesaGateway(session=self.session).get_access_token()
        self.session.request.assert_not_called()

    def test_password_is_base64_of_shortcode_passkey_timestamp(self):
        self.assertEqual(
            MpesaGateway.build_password('174379', 'pk', '20250101120000'),
            'MTc0Mzc5cGsyMDI1MDEwMTEyMDAwMA==',
        )


@override_settings(FLUTTERWAVE_SECRET_KEY='FLWSECK_TEST-x', FLUTTERWAVE_API_URL='https://api.flutterwave.test/v3')
class FlutterwaveGatewayTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        self.session = mock.Mock()

    def test_checkout_link_returned(self):
        self.session.request.return_value = fake_response(
            body={'status': 'success', 'data': {'link': 'https://checkout.flutterwave.test/pay/x'}},
        )
        result = FlutterwaveGateway(session=self.session).initiate(
            organization=self.organization, contact='owner@clinic.co.ke', amount_cents=800000, plan='ESSENTIAL',
        )
        self.assertEqual(result.payment_link, 'https://checkout.flutterwave.test/pay/x')
        self.assertTrue(result.provider_reference.startswith(f'HURE-{self.organization.id}-'))

        method, url = self.session.request.call_args.args
        self.assertEqual((method, url), ('POST', 'https://api.flutterwave.test/v3/payments'))
        payload = self.session.request.call_args.kwargs['json']
        self.assertEqual(payload['amount'], 8000)
        self.assertEqual(payload['currency'], 'KES')

    def test_invalid_email(self):
        with self.assertRaises(ValidationException):
            FlutterwaveGateway(session=self.session).validate_contact('not-an-email')

    def test_missing_link_is_provider_error(self):
        self.session.request.return_value = fake_response(body={'status': 'error', 'message': 'Invalid amount'})
        with self.assertRaises(ProviderException):
            FlutterwaveGateway(session=self.session).initiate(
                organization=self.organization, contact='owner@clinic.co.ke', amount_cents=1, plan='ESSENTIAL',
            )


@override_settings(**MPESA_SETTINGS)
class InitiatePaymentServiceTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        _, owner = make_member(self.organization, StaffMember.ROLE_OWNER)
        self.ctx = make_context(owner)
        self.session = mock.Mock()

    def test_pending_record_stores_provider_reference(self):
        self.session.request.side_effect = [
            fake_response(body={'access_token': 'abc'}),
            fake_response(body={'ResponseCode': '0', 'CheckoutRequestID': 'ws_CO_9'}),
        ]
        payment, result = PaymentService.initiate(self.ctx, 'mpesa', '0712345678', session=self.session)
        self.assertEqual(payment.status, PaymentRecord.STATUS_PENDING)
        self.assertEqual(payment.provider_reference, 'ws_CO_9')
        self.assertEqual(payment.contact, '254712345678')
        self.assertEqual(payment.amount_cents, 1500000)

    def test_provider_failure_marks_record_failed(self):
        self.session.request.side_effect = requests.ConnectionError('dns')
        with self.assertRaises(TransientException):
            PaymentService.initiate(self.ctx, 'MPESA', '0712345678', session=self.session)
        payment = PaymentRecord.objects.get(organization=self.organization)
        self.assertEqual(payment.status, PaymentRecord.STATUS_FAILED)

    def test_get_gateway_is_case_insensitive(self):
        self.assertIsInstance(get_gateway('flutterwave'), FlutterwaveGateway)
