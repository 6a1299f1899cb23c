"""
M-Pesa Daraja STK push client.

Settlement is asynchronous: Safaricom calls the STK callback URL once the
payer approves or cancels the prompt on their handset.
"""
import base64
import logging

from django.conf import settings
from django.utils import timezone

from apps.billing import config as billing_config
from apps.core.exceptions import ProviderException, ValidationException
from apps.core.phone import is_kenyan_mobile, significant_digits, to_msisdn

from .base import GatewayResult, PaymentGateway

logger = logging.getLogger(__name__)

MIN_PHONE_DIGITS = 9
TRANSACTION_TYPE = 'CustomerPayBillOnline'


class MpesaGateway(PaymentGateway):
    provider = 'MPESA'

    def validate_contact(self, contact):
        if len(significant_digits(contact)) < MIN_PHONE_DIGITS or not is_kenyan_mobile(contact):
            raise ValidationException('Invalid phone number format', field='phone')
        return to_msisdn(contact)

    @staticmethod
    def _credentials():
        if not billing_config.is_mpesa_configured():
            raise ProviderException('M-Pesa payments are not configured.', provider='MPESA')
        return settings.MPESA_CONSUMER_KEY, settings.MPESA_CONSUMER_SECRET

    @staticmethod
    def _shortcode():
        return str(getattr(settings, 'MPESA_SHORTCODE', '174379'))

    @staticmethod
    def build_password(shortcode, passkey, timestamp):
        raw = f"{shortcode}{passkey}{timestamp}".encode('utf-8')
        return base64.b64encode(raw).decode('ascii')

    @staticmethod
    def callback_url():
        base = getattr(settings, 'MPESA_CALLBACK_URL', '').rstrip('/')
        token = getattr(settings, 'MPESA_CALLBACK_TOKEN', '')
        return f"{base}/{token}/" if token else f"{base}/"

    def get_access_token(self):
        consumer_key, consumer_secret = self._credentials()
        body = self._request(
            'GET',
            billing_config.mpesa_urls()['auth'],
            auth=(consumer_key, consumer_secret),
        )
        token = body.get('access_token')
        if not token:
            raise ProviderException('M-Pesa did not return an access token.', provider=self.provider)
        return token

    def initiate(self, *, organization, contact, amount_cents, plan):
        msisdn = self.validate_contact(contact)
        access_token = self.get_access_token()

        shortcode = self._shortcode()
        timestamp = timezone.localtime().strftime('%Y%m%d%H%M%S')
        payload = {
            'BusinessShortCode': shortcode,
            'Password': self.build_password(shortcode, settings.MPESA_PASSKEY, timestamp),
            'Timestamp': timestamp,
            'TransactionType': TRANSACTION_TYPE,
            'Amount': amount_cents // 100,
            'PartyA': msisdn,
            'PartyB': shortcode,
            'PhoneNumber': msisdn,
            'CallBackURL': self.callback_url(),
            'AccountReference': f"HURE-{plan}"[:12],
            'TransactionDesc': f"HURE {plan} subscription",
        }
        body = self._request(
            'POST',
            billing_config.mpesa_urls()['stk_push'],
            json=payload,
            headers={'Authorization': f'Bearer {access_token}'},
        )

        if str(body.get('ResponseCode')) != '0':
            message = body.get('ResponseDescription') or body.get('errorMessage') or 'STK push was rejected.'
            raise ProviderException(message, provider=self.provider)

        checkout_id = body.get('CheckoutRequestID')
        logger.info(
            "mpesa_stk_push_sent org=%s plan=%s checkout_request_id=%s",
            organization.id, plan, checkout_id,
        )
        return GatewayResult(
            success=True,
            message=(
                f"STK Push sent to {msisdn} for {billing_config.format_kes(amount_cents)}. "
                "Please enter your M-Pesa PIN to complete payment."
            ),
            provider_reference=checkout_id,
        )
