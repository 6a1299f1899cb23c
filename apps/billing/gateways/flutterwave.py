"""Flutterwave hosted checkout client"""
import logging
import time

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email

from apps.billing import config as billing_config
from apps.core.exceptions import ProviderException, ValidationException

from .base import GatewayResult, PaymentGateway

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://api.flutterwave.com/v3'


def build_tx_ref(organization_id):
    return f"HURE-{organization_id}-{int(time.time() * 1000)}"


class FlutterwaveGateway(PaymentGateway):
    provider = 'FLUTTERWAVE'

    def validate_contact(self, contact):
        email = (contact or '').strip()
        try:
            validate_email(email)
        except DjangoValidationError as exc:
            raise ValidationException('Enter a valid email address.', field='email') from exc
        return email

    @staticmethod
    def _api_url():
        return getattr(settings, 'FLUTTERWAVE_API_URL', DEFAULT_API_URL).rstrip('/')

    def initiate(self, *, organization, contact, amount_cents, plan):
        email = self.validate_contact(contact)
        if not billing_config.is_flutterwave_configured():
            raise ProviderException('Flutterwave payments are not configured.', provider=self.provider)

        tx_ref = build_tx_ref(organization.id)
        payload = {
            'tx_ref': tx_ref,
            'amount': amount_cents / 100,
            'currency': billing_config.currency(),
            'redirect_url': getattr(settings, 'FLUTTERWAVE_REDIRECT_URL', ''),
            'customer': {'email': email, 'name': organization.name},
            'customizations': {'title': 'HURE Core subscription'},
            'meta': {'organization_id': str(organization.id), 'plan': plan},
        }
        body = self._request(
            'POST',
            f"{self._api_url()}/payments",
            json=payload,
            headers={'Authorization': f'Bearer {settings.FLUTTERWAVE_SECRET_KEY}'},
        )

        link = (body.get('data') or {}).get('link')
        if body.get('status') != 'success' or not link:
            raise ProviderException(
                body.get('message') or 'Flutterwave could not create a checkout link.',
                provider=self.provider,
            )

        logger.info("flutterwave_checkout_created org=%s plan=%s tx_ref=%s", organization.id, plan, tx_ref)
        return GatewayResult(
            success=True,
            message=f"Redirecting to Flutterwave checkout for {billing_config.format_kes(amount_cents)}...",
            provider_reference=tx_ref,
            payment_link=link,
        )
