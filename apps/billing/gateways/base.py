"""Shared payment gateway contract"""
import logging
from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings

from apps.core.exceptions import ProviderException, TransientException

logger = logging.getLogger(__name__)


@dataclass
class GatewayResult:
    success: bool
    message: str
    provider_reference: Optional[str] = None
    payment_link: Optional[str] = None


class PaymentGateway:
    """Base class for provider clients. Subclasses implement ``initiate``."""

    provider = None

    def __init__(self, session=None):
        self.session = session or requests.Session()

    @property
    def timeout(self):
        return getattr(settings, 'PAYMENT_GATEWAY_TIMEOUT', 30)

    def validate_contact(self, contact):
        """Return the normalised contact or raise ``ValidationException``."""
        raise NotImplementedError

    def initiate(self, *, organization, contact, amount_cents, plan):
        raise NotImplementedError

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------
    def _request(self, method, url, **kwargs):
        kwargs.setdefault('timeout', self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except (requests.Timeout, requests.ConnectionError) as exc:
            logger.warning("gateway_transient_error provider=%s url=%s error=%s", self.provider, url, exc)
            raise TransientException(
                "Could not reach the payment provider. Please try again in a moment."
            ) from exc
        except requests.RequestException as exc:
            logger.error("gateway_request_error provider=%s url=%s error=%s", self.provider, url, exc)
            raise ProviderException(str(exc), provider=self.provider) from exc

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 500:
            logger.warning(
                "gateway_server_error provider=%s status=%s", self.provider, response.status_code,
            )
            raise TransientException(
                "The payment provider is temporarily unavailable. Please try again."
            )
        if response.status_code >= 400:
            message = self._error_message(body) or f"Request failed with status {response.status_code}"
            logger.warning(
                "gateway_rejected provider=%s status=%s message=%s",
                self.provider, response.status_code, message,
            )
            raise ProviderException(message, provider=self.provider)
        return body

    @staticmethod
    def _error_message(body):
        if not isinstance(body, dict):
            return ''
        return body.get('errorMessage') or body.get('message') or ''
