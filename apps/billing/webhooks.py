"""
Payment provider webhooks for server-to-server settlement.

Endpoints:
  POST /api/v1/billing/webhooks/mpesa/<token>/     (Daraja STK callback)
  POST /api/v1/billing/webhooks/flutterwave/       (verif-hash header)
"""

import hmac
import json
import logging

from django.conf import settings
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.billing.models import PaymentRecord
from apps.billing.services import PaymentService
from apps.core.exceptions import ResourceNotFoundException

logger = logging.getLogger(__name__)

MPESA_RESULT_SUCCESS = 0
MPESA_RESULT_CANCELLED = 1032


def _secure_equals(expected, received):
    return hmac.compare_digest(
        (expected or '').encode('utf-8'), (received or '').encode('utf-8'),
    )


class ProviderWebhookView(View):
    """Common parsing and dispatch for provider callbacks."""

    http_method_names = ["post"]
    provider = None

    def _parse(self, request):
        try:
            return json.loads(request.body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None

    def _confirm(self, **kwargs):
        try:
            PaymentService.confirm_payment(self.provider, **kwargs)
        except ResourceNotFoundException:
            logger.warning(
                "webhook_unknown_reference provider=%s reference=%s",
                self.provider, kwargs.get('provider_reference'),
            )


@method_decorator(csrf_exempt, name="dispatch")
class MpesaCallbackView(ProviderWebhookView):
    """
    Receives Daraja STK push results.

    The callback URL embeds a shared token because Daraja does not sign
    its callbacks.
    """

    provider = PaymentRecord.PROVIDER_MPESA

    def post(self, request, token):
        expected = getattr(settings, "MPESA_CALLBACK_TOKEN", "")
        if not expected:
            logger.error("mpesa_webhook_no_token configured")
            return JsonResponse({"error": "Webhook not configured"}, status=500)

        if not _secure_equals(expected, token):
            logger.warning("mpesa_webhook_token_invalid")
            return JsonResponse({"error": "Invalid token"}, status=400)

        payload = self._parse(request)
        callback = ((payload or {}).get("Body") or {}).get("stkCallback")
        if not isinstance(callback, dict):
            return JsonResponse({"error": "Invalid payload"}, status=400)

        checkout_id = callback.get("CheckoutRequestID", "")
        result_code = callback.get("ResultCode")
        logger.info(
            "mpesa_webhook checkout_request_id=%s result_code=%s", checkout_id, result_code,
        )

        try:
            self._handle_result(callback, payload)
        except Exception:
            logger.exception("mpesa_webhook_handler_error checkout_request_id=%s", checkout_id)
            return JsonResponse({"error": "Processing error"}, status=500)

        return JsonResponse({"ResultCode": 0, "ResultDesc": "Accepted"})

    def _handle_result(self, callback, payload):
        try:
            result_code = int(callback.get("ResultCode"))
        except (TypeError, ValueError):
            result_code = -1

        success = result_code == MPESA_RESULT_SUCCESS
        self._confirm(
            provider_reference=callback.get("CheckoutRequestID", ""),
            success=success,
            transaction_id=self._receipt(callback) if success else "",
            failure_reason="" if success else callback.get("ResultDesc", ""),
            cancelled=result_code == MPESA_RESULT_CANCELLED,
            payload=payload,
        )

    @staticmethod
    def _receipt(callback):
        items = (callback.get("CallbackMetadata") or {}).get("Item") or []
        for item in items:
            if item.get("Name") == "MpesaReceiptNumber":
                return str(item.get("Value", ""))
        return ""


@method_decorator(csrf_exempt, name="dispatch")
class FlutterwaveWebhookView(ProviderWebhookView):
    """
    Receives Flutterwave events.

    Expected headers:
      verif-hash: <secret hash configured on the Flutterwave dashboard>

    Supported events:
      - charge.completed
    """

    provider = PaymentRecord.PROVIDER_FLUTTERWAVE

    def post(self, request):
        secret_hash = getattr(settings, "FLUTTERWAVE_SECRET_HASH", "")
        if not secret_hash:
            logger.error("flutterwave_webhook_no_secret configured")
            return JsonResponse({"error": "Webhook not configured"}, status=500)

        if not _secure_equals(secret_hash, request.headers.get("verif-hash", "")):
            logger.warning("flutterwave_webhook_signature_invalid")
            return JsonResponse({"error": "Invalid signature"}, status=400)

        payload = self._parse(request)
        if not isinstance(payload, dict):
            return JsonResponse({"error": "Invalid JSON"}, status=400)

        event = payload.get("event", "")
        data = payload.get("data") or {}
        logger.info(
            "flutterwave_webhook event=%s tx_ref=%s status=%s",
            event, data.get("tx_ref"), data.get("status"),
        )

        handler = {
            "charge.completed": self._handle_charge_completed,
        }.get(event)

        if handler:
            try:
                handler(data, payload)
            except Exception:
                logger.exception("flutterwave_webhook_handler_error event=%s", event)
                return JsonResponse({"error": "Processing error"}, status=500)

        return JsonResponse({"status": "ok"})

    def _handle_charge_completed(self, data, payload):
        status = (data.get("status") or "").lower()
        success = status == "successful"
        self._confirm(
            provider_reference=data.get("tx_ref", ""),
            success=success,
            transaction_id=str(data.get("id", "")) if success else "",
            failure_reason="" if success else data.get("processor_response", status),
            cancelled=status == "cancelled",
            payload=payload,
        )
