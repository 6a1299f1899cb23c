"""
Request middleware

- Correlation id per request (X-Correlation-ID), stored in a contextvar so
  every log record can carry it.
"""

import re
import uuid
import logging

from django.utils.deprecation import MiddlewareMixin

from .logging import set_correlation_id

logger = logging.getLogger(__name__)

HEADER_NAME = "X-Correlation-ID"
_VALID_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class CorrelationIdMiddleware(MiddlewareMixin):
    def process_request(self, request):
        incoming = request.headers.get(HEADER_NAME, "")
        correlation_id = incoming if _VALID_ID.match(incoming) else uuid.uuid4().hex
        request.correlation_id = correlation_id
        set_correlation_id(correlation_id)

    def process_response(self, request, response):
        correlation_id = getattr(request, "correlation_id", None)
        if correlation_id:
            response[HEADER_NAME] = correlation_id
        set_correlation_id(None)
        return response
