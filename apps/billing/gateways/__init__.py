from apps.core.exceptions import ValidationException

from .base import GatewayResult, PaymentGateway
from .flutterwave import FlutterwaveGateway
from .mpesa import MpesaGateway

_GATEWAYS = {
    MpesaGateway.provider: MpesaGateway,
    FlutterwaveGateway.provider: FlutterwaveGateway,
}


def get_gateway(provider, session=None):
    try:
        gateway_class = _GATEWAYS[(provider or '').upper()]
    except KeyError:
        raise ValidationException(f"Unsupported payment provider: {provider}", field='provider')
    return gateway_class(session=session)


__all__ = ['GatewayResult', 'PaymentGateway', 'MpesaGateway', 'FlutterwaveGateway', 'get_gateway']
