from .payment_service import PaymentService
from .subscription_service import SubscriptionService
from .usage_service import SeatUsage, UsageService

__all__ = [
    'PaymentService',
    'SeatUsage',
    'SubscriptionService',
    'UsageService',
]
