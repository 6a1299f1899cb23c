"""
Billing configuration accessors.

Values are read from Django settings at call time so that ``override_settings``
and per-environment settings modules take effect without re-imports.
"""
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

DEFAULT_TRIAL_DAYS = 10
DEFAULT_BILLING_CYCLE_DAYS = 31
DEFAULT_GRACE_PERIOD_DAYS = 0
DEFAULT_CURRENCY = 'KES'

MPESA_URLS = {
    'sandbox': {
        'auth': 'https://sandbox.safaricom.co.ke/oauth/v1/generate?grant_type=client_credentials',
        'stk_push': 'https://sandbox.safaricom.co.ke/mpesa/stkpush/v1/processrequest',
    },
    'production': {
        'auth': 'https://api.safaricom.co.ke/oauth/v1/generate?grant_type=client_credentials',
        'stk_push': 'https://api.safaricom.co.ke/mpesa/stkpush/v1/processrequest',
    },
}

DEFAULT_PLAN_LIMITS = {
    'ESSENTIAL': {
        'name': 'Essential',
        'max_locations': 1,
        'max_staff': 10,
        'max_admins': 2,
        'amount_cents': 800000,
        'features': ['Basic Scheduling', 'Attendance', 'CSV Exports'],
    },
    'PROFESSIONAL': {
        'name': 'Professional',
        'max_locations': 2,
        'max_staff': 30,
        'max_admins': 5,
        'amount_cents': 1500000,
        'features': ['Advanced Scheduling', 'Payroll mapping', 'Multiple Branches'],
    },
    'ENTERPRISE': {
        'name': 'Enterprise',
        'max_locations': 5,
        'max_staff': 75,
        'max_admins': 10,
        'amount_cents': 2500000,
        'features': ['API Access', 'Custom Roles', 'Dedicated Support'],
    },
}


@dataclass(frozen=True)
class PlanLimits:
    code: str
    name: str
    max_locations: int
    max_staff: int
    max_admins: int
    amount_cents: int

    def as_dict(self):
        return {
            'code': self.code,
            'name': self.name,
            'max_locations': self.max_locations,
            'max_staff': self.max_staff,
            'max_admins': self.max_admins,
            'amount_cents': self.amount_cents,
            'amount_display': format_kes(self.amount_cents),
        }


def trial_days():
    return getattr(settings, 'BILLING_TRIAL_DAYS', DEFAULT_TRIAL_DAYS)


def billing_cycle_days():
    return getattr(settings, 'BILLING_CYCLE_DAYS', DEFAULT_BILLING_CYCLE_DAYS)


def grace_period_days():
    return getattr(settings, 'BILLING_GRACE_PERIOD_DAYS', DEFAULT_GRACE_PERIOD_DAYS)


def currency():
    return getattr(settings, 'BILLING_CURRENCY', DEFAULT_CURRENCY)


def is_dev_mode():
    return bool(getattr(settings, 'BILLING_DEV_MODE', False))


def plan_table():
    return getattr(settings, 'BILLING_PLAN_LIMITS', None) or DEFAULT_PLAN_LIMITS


def plan_codes():
    return list(plan_table().keys())


def get_plan_limits(plan_code):
    """Return ``PlanLimits`` for a plan code; unknown codes raise ``KeyError``."""
    code = (plan_code or '').upper()
    row = plan_table()[code]
    return PlanLimits(
        code=code,
        name=row.get('name', code.title()),
        max_locations=row['max_locations'],
        max_staff=row['max_staff'],
        max_admins=row['max_admins'],
        amount_cents=row['amount_cents'],
    )


def format_kes(amount_cents):
    """``800000`` → ``'KES 8,000'`` (cents are shown only when non-zero)."""
    amount = Decimal(amount_cents or 0) / Decimal(100)
    if amount == amount.to_integral_value():
        return f"KES {int(amount):,}"
    return f"KES {amount:,.2f}"


def mpesa_urls():
    environment = getattr(settings, 'MPESA_ENVIRONMENT', 'sandbox')
    return MPESA_URLS.get(environment, MPESA_URLS['sandbox'])


def is_mpesa_configured():
    return bool(
        getattr(settings, 'MPESA_CONSUMER_KEY', '')
        and getattr(settings, 'MPESA_CONSUMER_SECRET', '')
        and getattr(settings, 'MPESA_PASSKEY', '')
    )


def is_flutterwave_configured():
    return bool(getattr(settings, 'FLUTTERWAVE_SECRET_KEY', ''))


def public_config():
    """Configuration surface exposed to the billing screen."""
    return {
        'currency': currency(),
        'trial_days': trial_days(),
        'billing_cycle_days': billing_cycle_days(),
        'grace_period_days': grace_period_days(),
        'plans': [get_plan_limits(code).as_dict() for code in plan_codes()],
        'support_email': getattr(settings, 'BILLING_SUPPORT_EMAIL', 'support@gethure.com'),
        'support_phone': getattr(settings, 'BILLING_SUPPORT_PHONE', '+254 700 000 000'),
        'dev_mode': is_dev_mode(),
        'providers': {
            'mpesa': is_mpesa_configured(),
            'flutterwave': is_flutterwave_configured(),
        },
    }
