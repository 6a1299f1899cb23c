"""Access gate: which application areas a billing state may reach."""
from dataclasses import asdict, dataclass
from typing import Optional

from apps.billing.state_engine import STATE_SUSPENDED
from apps.core.context import ADMIN_ROLES


class AppArea:
    BILLING = 'billing'
    VERIFICATION = 'verification'
    PROTECTED = 'protected'

    ALL = (BILLING, VERIFICATION, PROTECTED)
    ALWAYS_OPEN = (BILLING, VERIFICATION)


NOTICE_SUSPENDED_ADMIN = 'suspended_admin'
NOTICE_SUSPENDED_EMPLOYEE = 'suspended_employee'


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    area: str
    state: Optional[str]
    notice: Optional[str] = None
    can_pay: bool = False

    def as_dict(self):
        return asdict(self)


def normalize_area(area):
    area = (area or AppArea.PROTECTED).lower()
    return area if area in AppArea.ALL else AppArea.PROTECTED


def evaluate_access(status, area, role):
    area = normalize_area(area)
    is_admin = role in ADMIN_ROLES
    state = status.state if status is not None else None

    if area in AppArea.ALWAYS_OPEN or state != STATE_SUSPENDED:
        return AccessDecision(allowed=True, area=area, state=state, can_pay=is_admin)

    return AccessDecision(
        allowed=False,
        area=area,
        state=state,
        notice=NOTICE_SUSPENDED_ADMIN if is_admin else NOTICE_SUSPENDED_EMPLOYEE,
        can_pay=is_admin,
    )


def evaluate_unavailable(area, role):
    """Decision when the billing status could not be computed."""
    area = normalize_area(area)
    is_admin = role in ADMIN_ROLES
    if area in AppArea.ALWAYS_OPEN:
        return AccessDecision(allowed=True, area=area, state=None, can_pay=is_admin)
    return AccessDecision(
        allowed=False,
        area=area,
        state=None,
        notice=NOTICE_SUSPENDED_ADMIN if is_admin else NOTICE_SUSPENDED_EMPLOYEE,
        can_pay=is_admin,
    )
