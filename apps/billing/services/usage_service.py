"""Plan limit checks: locations, staff and admin seats"""
import logging
from dataclasses import dataclass

from apps.billing import config as billing_config
from apps.core.exceptions import SeatLimitExceeded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeatUsage:
    used: int
    max: int

    @property
    def available(self):
        return self.used < self.max

    @property
    def remaining(self):
        return max(self.max - self.used, 0)

    def as_dict(self):
        return {
            'used': self.used,
            'max': self.max,
            'remaining': self.remaining,
            'available': self.available,
        }


class UsageService:
    """
    Counts live records against the organization's plan maximums.

    Read-only. Callers that act on the result (role assignment, staff and
    location creation) must lock the organization row first; see
    ``lock_organization``.
    """

    @staticmethod
    def get_plan_limits(organization):
        try:
            defaults = billing_config.get_plan_limits(organization.plan)
        except KeyError:
            logger.warning("unknown_plan org=%s plan=%s", organization.id, organization.plan)
            defaults = billing_config.get_plan_limits(billing_config.plan_codes()[0])
        return {
            'plan': defaults.code,
            'max_locations': organization.max_locations if organization.max_locations is not None else defaults.max_locations,
            'max_staff': organization.max_staff if organization.max_staff is not None else defaults.max_staff,
            'max_admins': organization.max_admins if organization.max_admins is not None else defaults.max_admins,
        }

    @staticmethod
    def _live_staff(organization):
        from apps.staff.models import StaffMember
        return StaffMember.objects.filter(organization=organization).exclude(
            status=StaffMember.STATUS_ARCHIVED,
        )

    @classmethod
    def check_admin_seat_availability(cls, organization):
        from apps.staff.models import StaffMember
        used = cls._live_staff(organization).filter(system_role__in=StaffMember.SEAT_ROLES).count()
        return SeatUsage(used=used, max=cls.get_plan_limits(organization)['max_admins'])

    @classmethod
    def check_staff_availability(cls, organization):
        used = cls._live_staff(organization).count()
        return SeatUsage(used=used, max=cls.get_plan_limits(organization)['max_staff'])

    @classmethod
    def check_location_availability(cls, organization):
        from apps.core.models import Location
        used = Location.objects.filter(organization=organization, is_active=True).count()
        return SeatUsage(used=used, max=cls.get_plan_limits(organization)['max_locations'])

    @staticmethod
    def lock_organization(organization):
        """Row-lock the organization; call inside ``transaction.atomic()``."""
        from apps.core.models import Organization
        return Organization.objects.select_for_update().get(pk=organization.pk)

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------
    @classmethod
    def ensure_admin_seat(cls, organization):
        usage = cls.check_admin_seat_availability(organization)
        if not usage.available:
            logger.info("seat_limit_reached org=%s type=admins used=%s max=%s", organization.id, usage.used, usage.max)
            raise SeatLimitExceeded(
                f"Admin seat limit reached ({usage.used}/{usage.max}). Upgrade your plan to add more admins.",
                limit_type='admins', used=usage.used, maximum=usage.max,
            )
        return usage

    @classmethod
    def ensure_staff_capacity(cls, organization):
        usage = cls.check_staff_availability(organization)
        if not usage.available:
            logger.info("seat_limit_reached org=%s type=staff used=%s max=%s", organization.id, usage.used, usage.max)
            raise SeatLimitExceeded(
                f"Staff limit reached ({usage.used}/{usage.max}). Upgrade your plan to add more staff.",
                limit_type='staff', used=usage.used, maximum=usage.max,
            )
        return usage

    @classmethod
    def ensure_location_capacity(cls, organization):
        usage = cls.check_location_availability(organization)
        if not usage.available:
            logger.info("seat_limit_reached org=%s type=locations used=%s max=%s", organization.id, usage.used, usage.max)
            raise SeatLimitExceeded(
                f"Location limit reached ({usage.used}/{usage.max}). Upgrade your plan to add more locations.",
                limit_type='locations', used=usage.used, maximum=usage.max,
            )
        return usage

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------
    @classmethod
    def usage_summary(cls, organization):
        return {
            'plan': cls.get_plan_limits(organization)['plan'],
            'locations': cls.check_location_availability(organization).as_dict(),
            'staff': cls.check_staff_availability(organization).as_dict(),
            'admins': cls.check_admin_seat_availability(organization).as_dict(),
        }

    @classmethod
    def limits_exceeded_by(cls, organization, limits):
        """Names of the limits in ``limits`` that current usage already exceeds."""
        current = {
            'locations': (cls.check_location_availability(organization).used, limits.max_locations),
            'staff': (cls.check_staff_availability(organization).used, limits.max_staff),
            'admins': (cls.check_admin_seat_availability(organization).used, limits.max_admins),
        }
        return [name for name, (used, maximum) in current.items() if used > maximum]
