"""
Organization services - verification, stats and locations
"""
import logging
from dataclasses import asdict, dataclass

from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import PermissionDeniedException, ValidationException
from apps.core.models import Location, Organization

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security.audit")


# ============================================================================
# Verification state
# ============================================================================

_VERIFICATION_ALIASES = {
    'verified': Organization.VERIFICATION_VERIFIED,
    'approved': Organization.VERIFICATION_VERIFIED,
    'active': Organization.VERIFICATION_VERIFIED,
    'pending': Organization.VERIFICATION_PENDING,
    'pending review': Organization.VERIFICATION_PENDING,
    'rejected': Organization.VERIFICATION_REJECTED,
}


def normalize_verification_status(raw):
    """Collapse legacy status spellings into one of the four stored values."""
    key = ' '.join(str(raw or '').replace('_', ' ').split()).lower()
    return _VERIFICATION_ALIASES.get(key, Organization.VERIFICATION_UNVERIFIED)


@dataclass(frozen=True)
class VerificationState:
    status: str
    is_verified: bool
    can_submit: bool
    rejection_reason: str = ''

    def as_dict(self):
        return asdict(self)


SUBMITTABLE_STATUSES = (Organization.VERIFICATION_UNVERIFIED, Organization.VERIFICATION_REJECTED)


def get_verification_state(organization):
    status = normalize_verification_status(organization.verification_status)
    return VerificationState(
        status=status,
        is_verified=status == Organization.VERIFICATION_VERIFIED,
        can_submit=status in SUBMITTABLE_STATUSES,
        rejection_reason=organization.rejection_reason if status == Organization.VERIFICATION_REJECTED else '',
    )


# ============================================================================
# Organization service
# ============================================================================

class OrganizationService:

    @classmethod
    def submit_for_verification(cls, ctx, registration_number, kra_pin):
        ctx.require_admin()
        organization = ctx.organization
        state = get_verification_state(organization)
        if not state.can_submit:
            raise ValidationException(
                f"Verification cannot be submitted while the organization is {state.status.lower()}.",
                field='verification_status',
            )

        registration_number = (registration_number or '').strip()
        kra_pin = (kra_pin or '').strip().upper()
        if not registration_number:
            raise ValidationException('Business registration number is required.', field='registration_number')
        if not kra_pin:
            raise ValidationException('KRA PIN is required.', field='kra_pin')

        organization.registration_number = registration_number
        organization.kra_pin = kra_pin
        organization.verification_status = Organization.VERIFICATION_PENDING
        organization.verification_submitted_at = timezone.now()
        organization.rejection_reason = ''
        organization.save(update_fields=[
            'registration_number', 'kra_pin', 'verification_status',
            'verification_submitted_at', 'rejection_reason', 'updated_at',
        ])
        logger.info("verification_submitted org=%s by=%s", organization.id, getattr(ctx.user, 'pk', None))
        return get_verification_state(organization)

    @staticmethod
    def _require_reviewer(reviewer):
        if not reviewer or not (reviewer.is_staff or reviewer.is_superuser):
            raise PermissionDeniedException('Only platform staff can review verifications.')

    @classmethod
    def _require_pending(cls, organization):
        if normalize_verification_status(organization.verification_status) != Organization.VERIFICATION_PENDING:
            raise ValidationException('Only pending verifications can be reviewed.', field='verification_status')

    @classmethod
    def approve_verification(cls, organization, reviewer):
        cls._require_reviewer(reviewer)
        cls._require_pending(organization)
        organization.verification_status = Organization.VERIFICATION_VERIFIED
        organization.verified_at = timezone.now()
        organization.verified_by = reviewer
        organization.rejection_reason = ''
        organization.save(update_fields=[
            'verification_status', 'verified_at', 'verified_by', 'rejection_reason', 'updated_at',
        ])
        security_logger.info("verification_approved org=%s reviewer=%s", organization.id, reviewer.pk)
        return get_verification_state(organization)

    @classmethod
    def reject_verification(cls, organization, reviewer, reason):
        cls._require_reviewer(reviewer)
        cls._require_pending(organization)
        reason = (reason or '').strip()
        if not reason:
            raise ValidationException('A reason is required to reject a verification.', field='reason')
        organization.verification_status = Organization.VERIFICATION_REJECTED
        organization.rejection_reason = reason
        organization.verified_at = None
        organization.verified_by = reviewer
        organization.save(update_fields=[
            'verification_status', 'rejection_reason', 'verified_at', 'verified_by', 'updated_at',
        ])
        security_logger.info("verification_rejected org=%s reviewer=%s", organization.id, reviewer.pk)
        return get_verification_state(organization)

    @classmethod
    def get_stats(cls, organization):
        from apps.billing.services import UsageService
        from apps.staff.models import StaffMember

        live_staff = StaffMember.objects.filter(organization=organization).exclude(
            status=StaffMember.STATUS_ARCHIVED,
        )
        limits = UsageService.get_plan_limits(organization)
        return {
            'organization_id': str(organization.id),
            'name': organization.name,
            'plan': organization.plan,
            'max_locations': limits['max_locations'],
            'max_staff': limits['max_staff'],
            'max_admins': limits['max_admins'],
            'locations_count': Location.objects.filter(organization=organization, is_active=True).count(),
            'staff_count': live_staff.count(),
            'admins_count': live_staff.filter(
                system_role__in=StaffMember.SEAT_ROLES,
                status=StaffMember.STATUS_ACTIVE,
            ).count(),
        }


# ============================================================================
# Locations
# ============================================================================

class LocationService:

    @classmethod
    def create_location(cls, ctx, **fields):
        from apps.billing.services import UsageService
        from apps.roles.capabilities import Capability

        ctx.require_capability(Capability.SETTINGS_ADMIN)
        with transaction.atomic():
            organization = UsageService.lock_organization(ctx.organization)
            UsageService.ensure_location_capacity(organization)
            is_first = not Location.objects.filter(organization=organization, is_active=True).exists()
            location = Location.objects.create(
                organization=organization,
                created_by=ctx.user,
                is_primary=fields.pop('is_primary', False) or is_first,
                **fields,
            )
        logger.info("location_created org=%s location=%s", ctx.organization_id, location.id)
        return location

    @classmethod
    def deactivate_location(cls, ctx, location):
        from apps.roles.capabilities import Capability

        ctx.require_capability(Capability.SETTINGS_ADMIN)
        location.is_active = False
        location.updated_by = ctx.user
        location.save(update_fields=['is_active', 'updated_by', 'updated_at'])
        logger.info("location_deactivated org=%s location=%s", ctx.organization_id, location.id)
        return location
