"""
Staff services - roster, seat-gated role assignment, invitations
"""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.db import transaction
from django.utils import timezone

from apps.billing.services import UsageService
from apps.core.exceptions import ValidationException
from apps.core.phone import normalize_kenyan_phone
from apps.roles.capabilities import Capability, validate_capabilities

from .models import StaffInvitation, StaffMember

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security.audit")

STAFF_FIELDS = ('first_name', 'last_name', 'email', 'phone', 'job_title', 'location', 'hire_date')


def _clean_phone(phone):
    if not phone:
        return ''
    normalized = normalize_kenyan_phone(phone)
    if not normalized:
        raise ValidationException('Enter a valid Kenyan phone number.', field='phone')
    return normalized


def _check_location(ctx, location):
    if location is not None and location.organization_id != ctx.organization_id:
        raise ValidationException('Location must belong to your organization.', field='location')


class StaffService:

    @staticmethod
    def _owner_count(organization, exclude=None):
        qs = StaffMember.objects.filter(
            organization=organization,
            system_role=StaffMember.ROLE_OWNER,
        ).exclude(status=StaffMember.STATUS_ARCHIVED)
        if exclude is not None:
            qs = qs.exclude(pk=exclude.pk)
        return qs.count()

    # ------------------------------------------------------------------
    # Create / update
    # ------------------------------------------------------------------
    @classmethod
    def create_staff(cls, ctx, *, system_role=StaffMember.ROLE_EMPLOYEE, capabilities=None,
                     custom_role=None, **fields):
        ctx.require_capability(Capability.STAFF_MANAGEMENT)
        if system_role == StaffMember.ROLE_OWNER and not ctx.is_owner:
            raise ValidationException('Only an owner can add another owner.', field='system_role')
        if not (fields.get('first_name') or '').strip():
            raise ValidationException('First name is required.', field='first_name')
        fields['phone'] = _clean_phone(fields.get('phone'))
        _check_location(ctx, fields.get('location'))
        cleaned_caps = cls._capabilities_for(system_role, capabilities, custom_role)

        with transaction.atomic():
            organization = UsageService.lock_organization(ctx.organization)
            UsageService.ensure_staff_capacity(organization)
            if system_role in StaffMember.SEAT_ROLES:
                UsageService.ensure_admin_seat(organization)
            staff = StaffMember.objects.create(
                organization=organization,
                system_role=system_role,
                capabilities=cleaned_caps,
                custom_role=custom_role if system_role == StaffMember.ROLE_ADMIN else None,
                created_by=ctx.user,
                **{key: value for key, value in fields.items() if key in STAFF_FIELDS},
            )

        logger.info("staff_created org=%s staff=%s role=%s", ctx.organization_id, staff.id, system_role)
        return staff

    @classmethod
    def update_staff(cls, ctx, staff, **fields):
        ctx.require_capability(Capability.STAFF_MANAGEMENT)
        if 'phone' in fields:
            fields['phone'] = _clean_phone(fields['phone'])
        _check_location(ctx, fields.get('location'))
        for key, value in fields.items():
            if key in STAFF_FIELDS:
                setattr(staff, key, value)
        staff.updated_by = ctx.user
        staff.save()
        return staff

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------
    @staticmethod
    def _capabilities_for(role, capabilities, custom_role):
        if role == StaffMember.ROLE_EMPLOYEE:
            return validate_capabilities(capabilities)
        if role == StaffMember.ROLE_OWNER:
            return validate_capabilities(capabilities) if capabilities else []
        cleaned = validate_capabilities(capabilities)
        role_caps = list(custom_role.capabilities or []) if custom_role else []
        if not cleaned and not role_caps:
            raise ValidationException(
                'An admin needs at least one permission.', field='capabilities',
            )
        return cleaned

    @classmethod
    def assign_role(cls, ctx, staff, role, capabilities=None, custom_role=None):
        ctx.require_capability(Capability.STAFF_MANAGEMENT)
        if role not in dict(StaffMember.ROLE_CHOICES):
            raise ValidationException(f"Unknown role: {role}", field='system_role')
        if custom_role is not None and custom_role.organization_id != ctx.organization_id:
            raise ValidationException('Role must belong to your organization.', field='custom_role')
        if StaffMember.ROLE_OWNER in (role, staff.system_role) and not ctx.is_owner:
            raise ValidationException('Only an owner can change owner roles.', field='system_role')

        with transaction.atomic():
            organization = UsageService.lock_organization(ctx.organization)
            staff = StaffMember.objects.select_for_update().get(pk=staff.pk)
            previous = staff.system_role
            cleaned_caps = cls._capabilities_for(
                role, staff.capabilities if capabilities is None else capabilities, custom_role,
            )

            if previous == StaffMember.ROLE_OWNER and role != StaffMember.ROLE_OWNER:
                if cls._owner_count(organization, exclude=staff) == 0:
                    raise ValidationException(
                        'The last owner cannot be demoted.', field='system_role',
                    )
            if role in StaffMember.SEAT_ROLES and previous not in StaffMember.SEAT_ROLES:
                UsageService.ensure_admin_seat(organization)

            staff.system_role = role
            staff.capabilities = cleaned_caps
            staff.custom_role = custom_role if role == StaffMember.ROLE_ADMIN else None
            staff.updated_by = ctx.user
            staff.save(update_fields=['system_role', 'capabilities', 'custom_role', 'updated_by', 'updated_at'])

        security_logger.info(
            "staff_role_changed org=%s staff=%s from=%s to=%s by=%s",
            ctx.organization_id, staff.id, previous, role, getattr(ctx.user, 'pk', None),
        )
        return staff

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @classmethod
    def archive_staff(cls, ctx, staff):
        ctx.require_capability(Capability.STAFF_MANAGEMENT)
        if staff.status == StaffMember.STATUS_ARCHIVED:
            return staff
        with transaction.atomic():
            organization = UsageService.lock_organization(ctx.organization)
            if staff.system_role == StaffMember.ROLE_OWNER and cls._owner_count(organization, exclude=staff) == 0:
                raise ValidationException('The last owner cannot be archived.', field='status')
            staff.status = StaffMember.STATUS_ARCHIVED
            staff.archived_at = timezone.now()
            staff.updated_by = ctx.user
            staff.save(update_fields=['status', 'archived_at', 'updated_by', 'updated_at'])
            StaffInvitation.objects.filter(
                staff=staff, status=StaffInvitation.STATUS_PENDING,
            ).update(status=StaffInvitation.STATUS_CANCELLED)
        logger.info("staff_archived org=%s staff=%s", ctx.organization_id, staff.id)
        return staff

    @classmethod
    def reactivate_staff(cls, ctx, staff):
        ctx.require_capability(Capability.STAFF_MANAGEMENT)
        if staff.status == StaffMember.STATUS_ACTIVE:
            return staff
        with transaction.atomic():
            organization = UsageService.lock_organization(ctx.organization)
            if staff.status == StaffMember.STATUS_ARCHIVED:
                UsageService.ensure_staff_capacity(organization)
                if staff.system_role in StaffMember.SEAT_ROLES:
                    UsageService.ensure_admin_seat(organization)
            staff.status = StaffMember.STATUS_ACTIVE
            staff.archived_at = None
            staff.updated_by = ctx.user
            staff.save(update_fields=['status', 'archived_at', 'updated_by', 'updated_at'])
        logger.info("staff_reactivated org=%s staff=%s", ctx.organization_id, staff.id)
        return staff


class InvitationService:

    @classmethod
    def invite(cls, ctx, staff):
        ctx.require_capability(Capability.STAFF_MANAGEMENT)
        if staff.status == StaffMember.STATUS_ARCHIVED:
            raise ValidationException('Archived staff cannot be invited.', field='staff')
        if staff.user_id:
            raise ValidationException('This staff member already has a login.', field='staff')
        if not staff.email:
            raise ValidationException('Add an email address before sending an invitation.', field='email')

        with transaction.atomic():
            StaffInvitation.objects.filter(
                staff=staff, status=StaffInvitation.STATUS_PENDING,
            ).update(status=StaffInvitation.STATUS_CANCELLED)
            invitation = StaffInvitation.objects.create(
                organization=ctx.organization,
                staff=staff,
                email=staff.email,
                invited_by=ctx.user,
                created_by=ctx.user,
            )
            transaction.on_commit(lambda: cls._send_email(invitation))

        logger.info("staff_invited org=%s staff=%s invitation=%s", ctx.organization_id, staff.id, invitation.id)
        return invitation

    @staticmethod
    def _send_email(invitation):
        base_url = getattr(settings, 'FRONTEND_URL', 'http://localhost:5173').rstrip('/')
        link = f"{base_url}/accept-invite?token={invitation.token}"
        send_mail(
            subject=f"You're invited to join {invitation.organization.name} on HURE Core",
            message=(
                f"Hello {invitation.staff.first_name},\n\n"
                f"{invitation.organization.name} has invited you to HURE Core.\n"
                f"Set your password here: {link}\n\n"
                f"This link expires in {StaffInvitation.VALIDITY_DAYS} days."
            ),
            from_email=getattr(settings, 'DEFAULT_FROM_EMAIL', None),
            recipient_list=[invitation.email],
            fail_silently=True,
        )

    @classmethod
    def accept(cls, token, password):
        User = get_user_model()
        with transaction.atomic():
            invitation = (
                StaffInvitation.objects.select_for_update()
                .select_related('staff', 'organization')
                .filter(token=token)
                .first()
            )
            if invitation is None or invitation.status != StaffInvitation.STATUS_PENDING:
                raise ValidationException('This invitation is no longer valid.', field='token')
            if invitation.is_expired:
                raise ValidationException('This invitation has expired.', field='token')
            if not password or len(password) < 8:
                raise ValidationException('Password must be at least 8 characters.', field='password')

            staff = invitation.staff
            user = User.objects.filter(email__iexact=invitation.email).first()
            if user is not None and user.organization_id not in (None, invitation.organization_id):
                raise ValidationException('This email is registered with another organization.', field='email')
            if user is None:
                user = User.objects.create_user(
                    email=invitation.email,
                    password=password,
                    first_name=staff.first_name,
                    last_name=staff.last_name,
                    organization=invitation.organization,
                )
            else:
                user.organization = invitation.organization
                user.set_password(password)
                user.save()

            staff.user = user
            staff.status = StaffMember.STATUS_ACTIVE
            staff.save(update_fields=['user', 'status', 'updated_at'])

            invitation.status = StaffInvitation.STATUS_ACCEPTED
            invitation.accepted_at = timezone.now()
            invitation.save(update_fields=['status', 'accepted_at', 'updated_at'])

        logger.info("invitation_accepted org=%s staff=%s user=%s", invitation.organization_id, staff.id, user.pk)
        return user

    @classmethod
    def cancel(cls, ctx, invitation):
        ctx.require_capability(Capability.STAFF_MANAGEMENT)
        if invitation.status != StaffInvitation.STATUS_PENDING:
            raise ValidationException('Only pending invitations can be cancelled.', field='status')
        invitation.status = StaffInvitation.STATUS_CANCELLED
        invitation.updated_by = ctx.user
        invitation.save(update_fields=['status', 'updated_by', 'updated_at'])
        return invitation
