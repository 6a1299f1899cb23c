"""
Schedule Service - shift cover and assignment rules
"""
import logging

from django.db import transaction
from django.db.models import Count, F

from apps.core.exceptions import ValidationException
from apps.core.phone import normalize_kenyan_phone
from apps.leave.services import LeaveService
from apps.roles.capabilities import Capability
from apps.staff.models import StaffMember

from .models import Shift, ShiftAssignment

logger = logging.getLogger(__name__)

SHIFT_FIELDS = ('location', 'date', 'start_time', 'end_time', 'role_required', 'staff_needed', 'notes')


class ScheduleService:

    @staticmethod
    def _check_shift_fields(ctx, fields):
        location = fields.get('location')
        if location is not None and location.organization_id != ctx.organization_id:
            raise ValidationException('Location must belong to your organization.', field='location')
        if 'staff_needed' in fields and (fields['staff_needed'] or 0) < 1:
            raise ValidationException('At least one person is needed.', field='staff_needed')

    @classmethod
    def create_shift(cls, ctx, **fields):
        ctx.require_capability(Capability.SCHEDULING)
        cls._check_shift_fields(ctx, fields)
        shift = Shift.objects.create(
            organization=ctx.organization,
            created_by=ctx.user,
            **{key: value for key, value in fields.items() if key in SHIFT_FIELDS},
        )
        logger.info("shift_created org=%s shift=%s date=%s", ctx.organization_id, shift.id, shift.date)
        return shift

    @classmethod
    def update_shift(cls, ctx, shift, **fields):
        ctx.require_capability(Capability.SCHEDULING)
        cls._check_shift_fields(ctx, fields)
        for key, value in fields.items():
            if key in SHIFT_FIELDS:
                setattr(shift, key, value)
        if shift.staff_needed < shift.assigned_count:
            raise ValidationException(
                'Remove assignments before reducing the staff needed below the current cover.',
                field='staff_needed',
            )
        shift.updated_by = ctx.user
        shift.save()
        return shift

    @classmethod
    def delete_shift(cls, ctx, shift):
        ctx.require_capability(Capability.SCHEDULING)
        shift_id = shift.id
        shift.delete()
        logger.info("shift_deleted org=%s shift=%s", ctx.organization_id, shift_id)

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------
    @classmethod
    def assign_staff(cls, ctx, shift, *, staff=None, is_locum=False, locum_name='', locum_phone='',
                     locum_rate_cents=None, supervisor=None, notes=''):
        ctx.require_capability(Capability.SCHEDULING)

        if is_locum:
            if not (locum_name or '').strip():
                raise ValidationException('Locum name is required.', field='locum_name')
            if locum_phone:
                locum_phone = normalize_kenyan_phone(locum_phone)
                if not locum_phone:
                    raise ValidationException('Enter a valid Kenyan phone number.', field='locum_phone')
            staff = None
        else:
            if staff is None:
                raise ValidationException('Choose a staff member or mark the assignment as locum.', field='staff')
            if staff.organization_id != ctx.organization_id:
                raise ValidationException('Staff must belong to your organization.', field='staff')
            if staff.status != StaffMember.STATUS_ACTIVE:
                raise ValidationException('Only active staff can be scheduled.', field='staff')
            if LeaveService.is_staff_on_leave(staff, shift.date):
                raise ValidationException(
                    'Staff is on approved leave for this date. Cannot assign to shift.', field='staff',
                )
        if supervisor is not None and supervisor.organization_id != ctx.organization_id:
            raise ValidationException('Supervisor must belong to your organization.', field='supervisor')

        with transaction.atomic():
            shift = Shift.objects.select_for_update().get(pk=shift.pk)
            if shift.assignments.count() >= shift.staff_needed:
                raise ValidationException('Shift is already fully staffed.', field='shift')
            if staff is not None and shift.assignments.filter(staff=staff).exists():
                raise ValidationException('Staff is already assigned to this shift.', field='staff')

            assignment = ShiftAssignment.objects.create(
                organization=ctx.organization,
                shift=shift,
                staff=staff,
                is_locum=is_locum,
                locum_name=(locum_name or '').strip() if is_locum else '',
                locum_phone=(locum_phone or '') if is_locum else '',
                locum_rate_cents=locum_rate_cents if is_locum else None,
                supervisor=supervisor,
                notes=notes or '',
                created_by=ctx.user,
            )

        logger.info(
            "shift_assigned org=%s shift=%s staff=%s locum=%s",
            ctx.organization_id, shift.id, getattr(staff, 'id', None), is_locum,
        )
        return assignment

    @classmethod
    def remove_assignment(cls, ctx, assignment):
        ctx.require_capability(Capability.SCHEDULING)
        assignment_id = assignment.id
        assignment.delete()
        logger.info("shift_assignment_removed org=%s assignment=%s", ctx.organization_id, assignment_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @staticmethod
    def open_shifts(organization, start_date=None):
        qs = Shift.objects.filter(organization=organization).annotate(
            assigned=Count('assignments'),
        ).filter(assigned__lt=F('staff_needed'))
        if start_date is not None:
            qs = qs.filter(date__gte=start_date)
        return qs.select_related('location')

    @staticmethod
    def staff_schedule(staff, start_date=None, end_date=None):
        qs = Shift.objects.filter(assignments__staff=staff)
        if start_date is not None:
            qs = qs.filter(date__gte=start_date)
        if end_date is not None:
            qs = qs.filter(date__lte=end_date)
        return qs.select_related('location').distinct()
