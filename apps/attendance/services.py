"""
Attendance Services - clock in/out, manual entries and edits
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from apps.core.exceptions import ValidationException
from apps.roles.capabilities import Capability
from apps.staff.models import StaffMember

from .models import AttendanceRecord

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')
EDITABLE_FIELDS = ('clock_in', 'clock_out', 'status', 'total_hours', 'notes', 'location')


def hours_between(start, end) -> Decimal:
    """Elapsed hours rounded half-up to two decimals."""
    if start is None or end is None:
        return Decimal('0.00')
    seconds = Decimal((end - start).total_seconds())
    if seconds < 0:
        raise ValidationException('Clock-out cannot be before clock-in.', field='clock_out')
    return (seconds / Decimal(3600)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class AttendanceService:

    @classmethod
    def clock_in(cls, ctx, location=None, shift=None, now=None) -> AttendanceRecord:
        staff = ctx.staff
        if staff is None:
            raise ValidationException('Staff profile not found.', field='staff')
        if staff.status != StaffMember.STATUS_ACTIVE:
            raise ValidationException(
                f"Your account status is '{staff.get_status_display()}'. Please contact admin.",
                field='staff',
            )
        for related, field in ((location, 'location'), (shift, 'shift')):
            if related is not None and related.organization_id != ctx.organization_id:
                raise ValidationException(f"The {field} must belong to your organization.", field=field)

        now = now or timezone.now()
        today = timezone.localdate(now)

        with transaction.atomic():
            StaffMember.objects.select_for_update().filter(pk=staff.pk).first()
            already_open = AttendanceRecord.objects.filter(
                staff=staff, date=today, clock_in__isnull=False, clock_out__isnull=True,
            ).exists()
            if already_open:
                raise ValidationException('Already clocked in. Please clock out first.', field='clock_in')
            record = AttendanceRecord.objects.create(
                organization=ctx.organization,
                staff=staff,
                location=location or staff.location,
                shift=shift,
                date=today,
                clock_in=now,
                status=AttendanceRecord.STATUS_PRESENT,
                created_by=ctx.user,
            )

        logger.info("clock_in org=%s staff=%s record=%s", ctx.organization_id, staff.id, record.id)
        return record

    @classmethod
    def clock_out(cls, ctx, record, now=None) -> AttendanceRecord:
        is_own = ctx.staff is not None and record.staff_id == ctx.staff.pk
        if not is_own:
            ctx.require_capability(Capability.ATTENDANCE)

        with transaction.atomic():
            record = AttendanceRecord.objects.select_for_update().get(pk=record.pk)
            if record.clock_in is None:
                raise ValidationException('No clock in time recorded.', field='clock_in')
            if record.clock_out is not None:
                raise ValidationException('Already clocked out.', field='clock_out')
            record.clock_out = now or timezone.now()
            record.total_hours = hours_between(record.clock_in, record.clock_out)
            record.updated_by = ctx.user
            record.save(update_fields=['clock_out', 'total_hours', 'updated_by', 'updated_at'])

        logger.info(
            "clock_out org=%s record=%s hours=%s", ctx.organization_id, record.id, record.total_hours,
        )
        return record

    @staticmethod
    def open_record(staff, on_date=None):
        on_date = on_date or timezone.localdate()
        return AttendanceRecord.objects.filter(
            staff=staff, date=on_date, clock_in__isnull=False, clock_out__isnull=True,
        ).first()

    # ------------------------------------------------------------------
    # Manager operations
    # ------------------------------------------------------------------
    @classmethod
    def record_manual_entry(cls, ctx, *, date, status, staff=None, locum_name='', location=None,
                            shift=None, clock_in=None, clock_out=None, total_hours=None,
                            notes='') -> AttendanceRecord:
        ctx.require_capability(Capability.ATTENDANCE)
        if staff is None and not (locum_name or '').strip():
            raise ValidationException('Choose a staff member or enter the locum name.', field='staff')
        if staff is not None and staff.organization_id != ctx.organization_id:
            raise ValidationException('Staff must belong to your organization.', field='staff')
        if staff is None and status not in AttendanceRecord.LOCUM_STATUSES:
            raise ValidationException('Locum attendance is either Worked or No-show.', field='status')

        if total_hours is None:
            total_hours = hours_between(clock_in, clock_out)
        else:
            total_hours = Decimal(str(total_hours)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

        record = AttendanceRecord.objects.create(
            organization=ctx.organization,
            staff=staff,
            locum_name=(locum_name or '').strip() if staff is None else '',
            location=location,
            shift=shift,
            date=date,
            clock_in=clock_in,
            clock_out=clock_out,
            total_hours=total_hours,
            status=status,
            notes=notes or '',
            is_manual_entry=True,
            edited_by=ctx.user,
            edited_at=timezone.now(),
            created_by=ctx.user,
        )
        logger.info(
            "attendance_manual_entry org=%s record=%s staff=%s status=%s",
            ctx.organization_id, record.id, getattr(staff, 'id', None), status,
        )
        return record

    @classmethod
    def edit_record(cls, ctx, record, reason, **changes) -> AttendanceRecord:
        ctx.require_capability(Capability.ATTENDANCE)
        reason = (reason or '').strip()
        if not reason:
            raise ValidationException('A reason is required to edit attendance.', field='edit_reason')

        for key, value in changes.items():
            if key in EDITABLE_FIELDS:
                setattr(record, key, value)
        if 'total_hours' not in changes and ({'clock_in', 'clock_out'} & set(changes)):
            record.total_hours = hours_between(record.clock_in, record.clock_out)

        record.edit_reason = reason
        record.edited_by = ctx.user
        record.edited_at = timezone.now()
        record.updated_by = ctx.user
        record.save()
        logger.info("attendance_edited org=%s record=%s by=%s", ctx.organization_id, record.id, ctx.user.pk)
        return record

    @staticmethod
    def daily_summary(organization, on_date=None, location=None):
        on_date = on_date or timezone.localdate()
        qs = AttendanceRecord.objects.filter(organization=organization, date=on_date)
        if location is not None:
            qs = qs.filter(location=location)
        summary = qs.aggregate(
            total=Count('id'),
            present=Count('id', filter=Q(status=AttendanceRecord.STATUS_PRESENT)),
            partial=Count('id', filter=Q(status=AttendanceRecord.STATUS_PARTIAL)),
            absent=Count('id', filter=Q(status=AttendanceRecord.STATUS_ABSENT)),
            on_leave=Count('id', filter=Q(status=AttendanceRecord.STATUS_ON_LEAVE)),
            clocked_in=Count('id', filter=Q(clock_in__isnull=False, clock_out__isnull=True)),
            total_hours=Sum('total_hours'),
        )
        summary['date'] = on_date
        summary['total_hours'] = summary['total_hours'] or Decimal('0.00')
        return summary
