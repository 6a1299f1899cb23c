"""
Leave Services - day counting, balances, request lifecycle
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.core.exceptions import PermissionDeniedException, ValidationException
from apps.roles.capabilities import Capability

from .models import UNLIMITED_DAYS, LeaveEntitlement, LeaveRequest, LeaveType

logger = logging.getLogger(__name__)

DEFAULT_LEAVE_TYPES = [
    ('Annual Leave', 21, True),
    ('Sick Leave (Paid)', 14, True),
    ('Sick Leave (Unpaid)', UNLIMITED_DAYS, False),
    ('Maternity Leave', 90, True),
    ('Paternity Leave', 14, True),
    ('Compassionate Leave', 5, True),
    ('Study Leave', 10, True),
    ('Unpaid Leave', UNLIMITED_DAYS, False),
    ('Comp Off', 10, True),
]


def seed_default_leave_types(organization) -> List[LeaveType]:
    """Create the Kenyan default leave types that do not exist yet."""
    created = []
    for name, days, is_paid in DEFAULT_LEAVE_TYPES:
        leave_type, was_created = LeaveType.objects.get_or_create(
            organization=organization,
            name=name,
            defaults={'default_days': days, 'is_paid': is_paid},
        )
        if was_created:
            created.append(leave_type)
    if created:
        logger.info("leave_types_seeded org=%s count=%s", organization.id, len(created))
    return created


def calculate_leave_days(start_date: date, end_date: date) -> int:
    """Inclusive calendar-day count."""
    if end_date < start_date:
        raise ValidationException('End date must be on or after start date.', field='end_date')
    return (end_date - start_date).days + 1


class LeaveService:

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------
    @staticmethod
    def get_or_create_entitlement(staff, leave_type, year: int) -> LeaveEntitlement:
        entitlement, _ = LeaveEntitlement.objects.get_or_create(
            organization_id=staff.organization_id,
            staff=staff,
            leave_type=leave_type,
            year=year,
            defaults={'allocated': Decimal(leave_type.default_days)},
        )
        return entitlement

    @classmethod
    def balances_for(cls, staff, year: Optional[int] = None) -> List[LeaveEntitlement]:
        year = year or timezone.localdate().year
        leave_types = LeaveType.objects.filter(organization_id=staff.organization_id, is_active=True)
        return [cls.get_or_create_entitlement(staff, leave_type, year) for leave_type in leave_types]

    @staticmethod
    def is_staff_on_leave(staff, on_date: date) -> bool:
        return LeaveRequest.objects.filter(
            staff=staff,
            status=LeaveRequest.STATUS_APPROVED,
            start_date__lte=on_date,
            end_date__gte=on_date,
        ).exists()

    @staticmethod
    def _adjust(request, pending=Decimal('0'), used=Decimal('0')):
        LeaveEntitlement.objects.filter(
            staff_id=request.staff_id,
            leave_type_id=request.leave_type_id,
            year=request.start_date.year,
        ).update(pending=F('pending') + pending, used=F('used') + used)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    @classmethod
    def submit(cls, ctx, *, leave_type, start_date, end_date, reason='', staff=None,
               allow_over_balance=False) -> LeaveRequest:
        staff = staff or ctx.staff
        if staff is None:
            raise ValidationException('A staff profile is required to request leave.', field='staff')
        if staff.organization_id != ctx.organization_id or leave_type.organization_id != ctx.organization_id:
            raise ValidationException('Staff and leave type must belong to your organization.')
        acting_for_other = ctx.staff is None or staff.pk != ctx.staff.pk
        if acting_for_other or allow_over_balance:
            ctx.require_capability(Capability.LEAVE)

        days = Decimal(calculate_leave_days(start_date, end_date))

        overlapping = LeaveRequest.objects.filter(
            staff=staff,
            status__in=[LeaveRequest.STATUS_PENDING, LeaveRequest.STATUS_APPROVED],
            start_date__lte=end_date,
            end_date__gte=start_date,
        ).exists()
        if overlapping:
            raise ValidationException('You already have leave booked for these dates.', field='start_date')

        with transaction.atomic():
            if not leave_type.is_unlimited:
                entitlement = cls.get_or_create_entitlement(staff, leave_type, start_date.year)
                entitlement = LeaveEntitlement.objects.select_for_update().get(pk=entitlement.pk)
                if days > entitlement.remaining and not allow_over_balance:
                    raise ValidationException(
                        f"Insufficient leave balance. Available: {entitlement.remaining} days, "
                        f"Requested: {days} days.",
                        field='days',
                        available=str(entitlement.remaining),
                        requested=str(days),
                    )
            request = LeaveRequest.objects.create(
                organization=ctx.organization,
                staff=staff,
                leave_type=leave_type,
                start_date=start_date,
                end_date=end_date,
                days=days,
                reason=reason or '',
                is_paid=leave_type.is_paid,
                created_by=ctx.user,
            )
            if not leave_type.is_unlimited:
                cls._adjust(request, pending=days)

        logger.info(
            "leave_requested org=%s staff=%s type=%s days=%s",
            ctx.organization_id, staff.id, leave_type.id, days,
        )
        return request

    @staticmethod
    def _lock_pending(request) -> LeaveRequest:
        request = LeaveRequest.objects.select_for_update().select_related('leave_type').get(pk=request.pk)
        if request.status != LeaveRequest.STATUS_PENDING:
            raise ValidationException(
                f"Only pending requests can be changed; this one is {request.get_status_display().lower()}.",
                field='status',
            )
        return request

    @classmethod
    def approve(cls, ctx, request, comment='') -> LeaveRequest:
        ctx.require_capability(Capability.LEAVE)
        with transaction.atomic():
            request = cls._lock_pending(request)
            request.status = LeaveRequest.STATUS_APPROVED
            request.reviewer = ctx.user
            request.reviewed_at = timezone.now()
            request.review_comment = comment or ''
            request.save(update_fields=['status', 'reviewer', 'reviewed_at', 'review_comment', 'updated_at'])
            if not request.leave_type.is_unlimited:
                cls._adjust(request, pending=-request.days, used=request.days)
        logger.info("leave_approved org=%s request=%s", ctx.organization_id, request.id)
        return request

    @classmethod
    def reject(cls, ctx, request, reason) -> LeaveRequest:
        ctx.require_capability(Capability.LEAVE)
        reason = (reason or '').strip()
        if not reason:
            raise ValidationException('A reason is required to reject a leave request.', field='reason')
        with transaction.atomic():
            request = cls._lock_pending(request)
            request.status = LeaveRequest.STATUS_REJECTED
            request.reviewer = ctx.user
            request.reviewed_at = timezone.now()
            request.rejection_reason = reason
            request.save(update_fields=['status', 'reviewer', 'reviewed_at', 'rejection_reason', 'updated_at'])
            if not request.leave_type.is_unlimited:
                cls._adjust(request, pending=-request.days)
        logger.info("leave_rejected org=%s request=%s", ctx.organization_id, request.id)
        return request

    @classmethod
    def cancel(cls, ctx, request) -> LeaveRequest:
        is_requester = ctx.staff is not None and request.staff_id == ctx.staff.pk
        if not is_requester and not ctx.has_capability(Capability.LEAVE):
            raise PermissionDeniedException('You can only cancel your own leave requests.')
        with transaction.atomic():
            request = cls._lock_pending(request)
            request.status = LeaveRequest.STATUS_CANCELLED
            request.save(update_fields=['status', 'updated_at'])
            if not request.leave_type.is_unlimited:
                cls._adjust(request, pending=-request.days)
        logger.info("leave_cancelled org=%s request=%s", ctx.organization_id, request.id)
        return request
