"""
Payroll Services - entry generation and approval
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.exceptions import PermissionDeniedException, ValidationException
from apps.core.services import get_verification_state
from apps.leave.models import LeaveRequest
from apps.roles.capabilities import Capability

from .models import PayrollEntry
from .statutory import DEFAULT_RULES, calculate_statutory_deductions

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


def require_verified_organization(ctx):
    """Payouts and payslips stay locked until the organization is verified."""
    if not get_verification_state(ctx.organization).is_verified:
        raise PermissionDeniedException(
            'Payroll payouts are available once your organization has been verified.'
        )


def unpaid_leave_days(staff, period_start, period_end) -> Decimal:
    """Approved unpaid leave days that fall inside the period."""
    days = 0
    requests = LeaveRequest.objects.filter(
        staff=staff,
        status=LeaveRequest.STATUS_APPROVED,
        is_paid=False,
        start_date__lte=period_end,
        end_date__gte=period_start,
    )
    for leave in requests:
        overlap_start = max(period_start, leave.start_date)
        overlap_end = min(period_end, leave.end_date)
        days += (overlap_end - overlap_start).days + 1
    return Decimal(days)


class PayrollService:

    @classmethod
    def generate_entry(cls, ctx, *, staff, period_start, period_end, basic, allowances=0,
                       non_taxable_allowances=0, other_deductions=0, notes='', rules=DEFAULT_RULES):
        ctx.require_capability(Capability.PAYROLL)
        if staff.organization_id != ctx.organization_id:
            raise ValidationException('Staff must belong to your organization.', field='staff')
        if period_end < period_start:
            raise ValidationException('Period end must be on or after period start.', field='period_end')
        if PayrollEntry.objects.filter(
            staff=staff, period_start=period_start, period_end=period_end,
        ).exists():
            raise ValidationException(
                'A payroll entry already exists for this staff member and period.', field='period_start',
            )

        basic = Decimal(str(basic))
        period_days = Decimal((period_end - period_start).days + 1)
        unpaid_days = unpaid_leave_days(staff, period_start, period_end)
        unpaid_deduction = (basic * unpaid_days / period_days).quantize(CENTS, rounding=ROUND_HALF_UP)

        breakdown = calculate_statutory_deductions(
            basic - unpaid_deduction, allowances, non_taxable_allowances, rules=rules,
        )
        other_deductions = Decimal(str(other_deductions or 0)).quantize(CENTS)
        total_deductions = breakdown.total_deductions + other_deductions

        try:
            with transaction.atomic():
                entry = PayrollEntry.objects.create(
                    organization=ctx.organization,
                    staff=staff,
                    period_start=period_start,
                    period_end=period_end,
                    basic=basic,
                    allowances=Decimal(str(allowances or 0)),
                    non_taxable_allowances=Decimal(str(non_taxable_allowances or 0)),
                    unpaid_leave_days=unpaid_days,
                    unpaid_leave_deduction=unpaid_deduction,
                    gross=breakdown.gross,
                    taxable=breakdown.taxable,
                    paye=breakdown.paye,
                    personal_relief=breakdown.personal_relief,
                    nssf=breakdown.nssf,
                    shif=breakdown.shif,
                    housing_levy=breakdown.housing_levy,
                    other_deductions=other_deductions,
                    total_deductions=total_deductions,
                    net=breakdown.gross - total_deductions,
                    notes=notes or '',
                    created_by=ctx.user,
                )
        except IntegrityError:
            raise ValidationException(
                'A payroll entry already exists for this staff member and period.', field='period_start',
            )

        logger.info(
            "payroll_entry_generated org=%s staff=%s period=%s..%s net=%s",
            ctx.organization_id, staff.id, period_start, period_end, entry.net,
        )
        return entry

    @classmethod
    def approve_entry(cls, ctx, entry):
        ctx.require_capability(Capability.PAYROLL)
        if entry.status != PayrollEntry.STATUS_DRAFT:
            raise ValidationException('Only draft entries can be approved.', field='status')
        entry.status = PayrollEntry.STATUS_APPROVED
        entry.approved_by = ctx.user
        entry.approved_at = timezone.now()
        entry.save(update_fields=['status', 'approved_by', 'approved_at', 'updated_at'])
        logger.info("payroll_entry_approved org=%s entry=%s", ctx.organization_id, entry.id)
        return entry

    @classmethod
    def mark_paid(cls, ctx, entry):
        ctx.require_capability(Capability.PAYROLL)
        require_verified_organization(ctx)
        if entry.status != PayrollEntry.STATUS_APPROVED:
            raise ValidationException('Only approved entries can be marked as paid.', field='status')
        entry.status = PayrollEntry.STATUS_PAID
        entry.paid_at = timezone.now()
        entry.save(update_fields=['status', 'paid_at', 'updated_at'])
        logger.info("payroll_entry_paid org=%s entry=%s", ctx.organization_id, entry.id)
        return entry

    @classmethod
    def delete_entry(cls, ctx, entry):
        ctx.require_capability(Capability.PAYROLL)
        if entry.status != PayrollEntry.STATUS_DRAFT:
            raise ValidationException('Only draft entries can be deleted.', field='status')
        entry.delete()
