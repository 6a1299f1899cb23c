from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from apps.core.models import OrganizationEntity, assert_same_organization


# =====================================================
# PAYROLL ENTRY (one staff member, one pay period)
# =====================================================

class PayrollEntry(OrganizationEntity):

    STATUS_DRAFT = 'DRAFT'
    STATUS_APPROVED = 'APPROVED'
    STATUS_PAID = 'PAID'
    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_PAID, 'Paid'),
    ]

    staff = models.ForeignKey('staff.StaffMember', on_delete=models.PROTECT, related_name='payroll_entries')
    period_start = models.DateField()
    period_end = models.DateField()

    # -------- Earnings --------
    basic = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    allowances = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    non_taxable_allowances = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    unpaid_leave_days = models.DecimalField(max_digits=5, decimal_places=1, default=Decimal('0'))
    unpaid_leave_deduction = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    gross = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    taxable = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))

    # -------- Statutory --------
    paye = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    personal_relief = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    nssf = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    shif = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    housing_levy = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))

    # -------- Totals --------
    other_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    total_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    net = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_index=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_payroll_entries',
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'payroll_entries'
        ordering = ['-period_start', 'staff__first_name']
        constraints = [
            models.UniqueConstraint(
                fields=['staff', 'period_start', 'period_end'],
                name='uq_payroll_entry_staff_period',
            ),
        ]
        indexes = [
            models.Index(fields=['organization', 'period_start', 'period_end'], name='payroll_org_period_idx'),
        ]

    def __str__(self):
        return f"{self.staff} {self.period_start}→{self.period_end} ({self.status})"

    def clean(self):
        super().clean()
        assert_same_organization(self, self.staff, 'staff')
        if self.period_end and self.period_start and self.period_end < self.period_start:
            raise ValidationError({'period_end': 'Period end must be on or after period start.'})
