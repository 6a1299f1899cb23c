"""
Leave Models - types, yearly entitlements and requests
"""

from decimal import Decimal

from django.conf import settings
from django.db import models

from apps.core.models import OrganizationEntity, assert_same_organization

UNLIMITED_DAYS = 999


class LeaveType(OrganizationEntity):
    """Organization leave type; ``default_days == 999`` means unlimited."""

    name = models.CharField(max_length=100)
    default_days = models.PositiveIntegerField(default=0)
    is_paid = models.BooleanField(default=True)
    description = models.TextField(blank=True)

    class Meta:
        db_table = 'leave_types'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['organization', 'name'], name='uq_leave_type_name_per_org'),
        ]

    def __str__(self):
        return self.name

    @property
    def is_unlimited(self):
        return self.default_days >= UNLIMITED_DAYS


class LeaveEntitlement(OrganizationEntity):
    """Per staff, per leave type, per calendar year balance."""

    staff = models.ForeignKey('staff.StaffMember', on_delete=models.CASCADE, related_name='leave_entitlements')
    leave_type = models.ForeignKey(LeaveType, on_delete=models.CASCADE, related_name='entitlements')
    year = models.PositiveSmallIntegerField()
    allocated = models.DecimalField(max_digits=6, decimal_places=1, default=Decimal('0'))
    used = models.DecimalField(max_digits=6, decimal_places=1, default=Decimal('0'))
    pending = models.DecimalField(max_digits=6, decimal_places=1, default=Decimal('0'))

    class Meta:
        db_table = 'leave_entitlements'
        ordering = ['leave_type__name']
        constraints = [
            models.UniqueConstraint(
                fields=['staff', 'leave_type', 'year'], name='uq_leave_entitlement_staff_type_year',
            ),
        ]

    def __str__(self):
        return f"{self.staff} {self.leave_type} {self.year}"

    @property
    def remaining(self):
        return self.allocated - self.used - self.pending


class LeaveRequest(OrganizationEntity):

    STATUS_PENDING = 'PENDING'
    STATUS_APPROVED = 'APPROVED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    staff = models.ForeignKey('staff.StaffMember', on_delete=models.CASCADE, related_name='leave_requests')
    leave_type = models.ForeignKey(LeaveType, on_delete=models.PROTECT, related_name='requests')
    start_date = models.DateField()
    end_date = models.DateField()
    days = models.DecimalField(max_digits=6, decimal_places=1)
    reason = models.TextField(blank=True)
    is_paid = models.BooleanField(default=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_leave_requests',
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_comment = models.TextField(blank=True)
    rejection_reason = models.TextField(blank=True)

    class Meta:
        db_table = 'leave_requests'
        ordering = ['-start_date']
        indexes = [
            models.Index(fields=['organization', 'status'], name='leave_req_org_status_idx'),
            models.Index(fields=['staff', 'start_date', 'end_date'], name='leave_req_staff_dates_idx'),
        ]

    def __str__(self):
        return f"{self.staff} {self.leave_type} {self.start_date}→{self.end_date} ({self.status})"

    def clean(self):
        super().clean()
        assert_same_organization(self, self.staff, 'staff')
        assert_same_organization(self, self.leave_type, 'leave_type')
