"""
Attendance Models - daily clock records
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from apps.core.models import Location, OrganizationEntity, assert_same_organization


class AttendanceRecord(OrganizationEntity):
    """
    One staff member's attendance for one day.

    Locum cover recorded against a shift has no staff link and uses the
    ``WORKED`` / ``NO_SHOW`` statuses.
    """

    STATUS_PRESENT = 'PRESENT'
    STATUS_PARTIAL = 'PARTIAL'
    STATUS_ABSENT = 'ABSENT'
    STATUS_ON_LEAVE = 'ON_LEAVE'
    STATUS_WORKED = 'WORKED'
    STATUS_NO_SHOW = 'NO_SHOW'

    STATUS_CHOICES = [
        (STATUS_PRESENT, 'Present'),
        (STATUS_PARTIAL, 'Partial'),
        (STATUS_ABSENT, 'Absent'),
        (STATUS_ON_LEAVE, 'On Leave'),
        (STATUS_WORKED, 'Worked'),
        (STATUS_NO_SHOW, 'No-show'),
    ]
    LOCUM_STATUSES = (STATUS_WORKED, STATUS_NO_SHOW)

    staff = models.ForeignKey(
        'staff.StaffMember',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='attendance_records',
    )
    locum_name = models.CharField(max_length=150, blank=True)
    location = models.ForeignKey(
        Location,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attendance_records',
    )
    shift = models.ForeignKey(
        'scheduling.Shift',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attendance_records',
    )
    date = models.DateField(db_index=True)
    clock_in = models.DateTimeField(null=True, blank=True)
    clock_out = models.DateTimeField(null=True, blank=True)
    total_hours = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PRESENT)

    is_manual_entry = models.BooleanField(default=False)
    notes = models.TextField(blank=True)
    edit_reason = models.TextField(blank=True)
    edited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='edited_attendance_records',
    )
    edited_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'attendance_records'
        ordering = ['-date', '-clock_in']
        indexes = [
            models.Index(fields=['organization', 'date'], name='attendance_org_date_idx'),
            models.Index(fields=['staff', 'date'], name='attendance_staff_date_idx'),
            models.Index(fields=['status'], name='attendance_status_idx'),
        ]

    def __str__(self):
        who = self.staff or self.locum_name
        return f"{who} - {self.date} ({self.status})"

    @property
    def is_open(self):
        return self.clock_in is not None and self.clock_out is None

    def clean(self):
        super().clean()
        assert_same_organization(self, self.staff, 'staff')
        assert_same_organization(self, self.location, 'location')
        assert_same_organization(self, self.shift, 'shift')
        if self.clock_in and self.clock_out and self.clock_out < self.clock_in:
            raise ValidationError({'clock_out': 'Clock-out cannot be before clock-in.'})
