"""
Scheduling Models - shifts and who covers them
"""

from django.core.exceptions import ValidationError
from django.db import models

from apps.core.models import Location, OrganizationEntity, assert_same_organization


class Shift(OrganizationEntity):
    """A dated block of cover needed at a location."""

    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name='shifts')
    date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    role_required = models.CharField(max_length=100, blank=True)
    staff_needed = models.PositiveSmallIntegerField(default=1)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'shifts'
        ordering = ['date', 'start_time']
        indexes = [
            models.Index(fields=['organization', 'date'], name='shift_org_date_idx'),
            models.Index(fields=['location', 'date'], name='shift_location_date_idx'),
        ]

    def __str__(self):
        return f"{self.location} {self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    def clean(self):
        super().clean()
        assert_same_organization(self, self.location, 'location')
        if self.staff_needed < 1:
            raise ValidationError({'staff_needed': 'At least one person is needed.'})

    @property
    def assigned_count(self):
        return self.assignments.count()

    @property
    def is_filled(self):
        return self.assigned_count >= self.staff_needed


class ShiftAssignment(OrganizationEntity):
    """Either a rostered staff member or an external locum."""

    shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name='assignments')
    staff = models.ForeignKey(
        'staff.StaffMember',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='shift_assignments',
    )
    is_locum = models.BooleanField(default=False)
    locum_name = models.CharField(max_length=150, blank=True)
    locum_phone = models.CharField(max_length=20, blank=True)
    locum_rate_cents = models.PositiveIntegerField(null=True, blank=True)
    supervisor = models.ForeignKey(
        'staff.StaffMember',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='supervised_assignments',
    )
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'shift_assignments'
        ordering = ['shift__date', 'shift__start_time']
        constraints = [
            models.UniqueConstraint(
                fields=['shift', 'staff'],
                condition=models.Q(staff__isnull=False),
                name='uq_shift_assignment_staff',
            ),
        ]

    def __str__(self):
        who = self.locum_name if self.is_locum else self.staff
        return f"{who} @ {self.shift}"

    def clean(self):
        super().clean()
        assert_same_organization(self, self.shift, 'shift')
        assert_same_organization(self, self.staff, 'staff')
