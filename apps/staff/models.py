"""
Staff Models - staff records, system roles and invitations
"""

import secrets
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.core.models import Location, OrganizationEntity, assert_same_organization
from apps.roles.capabilities import ALL_CAPABILITIES


class StaffMember(OrganizationEntity):
    """A person on an organization's roster, optionally linked to a login."""

    ROLE_OWNER = 'OWNER'
    ROLE_ADMIN = 'ADMIN'
    ROLE_EMPLOYEE = 'EMPLOYEE'
    ROLE_CHOICES = [
        (ROLE_OWNER, 'Owner'),
        (ROLE_ADMIN, 'Admin'),
        (ROLE_EMPLOYEE, 'Employee'),
    ]
    SEAT_ROLES = (ROLE_OWNER, ROLE_ADMIN)

    STATUS_ACTIVE = 'ACTIVE'
    STATUS_INACTIVE = 'INACTIVE'
    STATUS_ARCHIVED = 'ARCHIVED'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
        (STATUS_ARCHIVED, 'Archived'),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='staff_profile',
    )
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    job_title = models.CharField(max_length=150, blank=True)
    location = models.ForeignKey(
        Location,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='staff',
    )
    system_role = models.CharField(
        max_length=20, choices=ROLE_CHOICES, default=ROLE_EMPLOYEE, db_index=True,
    )
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True,
    )
    capabilities = models.JSONField(default=list, blank=True)
    custom_role = models.ForeignKey(
        'roles.CustomRole',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='staff',
    )
    hire_date = models.DateField(null=True, blank=True)
    archived_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'staff'
        ordering = ['first_name', 'last_name']
        indexes = [
            models.Index(fields=['organization', 'status'], name='staff_org_status_idx'),
            models.Index(fields=['organization', 'system_role', 'status'], name='staff_org_role_status_idx'),
        ]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_seat_holder(self):
        return self.system_role in self.SEAT_ROLES

    def effective_capabilities(self):
        if self.system_role == self.ROLE_OWNER:
            return set(ALL_CAPABILITIES)
        granted = set(self.capabilities or [])
        if self.custom_role_id and self.custom_role.is_active:
            granted.update(self.custom_role.capabilities or [])
        return granted & ALL_CAPABILITIES

    def clean(self):
        super().clean()
        assert_same_organization(self, self.location, 'location')
        assert_same_organization(self, self.custom_role, 'custom_role')


def _invitation_token():
    return secrets.token_urlsafe(32)


class StaffInvitation(OrganizationEntity):
    """Email invitation for a staff member to create their login."""

    VALIDITY_DAYS = 7

    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    staff = models.ForeignKey(StaffMember, on_delete=models.CASCADE, related_name='invitations')
    email = models.EmailField()
    token = models.CharField(max_length=64, unique=True, default=_invitation_token)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    expires_at = models.DateTimeField()
    accepted_at = models.DateTimeField(null=True, blank=True)
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_staff_invitations',
    )

    class Meta:
        db_table = 'staff_invitations'
        ordering = ['-created_at']

    def __str__(self):
        return f"Invitation for {self.email} ({self.status})"

    def save(self, *args, **kwargs):
        if not self.expires_at:
            self.expires_at = timezone.now() + timedelta(days=self.VALIDITY_DAYS)
        super().save(*args, **kwargs)

    @property
    def is_expired(self):
        return timezone.now() >= self.expires_at
