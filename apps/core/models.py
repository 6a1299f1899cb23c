"""
Core Models - Base classes and the tenant root
Multi-Tenancy: Organization → Location / Staff / everything else
"""

import uuid
from django.db import models
from django.conf import settings
from django.core.exceptions import ValidationError
import logging

logger = logging.getLogger(__name__)


class TimeStampedModel(models.Model):
    """Abstract base model with timestamps"""

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# ============================================================================
# ORGANIZATION MODEL - Core Multi-Tenancy
# ============================================================================

class Organization(TimeStampedModel):
    """Core tenant entity representing a healthcare organization."""

    PLAN_ESSENTIAL = 'ESSENTIAL'
    PLAN_PROFESSIONAL = 'PROFESSIONAL'
    PLAN_ENTERPRISE = 'ENTERPRISE'
    PLAN_CHOICES = [
        (PLAN_ESSENTIAL, 'Essential'),
        (PLAN_PROFESSIONAL, 'Professional'),
        (PLAN_ENTERPRISE, 'Enterprise'),
    ]

    VERIFICATION_UNVERIFIED = 'UNVERIFIED'
    VERIFICATION_PENDING = 'PENDING'
    VERIFICATION_VERIFIED = 'VERIFIED'
    VERIFICATION_REJECTED = 'REJECTED'
    VERIFICATION_CHOICES = [
        (VERIFICATION_UNVERIFIED, 'Unverified'),
        (VERIFICATION_PENDING, 'Pending Review'),
        (VERIFICATION_VERIFIED, 'Verified'),
        (VERIFICATION_REJECTED, 'Rejected'),
    ]

    ACCOUNT_ACTIVE = 'ACTIVE'
    ACCOUNT_SUSPENDED = 'SUSPENDED'
    ACCOUNT_CLOSED = 'CLOSED'
    ACCOUNT_STATUS_CHOICES = [
        (ACCOUNT_ACTIVE, 'Active'),
        (ACCOUNT_SUSPENDED, 'Suspended'),
        (ACCOUNT_CLOSED, 'Closed'),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="UUID - the ONLY key used for data isolation",
    )
    name = models.CharField(max_length=255, db_index=True)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True)
    county = models.CharField(max_length=100, blank=True)
    address = models.TextField(blank=True)

    plan = models.CharField(max_length=20, choices=PLAN_CHOICES, default=PLAN_PROFESSIONAL)
    # Per-organization overrides; null falls back to the plan limits table
    max_locations = models.PositiveIntegerField(null=True, blank=True)
    max_staff = models.PositiveIntegerField(null=True, blank=True)
    max_admins = models.PositiveIntegerField(null=True, blank=True)

    verification_status = models.CharField(
        max_length=20,
        choices=VERIFICATION_CHOICES,
        default=VERIFICATION_UNVERIFIED,
        db_index=True,
    )
    registration_number = models.CharField(max_length=100, blank=True)
    kra_pin = models.CharField(max_length=20, blank=True)
    verification_submitted_at = models.DateTimeField(null=True, blank=True)
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='verified_organizations',
    )
    rejection_reason = models.TextField(blank=True)

    account_status = models.CharField(
        max_length=20,
        choices=ACCOUNT_STATUS_CHOICES,
        default=ACCOUNT_ACTIVE,
        db_index=True,
    )
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = 'organizations'
        ordering = ['name']
        indexes = [
            models.Index(fields=['account_status', 'is_active'], name='org_status_active_idx'),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if not self.name or not self.name.strip():
            raise ValidationError("Organization name is required")


class AuditModel(models.Model):
    """Abstract model with audit fields"""

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(app_label)s_%(class)s_created'
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(app_label)s_%(class)s_updated'
    )

    class Meta:
        abstract = True


class OrganizationEntity(TimeStampedModel, AuditModel):
    """
    Tenant-scoped base model.

    Provides UUID PK, timestamps, audit fields, and the ``organization``
    FK used for tenant scoping.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    is_active = models.BooleanField(default=True, db_index=True)
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        db_index=True,
        related_name='%(app_label)s_%(class)s_set',
        help_text="Organization this record belongs to (primary isolation key)",
    )

    class Meta:
        abstract = True


class Location(OrganizationEntity):
    """A facility / clinic belonging to an organization."""

    name = models.CharField(max_length=255)
    address = models.TextField(blank=True)
    county = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    license_number = models.CharField(max_length=100, blank=True)
    is_primary = models.BooleanField(default=False)

    class Meta:
        db_table = 'locations'
        ordering = ['name']
        indexes = [
            models.Index(fields=['organization', 'is_active'], name='location_org_active_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.organization.name})"


def assert_same_organization(instance, related_obj, field_name):
    """Related objects must stay within the instance's organization."""
    if related_obj is not None and hasattr(related_obj, "organization_id"):
        if instance.organization_id and related_obj.organization_id != instance.organization_id:
            raise ValidationError({field_name: "Must belong to the same organization"})
