"""Closed set of capability tags that can be granted to staff."""
from django.db import models

from apps.core.exceptions import ValidationException


class Capability(models.TextChoices):
    STAFF_MANAGEMENT = 'staff_management', 'Staff Management'
    SCHEDULING = 'scheduling', 'Scheduling'
    ATTENDANCE = 'attendance', 'Attendance'
    LEAVE = 'leave', 'Leave'
    DOCUMENTS_AND_POLICIES = 'documents_and_policies', 'Documents & Policies'
    PAYROLL = 'payroll', 'Payroll'
    SETTINGS_ADMIN = 'settings_admin', 'Settings & Admin'
    REPORTS_ACCESS = 'reports_access', 'Reports Access'


ALL_CAPABILITIES = frozenset(Capability.values)


def validate_capabilities(values, field='capabilities'):
    """
    Return a sorted, de-duplicated list of capability values.

    Raises ``ValidationException`` on the first unknown tag.
    """
    if values is None:
        return []
    if isinstance(values, (str, bytes)) or not hasattr(values, '__iter__'):
        raise ValidationException('Capabilities must be a list.', field=field)

    cleaned = set()
    for value in values:
        value = str(value)
        if value not in ALL_CAPABILITIES:
            raise ValidationException(f"Unknown capability '{value}'.", field=field)
        cleaned.add(value)
    return sorted(cleaned)
