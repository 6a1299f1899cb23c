"""Custom roles: named bundles of capabilities."""
from django.db import models

from apps.core.models import OrganizationEntity


class CustomRole(OrganizationEntity):
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    capabilities = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'custom_roles'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'name'],
                name='unique_custom_role_name_per_org',
            ),
        ]

    def __str__(self):
        return self.name
