"""
Documents Models - policy documents and staff acknowledgements
"""

from django.db import models
from django.utils import timezone

from apps.core.models import OrganizationEntity, assert_same_organization


class PolicyDocument(OrganizationEntity):

    ASSIGN_ALL = 'ALL'
    ASSIGN_ROLES = 'ROLES'
    ASSIGN_INDIVIDUALS = 'INDIVIDUALS'
    ASSIGN_CHOICES = [
        (ASSIGN_ALL, 'All staff'),
        (ASSIGN_ROLES, 'Specific roles'),
        (ASSIGN_INDIVIDUALS, 'Specific staff'),
    ]

    CATEGORY_CHOICES = [
        ('POLICY', 'Policy'),
        ('PROCEDURE', 'Procedure'),
        ('CONTRACT', 'Contract'),
        ('TRAINING', 'Training'),
        ('OTHER', 'Other'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    file_url = models.URLField(max_length=500, blank=True)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='POLICY')
    assigned_to = models.CharField(max_length=20, choices=ASSIGN_CHOICES, default=ASSIGN_ALL)
    # System roles (OWNER/ADMIN/EMPLOYEE) or job titles
    assigned_roles = models.JSONField(default=list, blank=True)
    assigned_staff = models.ManyToManyField(
        'staff.StaffMember', blank=True, related_name='assigned_documents',
    )
    requires_acknowledgement = models.BooleanField(default=True)

    class Meta:
        db_table = 'policy_documents'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['organization', 'is_active'], name='policy_doc_org_active_idx'),
        ]

    def __str__(self):
        return self.title

    def is_assigned_to(self, staff):
        if staff is None or staff.organization_id != self.organization_id:
            return False
        if self.assigned_to == self.ASSIGN_ALL:
            return True
        if self.assigned_to == self.ASSIGN_ROLES:
            roles = set(self.assigned_roles or [])
            return staff.system_role in roles or (staff.job_title and staff.job_title in roles)
        return self.assigned_staff.filter(pk=staff.pk).exists()


class DocumentAcknowledgement(OrganizationEntity):

    document = models.ForeignKey(PolicyDocument, on_delete=models.CASCADE, related_name='acknowledgements')
    staff = models.ForeignKey(
        'staff.StaffMember', on_delete=models.CASCADE, related_name='document_acknowledgements',
    )
    acknowledged_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'document_acknowledgements'
        ordering = ['-acknowledged_at']
        constraints = [
            models.UniqueConstraint(fields=['document', 'staff'], name='uq_document_ack_staff'),
        ]

    def __str__(self):
        return f"{self.staff} acknowledged {self.document}"

    def clean(self):
        super().clean()
        assert_same_organization(self, self.document, 'document')
        assert_same_organization(self, self.staff, 'staff')
