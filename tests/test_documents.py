"""
Policy documents and acknowledgements
"""
from django.test import TestCase

from apps.core.exceptions import PermissionDeniedException, ValidationException
from apps.documents.models import DocumentAcknowledgement, PolicyDocument
from apps.documents.services import DocumentService
from apps.roles.capabilities import Capability
from apps.staff.models import StaffMember

from .factories import OrganizationFactory, PolicyDocumentFactory, make_context, make_member


class AcknowledgementTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        _, self.manager = make_member(
            self.organization, StaffMember.ROLE_ADMIN, capabilities=[Capability.DOCUMENTS_AND_POLICIES],
        )
        _, self.nurse = make_member(self.organization, job_title='Nurse')
        _, self.clerk = make_member(self.organization, job_title='Clerk')
        self.manager_ctx = make_context(self.manager)
        self.nurse_ctx = make_context(self.nurse)

    def test_acknowledge_is_idempotent(self):
        document = PolicyDocumentFactory(organization=self.organization)
        first, created = DocumentService.acknowledge(self.nurse_ctx, document)
        self.assertTrue(created)
        again, created = DocumentService.acknowledge(self.nurse_ctx, document)
        self.assertFalse(created)
        self.assertEqual(first.pk, again.pk)
        self.assertEqual(DocumentAcknowledgement.objects.filter(document=document).count(), 1)

    def test_unassigned_document_refused(self):
        document = DocumentService.create_document(
            self.manager_ctx, title='Controlled drugs SOP',
            assigned_to=PolicyDocument.ASSIGN_INDIVIDUALS, assigned_staff=[self.clerk],
        )
        with self.assertRaises(PermissionDeniedException):
            DocumentService.acknowledge(self.nurse_ctx, document)

    def test_archived_document_refused(self):
        document = PolicyDocumentFactory(organization=self.organization)
        DocumentService.archive_document(self.manager_ctx, document)
        with self.assertRaises(PermissionDeniedException):
            DocumentService.acknowledge(self.nurse_ctx, document)

    def test_document_without_acknowledgement(self):
        document = PolicyDocumentFactory(organization=self.organization, requires_acknowledgement=False)
        with self.assertRaises(ValidationException):
            DocumentService.acknowledge(self.nurse_ctx, document)

    def test_role_assignment_matches_job_title(self):
        document = DocumentService.create_document(
            self.manager_ctx, title='Triage protocol',
            assigned_to=PolicyDocument.ASSIGN_ROLES, assigned_roles=['Nurse'],
        )
        self.assertIn(document, DocumentService.documents_for_staff(self.nurse))
        self.assertNotIn(document, DocumentService.documents_for_staff(self.clerk))

    def test_roles_required_for_role_assignment(self):
        with self.assertRaises(ValidationException):
            DocumentService.create_document(
                self.manager_ctx, title='Triage protocol', assigned_to=PolicyDocument.ASSIGN_ROLES,
            )

    def test_employee_cannot_create(self):
        with self.assertRaises(PermissionDeniedException):
            DocumentService.create_document(self.nurse_ctx, title='Leave policy')

    def test_summary(self):
        document = PolicyDocumentFactory(organization=self.organization)
        DocumentService.acknowledge(self.nurse_ctx, document)
        summary = DocumentService.acknowledgement_summary(document)
        self.assertEqual(summary['assigned'], 3)
        self.assertEqual(summary['acknowledged'], 1)
        self.assertEqual(summary['pending'], 2)
        self.assertEqual(summary['completion_rate'], 33.3)
