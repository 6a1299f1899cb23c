from django.test import TestCase

from apps.core.exceptions import PermissionDeniedException, ValidationException
from apps.roles.capabilities import Capability
from apps.roles.models import CustomRole
from apps.roles.services import RoleService
from apps.staff.models import StaffMember

from .factories import OrganizationFactory, StaffMemberFactory, make_context, make_member


class CorrelationIdTests(TestCase):

    def test_incoming_id_echoed(self):
        response = self.client.get('/api/v1/health/', HTTP_X_CORRELATION_ID='req-123')
        self.assertEqual(response['X-Correlation-ID'], 'req-123')

    def test_invalid_id_replaced(self):
        response = self.client.get('/api/v1/health/', HTTP_X_CORRELATION_ID='bad id with spaces')
        self.assertNotEqual(response['X-Correlation-ID'], 'bad id with spaces')
        self.assertEqual(len(response['X-Correlation-ID']), 32)


class CustomRoleTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        _, owner = make_member(self.organization, StaffMember.ROLE_OWNER)
        self.ctx = make_context(owner)

    def test_create_and_rename(self):
        role = RoleService.create_role(self.ctx, name='Shift lead', capabilities=['scheduling', 'scheduling'])
        self.assertEqual(role.capabilities, ['scheduling'])
        role = RoleService.update_role(self.ctx, role, name='Rota lead', capabilities=['attendance'])
        self.assertEqual(role.name, 'Rota lead')
        self.assertEqual(role.capabilities, ['attendance'])

    def test_duplicate_name_case_insensitive(self):
        RoleService.create_role(self.ctx, name='Shift lead')
        with self.assertRaises(ValidationException):
            RoleService.create_role(self.ctx, name='shift LEAD')

    def test_delete_refused_while_assigned(self):
        role = RoleService.create_role(self.ctx, name='Shift lead', capabilities=['scheduling'])
        StaffMemberFactory(
            organization=self.organization, system_role=StaffMember.ROLE_ADMIN, custom_role=role,
        )
        with self.assertRaises(ValidationException):
            RoleService.delete_role(self.ctx, role)
        self.assertTrue(CustomRole.objects.filter(pk=role.pk).exists())

    def test_requires_settings_admin(self):
        _, admin = make_member(self.organization, StaffMember.ROLE_ADMIN, capabilities=[Capability.SCHEDULING])
        with self.assertRaises(PermissionDeniedException):
            RoleService.create_role(make_context(admin), name='Shift lead')
