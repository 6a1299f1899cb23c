"""
Roster, roles and plan seats
============================
  1. Admin seats are checked under the organization lock before any write
  2. An organization always keeps at least one owner
  3. Capabilities come from the grant list plus an active custom role
  4. Invitations create a login linked to the staff record
"""
from datetime import timedelta

from django.core import mail
from django.utils import timezone
from django.test import TestCase

from apps.authentication.models import User
from apps.billing.services import UsageService
from apps.core.context import RequestContext
from apps.core.exceptions import PermissionDeniedException, SeatLimitExceeded, ValidationException
from apps.core.models import Location, Organization
from apps.core.services import LocationService, OrganizationService, normalize_verification_status
from apps.roles.capabilities import Capability, validate_capabilities
from apps.roles.models import CustomRole
from apps.staff.models import StaffInvitation, StaffMember
from apps.staff.services import InvitationService, StaffService

from .factories import (
    LocationFactory,
    OrganizationFactory,
    StaffMemberFactory,
    UserFactory,
    make_context,
    make_member,
)


class StaffTestBase(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        self.owner_user, self.owner = make_member(self.organization, StaffMember.ROLE_OWNER)
        self.ctx = make_context(self.owner)


class SeatLimitTests(StaffTestBase):

    def setUp(self):
        super().setUp()
        Organization.objects.filter(pk=self.organization.pk).update(max_admins=2)
        self.organization.refresh_from_db()
        self.ctx = make_context(self.owner)

    def test_promotion_refused_when_seats_full(self):
        StaffMemberFactory(
            organization=self.organization, system_role=StaffMember.ROLE_ADMIN,
            capabilities=[Capability.SCHEDULING],
        )
        employee = StaffMemberFactory(organization=self.organization)

        with self.assertRaises(SeatLimitExceeded) as caught:
            StaffService.assign_role(self.ctx, employee, StaffMember.ROLE_ADMIN, [Capability.LEAVE])

        self.assertEqual(caught.exception.extra, {'limit_type': 'admins', 'used': 2, 'max': 2})
        employee.refresh_from_db()
        self.assertEqual(employee.system_role, StaffMember.ROLE_EMPLOYEE)
        self.assertEqual(employee.capabilities, [])

    def test_archived_admins_free_their_seat(self):
        admin = StaffMemberFactory(
            organization=self.organization, system_role=StaffMember.ROLE_ADMIN,
            capabilities=[Capability.SCHEDULING],
        )
        StaffService.archive_staff(self.ctx, admin)
        employee = StaffMemberFactory(organization=self.organization)
        staff = StaffService.assign_role(self.ctx, employee, StaffMember.ROLE_ADMIN, [Capability.LEAVE])
        self.assertEqual(staff.system_role, StaffMember.ROLE_ADMIN)

    def test_reactivating_archived_admin_needs_a_seat(self):
        admin = StaffMemberFactory(
            organization=self.organization, system_role=StaffMember.ROLE_ADMIN,
            capabilities=[Capability.SCHEDULING],
        )
        StaffService.archive_staff(self.ctx, admin)
        StaffMemberFactory(
            organization=self.organization, system_role=StaffMember.ROLE_ADMIN,
            capabilities=[Capability.LEAVE],
        )
        with self.assertRaises(SeatLimitExceeded):
            StaffService.reactivate_staff(self.ctx, admin)
        admin.refresh_from_db()
        self.assertEqual(admin.status, StaffMember.STATUS_ARCHIVED)

    def test_changing_admin_capabilities_needs_no_new_seat(self):
        admin = StaffMemberFactory(
            organization=self.organization, system_role=StaffMember.ROLE_ADMIN,
            capabilities=[Capability.SCHEDULING],
        )
        staff = StaffService.assign_role(self.ctx, admin, StaffMember.ROLE_ADMIN, [Capability.PAYROLL])
        self.assertEqual(staff.capabilities, [Capability.PAYROLL])

    def test_staff_limit(self):
        Organization.objects.filter(pk=self.organization.pk).update(max_staff=1)
        ctx = make_context(self.owner)
        with self.assertRaises(SeatLimitExceeded) as caught:
            StaffService.create_staff(ctx, first_name='Achieng')
        self.assertEqual(caught.exception.limit_type, 'staff')
        self.assertEqual(StaffMember.objects.filter(organization=self.organization).count(), 1)


class RoleAssignmentTests(StaffTestBase):

    def test_admin_needs_at_least_one_capability(self):
        employee = StaffMemberFactory(organization=self.organization)
        with self.assertRaises(ValidationException) as caught:
            StaffService.assign_role(self.ctx, employee, StaffMember.ROLE_ADMIN, [])
        self.assertEqual(caught.exception.field, 'capabilities')

    def test_unknown_capability_rejected(self):
        with self.assertRaises(ValidationException):
            validate_capabilities(['scheduling', 'launch_missiles'])
        self.assertEqual(validate_capabilities(['leave', 'leave', 'attendance']), ['attendance', 'leave'])

    def test_demotion_to_employee_keeps_capabilities_and_frees_seat(self):
        admin = StaffMemberFactory(
            organization=self.organization, system_role=StaffMember.ROLE_ADMIN,
            capabilities=[Capability.SCHEDULING],
        )
        staff = StaffService.assign_role(self.ctx, admin, StaffMember.ROLE_EMPLOYEE)
        self.assertEqual(staff.capabilities, [Capability.SCHEDULING])
        self.assertEqual(staff.effective_capabilities(), {Capability.SCHEDULING})
        self.assertEqual(UsageService.check_admin_seat_availability(self.organization).used, 1)

    def test_demotion_can_replace_capabilities(self):
        admin = StaffMemberFactory(
            organization=self.organization, system_role=StaffMember.ROLE_ADMIN,
            capabilities=[Capability.SCHEDULING, Capability.PAYROLL],
        )
        staff = StaffService.assign_role(self.ctx, admin, StaffMember.ROLE_EMPLOYEE, [])
        self.assertEqual(staff.capabilities, [])

    def test_employee_granted_scheduling_without_using_a_seat(self):
        Organization.objects.filter(pk=self.organization.pk).update(max_admins=1)
        user, staff = make_member(self.organization)
        staff = StaffService.assign_role(
            make_context(self.owner), staff, StaffMember.ROLE_EMPLOYEE, [Capability.SCHEDULING],
        )
        self.assertEqual(staff.system_role, StaffMember.ROLE_EMPLOYEE)

        ctx = RequestContext.for_user(User.objects.get(pk=user.pk))
        self.assertFalse(ctx.is_admin)
        self.assertTrue(ctx.has_capability(Capability.SCHEDULING))
        self.assertFalse(ctx.has_capability(Capability.PAYROLL))
        with self.assertRaises(PermissionDeniedException):
            ctx.require_admin()

    def test_employee_capabilities_validated(self):
        staff = StaffMemberFactory(organization=self.organization)
        with self.assertRaises(ValidationException):
            StaffService.assign_role(self.ctx, staff, StaffMember.ROLE_EMPLOYEE, ['launch_missiles'])

    def test_last_owner_cannot_be_demoted_or_archived(self):
        with self.assertRaises(ValidationException):
            StaffService.assign_role(self.ctx, self.owner, StaffMember.ROLE_EMPLOYEE)
        with self.assertRaises(ValidationException):
            StaffService.archive_staff(self.ctx, self.owner)
        self.owner.refresh_from_db()
        self.assertEqual(self.owner.system_role, StaffMember.ROLE_OWNER)

    def test_owner_demoted_when_another_owner_exists(self):
        StaffMemberFactory(organization=self.organization, system_role=StaffMember.ROLE_OWNER)
        staff = StaffService.assign_role(
            self.ctx, self.owner, StaffMember.ROLE_ADMIN, [Capability.STAFF_MANAGEMENT],
        )
        self.assertEqual(staff.system_role, StaffMember.ROLE_ADMIN)

    def test_admin_cannot_touch_owner_roles(self):
        _, admin = make_member(
            self.organization, StaffMember.ROLE_ADMIN, capabilities=[Capability.STAFF_MANAGEMENT],
        )
        employee = StaffMemberFactory(organization=self.organization)
        with self.assertRaises(ValidationException):
            StaffService.assign_role(make_context(admin), employee, StaffMember.ROLE_OWNER)

    def test_admin_without_staff_management_denied(self):
        _, admin = make_member(self.organization, StaffMember.ROLE_ADMIN, capabilities=[Capability.LEAVE])
        with self.assertRaises(PermissionDeniedException):
            StaffService.create_staff(make_context(admin), first_name='Otieno')

    def test_custom_role_grants_capabilities(self):
        role = CustomRole.objects.create(
            organization=self.organization, name='Rota lead',
            capabilities=[Capability.SCHEDULING, Capability.ATTENDANCE],
        )
        user, staff = make_member(self.organization)
        StaffService.assign_role(self.ctx, staff, StaffMember.ROLE_ADMIN, custom_role=role)

        ctx = RequestContext.for_user(User.objects.get(pk=user.pk))
        self.assertTrue(ctx.is_admin)
        self.assertTrue(ctx.has_capability(Capability.SCHEDULING))
        self.assertFalse(ctx.has_capability(Capability.PAYROLL))

        role.is_active = False
        role.save()
        self.assertFalse(RequestContext.for_user(User.objects.get(pk=user.pk)).has_capability(Capability.SCHEDULING))

    def test_owner_holds_every_capability(self):
        for capability in Capability.values:
            self.assertTrue(self.ctx.has_capability(capability))

    def test_create_staff_normalizes_phone(self):
        staff = StaffService.create_staff(self.ctx, first_name='Akinyi', phone='0722 000 111')
        self.assertEqual(staff.phone, '+254722000111')
        with self.assertRaises(ValidationException):
            StaffService.create_staff(self.ctx, first_name='Akinyi', phone='12')

    def test_location_from_other_organization_rejected(self):
        foreign = LocationFactory()
        with self.assertRaises(ValidationException):
            StaffService.create_staff(self.ctx, first_name='Mwangi', location=foreign)


class InvitationTests(StaffTestBase):

    def setUp(self):
        super().setUp()
        self.staff = StaffMemberFactory(organization=self.organization, email='nurse@clinic.co.ke')

    def test_invite_sends_email_and_accept_links_login(self):
        with self.captureOnCommitCallbacks(execute=True):
            invitation = InvitationService.invite(self.ctx, self.staff)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(invitation.token, mail.outbox[0].body)

        user = InvitationService.accept(invitation.token, 'a-strong-password')
        self.assertTrue(user.check_password('a-strong-password'))
        self.assertEqual(user.organization_id, self.organization.id)
        self.staff.refresh_from_db()
        self.assertEqual(self.staff.user_id, user.pk)
        invitation.refresh_from_db()
        self.assertEqual(invitation.status, StaffInvitation.STATUS_ACCEPTED)

    def test_token_is_single_use(self):
        invitation = InvitationService.invite(self.ctx, self.staff)
        InvitationService.accept(invitation.token, 'a-strong-password')
        with self.assertRaises(ValidationException):
            InvitationService.accept(invitation.token, 'another-password')

    def test_expired_invitation(self):
        invitation = InvitationService.invite(self.ctx, self.staff)
        StaffInvitation.objects.filter(pk=invitation.pk).update(expires_at=timezone.now() - timedelta(minutes=1))
        with self.assertRaises(ValidationException):
            InvitationService.accept(invitation.token, 'a-strong-password')

    def test_short_password(self):
        invitation = InvitationService.invite(self.ctx, self.staff)
        with self.assertRaises(ValidationException) as caught:
            InvitationService.accept(invitation.token, 'short')
        self.assertEqual(caught.exception.field, 'password')

    def test_reinvite_cancels_previous(self):
        first = InvitationService.invite(self.ctx, self.staff)
        InvitationService.invite(self.ctx, self.staff)
        first.refresh_from_db()
        self.assertEqual(first.status, StaffInvitation.STATUS_CANCELLED)

    def test_staff_with_login_cannot_be_invited(self):
        _, linked = make_member(self.organization)
        with self.assertRaises(ValidationException):
            InvitationService.invite(self.ctx, linked)


class VerificationTests(StaffTestBase):

    def setUp(self):
        super().setUp()
        self.reviewer = UserFactory(organization=None, is_staff=True)

    def test_submit_then_approve(self):
        state = OrganizationService.submit_for_verification(self.ctx, 'PVT-123', 'p051234567x')
        self.assertEqual(state.status, Organization.VERIFICATION_PENDING)
        self.assertFalse(state.can_submit)
        self.organization.refresh_from_db()
        self.assertEqual(self.organization.kra_pin, 'P051234567X')

        state = OrganizationService.approve_verification(self.organization, self.reviewer)
        self.assertTrue(state.is_verified)

    def test_pending_cannot_resubmit(self):
        OrganizationService.submit_for_verification(self.ctx, 'PVT-123', 'P051234567X')
        self.organization.refresh_from_db()
        with self.assertRaises(ValidationException):
            OrganizationService.submit_for_verification(make_context(self.owner), 'PVT-123', 'P051234567X')

    def test_reject_requires_reason_and_allows_resubmission(self):
        OrganizationService.submit_for_verification(self.ctx, 'PVT-123', 'P051234567X')
        with self.assertRaises(ValidationException):
            OrganizationService.reject_verification(self.organization, self.reviewer, '  ')
        state = OrganizationService.reject_verification(self.organization, self.reviewer, 'KRA PIN mismatch')
        self.assertEqual(state.rejection_reason, 'KRA PIN mismatch')
        self.assertTrue(state.can_submit)

    def test_tenant_user_cannot_review(self):
        OrganizationService.submit_for_verification(self.ctx, 'PVT-123', 'P051234567X')
        with self.assertRaises(PermissionDeniedException):
            OrganizationService.approve_verification(self.organization, self.owner_user)

    def test_legacy_status_spellings(self):
        self.assertEqual(normalize_verification_status('approved'), Organization.VERIFICATION_VERIFIED)
        self.assertEqual(normalize_verification_status('Pending_Review'), Organization.VERIFICATION_PENDING)
        self.assertEqual(normalize_verification_status(None), Organization.VERIFICATION_UNVERIFIED)


class LocationLimitTests(StaffTestBase):

    def test_first_location_is_primary_and_limit_enforced(self):
        first = LocationService.create_location(self.ctx, name='Main clinic')
        second = LocationService.create_location(self.ctx, name='Westlands')
        self.assertTrue(first.is_primary)
        self.assertFalse(second.is_primary)

        with self.assertRaises(SeatLimitExceeded):
            LocationService.create_location(self.ctx, name='Kisumu')
        self.assertEqual(Location.objects.filter(organization=self.organization).count(), 2)

    def test_inactive_locations_do_not_count(self):
        first = LocationService.create_location(self.ctx, name='Main clinic')
        LocationService.create_location(self.ctx, name='Westlands')
        LocationService.deactivate_location(self.ctx, first)
        LocationService.create_location(self.ctx, name='Kisumu')

    def test_stats(self):
        LocationFactory(organization=self.organization)
        StaffMemberFactory(organization=self.organization, status=StaffMember.STATUS_ARCHIVED)
        stats = OrganizationService.get_stats(self.organization)
        self.assertEqual(stats['locations_count'], 1)
        self.assertEqual(stats['staff_count'], 1)
        self.assertEqual(stats['admins_count'], 1)
        self.assertEqual(stats['max_admins'], 5)
