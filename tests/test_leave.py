"""
Leave requests
==============
Inclusive day counting, balance reservation and the pending-only review rule.
"""
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from apps.core.exceptions import PermissionDeniedException, ValidationException
from apps.leave.models import LeaveEntitlement, LeaveRequest, LeaveType
from apps.leave.services import DEFAULT_LEAVE_TYPES, LeaveService, calculate_leave_days
from apps.roles.capabilities import Capability
from apps.staff.models import StaffMember

from .factories import OrganizationFactory, make_context, make_member

START = date(2030, 3, 4)
END = date(2030, 3, 8)


class LeaveDaysTests(SimpleTestCase):

    def test_inclusive_count(self):
        self.assertEqual(calculate_leave_days(START, START), 1)
        self.assertEqual(calculate_leave_days(START, END), 5)
        self.assertEqual(calculate_leave_days(date(2030, 2, 27), date(2030, 3, 2)), 4)

    def test_inverted_range(self):
        with self.assertRaises(ValidationException):
            calculate_leave_days(END, START)


class LeaveTestBase(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        _, self.manager = make_member(
            self.organization, StaffMember.ROLE_ADMIN, capabilities=[Capability.LEAVE],
        )
        _, self.nurse = make_member(self.organization)
        self.manager_ctx = make_context(self.manager)
        self.nurse_ctx = make_context(self.nurse)
        self.annual = LeaveType.objects.get(organization=self.organization, name='Annual Leave')

    def submit(self, **kwargs):
        params = {'leave_type': self.annual, 'start_date': START, 'end_date': END}
        params.update(kwargs)
        return LeaveService.submit(self.nurse_ctx, **params)

    def entitlement(self, leave_type=None):
        return LeaveEntitlement.objects.get(staff=self.nurse, leave_type=leave_type or self.annual, year=2030)


class SeededTypesTests(LeaveTestBase):

    def test_new_organization_gets_default_types(self):
        names = set(LeaveType.objects.filter(organization=self.organization).values_list('name', flat=True))
        self.assertEqual(names, {name for name, _, _ in DEFAULT_LEAVE_TYPES})
        self.assertTrue(LeaveType.objects.get(organization=self.organization, name='Unpaid Leave').is_unlimited)

    def test_balances_created_on_demand(self):
        balances = LeaveService.balances_for(self.nurse, 2030)
        annual = next(b for b in balances if b.leave_type_id == self.annual.id)
        self.assertEqual(annual.allocated, Decimal('21'))
        self.assertEqual(annual.remaining, Decimal('21'))


class SubmitTests(LeaveTestBase):

    def test_submit_reserves_pending_days(self):
        request = self.submit(reason='Family visit')
        self.assertEqual(request.status, LeaveRequest.STATUS_PENDING)
        self.assertEqual(request.days, Decimal('5'))
        entitlement = self.entitlement()
        self.assertEqual(entitlement.pending, Decimal('5'))
        self.assertEqual(entitlement.remaining, Decimal('16'))

    def test_over_balance_refused(self):
        with self.assertRaises(ValidationException) as caught:
            self.submit(end_date=date(2030, 4, 30))
        self.assertEqual(caught.exception.field, 'days')
        self.assertFalse(LeaveRequest.objects.exists())

    def test_over_balance_override_requires_leave_capability(self):
        with self.assertRaises(PermissionDeniedException):
            self.submit(end_date=date(2030, 4, 30), allow_over_balance=True)
        request = LeaveService.submit(
            self.manager_ctx, staff=self.nurse, leave_type=self.annual,
            start_date=START, end_date=date(2030, 4, 30), allow_over_balance=True,
        )
        self.assertEqual(request.days, Decimal('58'))

    def test_unlimited_type_skips_balance(self):
        unpaid = LeaveType.objects.get(organization=self.organization, name='Unpaid Leave')
        request = self.submit(leave_type=unpaid, end_date=date(2030, 6, 30))
        self.assertFalse(request.is_paid)

    def test_overlap_refused(self):
        self.submit()
        with self.assertRaises(ValidationException):
            self.submit(start_date=date(2030, 3, 8), end_date=date(2030, 3, 9))

    def test_employee_cannot_submit_for_colleague(self):
        _, colleague = make_member(self.organization)
        with self.assertRaises(PermissionDeniedException):
            LeaveService.submit(
                self.nurse_ctx, staff=colleague, leave_type=self.annual, start_date=START, end_date=END,
            )

    def test_foreign_leave_type_rejected(self):
        other = LeaveType.objects.filter(organization=OrganizationFactory()).first()
        with self.assertRaises(ValidationException):
            self.submit(leave_type=other)


class ReviewTests(LeaveTestBase):

    def setUp(self):
        super().setUp()
        self.request = self.submit()

    def test_approve_moves_days_to_used(self):
        request = LeaveService.approve(self.manager_ctx, self.request, comment='Enjoy')
        self.assertEqual(request.status, LeaveRequest.STATUS_APPROVED)
        self.assertEqual(request.review_comment, 'Enjoy')
        entitlement = self.entitlement()
        self.assertEqual(entitlement.pending, Decimal('0'))
        self.assertEqual(entitlement.used, Decimal('5'))
        self.assertTrue(LeaveService.is_staff_on_leave(self.nurse, date(2030, 3, 6)))
        self.assertFalse(LeaveService.is_staff_on_leave(self.nurse, date(2030, 3, 9)))

    def test_second_approval_refused(self):
        LeaveService.approve(self.manager_ctx, self.request)
        with self.assertRaises(ValidationException):
            LeaveService.approve(self.manager_ctx, self.request)
        self.assertEqual(self.entitlement().used, Decimal('5'))

    def test_reject_requires_reason(self):
        with self.assertRaises(ValidationException) as caught:
            LeaveService.reject(self.manager_ctx, self.request, '   ')
        self.assertEqual(caught.exception.field, 'reason')
        self.request.refresh_from_db()
        self.assertEqual(self.request.status, LeaveRequest.STATUS_PENDING)

    def test_reject_releases_pending(self):
        request = LeaveService.reject(self.manager_ctx, self.request, 'Short staffed that week')
        self.assertEqual(request.rejection_reason, 'Short staffed that week')
        self.assertEqual(self.entitlement().pending, Decimal('0'))

    def test_employee_cannot_approve(self):
        with self.assertRaises(PermissionDeniedException):
            LeaveService.approve(self.nurse_ctx, self.request)

    def test_requester_can_cancel_pending(self):
        request = LeaveService.cancel(self.nurse_ctx, self.request)
        self.assertEqual(request.status, LeaveRequest.STATUS_CANCELLED)
        self.assertEqual(self.entitlement().remaining, Decimal('21'))

    def test_colleague_cannot_cancel(self):
        _, colleague = make_member(self.organization)
        with self.assertRaises(PermissionDeniedException):
            LeaveService.cancel(make_context(colleague), self.request)
