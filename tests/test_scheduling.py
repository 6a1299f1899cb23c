"""
Shift assignment rules
"""
from datetime import date

from django.test import TestCase

from apps.core.exceptions import PermissionDeniedException, ValidationException
from apps.leave.models import LeaveType
from apps.leave.services import LeaveService
from apps.roles.capabilities import Capability
from apps.scheduling.models import ShiftAssignment
from apps.scheduling.services import ScheduleService
from apps.staff.models import StaffMember

from .factories import LocationFactory, OrganizationFactory, ShiftFactory, StaffMemberFactory, make_context, make_member

SHIFT_DATE = date(2030, 5, 14)


class AssignStaffTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        _, self.scheduler = make_member(
            self.organization, StaffMember.ROLE_ADMIN,
            capabilities=[Capability.SCHEDULING, Capability.LEAVE],
        )
        self.ctx = make_context(self.scheduler)
        self.location = LocationFactory(organization=self.organization)
        self.shift = ShiftFactory(location=self.location, date=SHIFT_DATE, staff_needed=2)
        self.nurse = StaffMemberFactory(organization=self.organization)

    def test_assign_and_fill(self):
        ScheduleService.assign_staff(self.ctx, self.shift, staff=self.nurse)
        ScheduleService.assign_staff(self.ctx, self.shift, is_locum=True, locum_name='Dr. Kamau', locum_phone='0733111222')
        self.shift.refresh_from_db()
        self.assertTrue(self.shift.is_filled)
        self.assertEqual(list(ScheduleService.open_shifts(self.organization)), [])

        with self.assertRaises(ValidationException) as caught:
            ScheduleService.assign_staff(self.ctx, self.shift, staff=StaffMemberFactory(organization=self.organization))
        self.assertEqual(caught.exception.field, 'shift')
        self.assertEqual(ShiftAssignment.objects.filter(shift=self.shift).count(), 2)

    def test_locum_phone_normalized(self):
        assignment = ScheduleService.assign_staff(
            self.ctx, self.shift, is_locum=True, locum_name='Dr. Kamau', locum_phone='0733 111 222',
            locum_rate_cents=500000,
        )
        self.assertIsNone(assignment.staff)
        self.assertEqual(assignment.locum_phone, '+254733111222')

    def test_locum_needs_name(self):
        with self.assertRaises(ValidationException):
            ScheduleService.assign_staff(self.ctx, self.shift, is_locum=True, locum_name='  ')

    def test_duplicate_assignment_refused(self):
        ScheduleService.assign_staff(self.ctx, self.shift, staff=self.nurse)
        with self.assertRaises(ValidationException):
            ScheduleService.assign_staff(self.ctx, self.shift, staff=self.nurse)

    def test_staff_on_approved_leave_refused(self):
        annual = LeaveType.objects.get(organization=self.organization, name='Annual Leave')
        request = LeaveService.submit(
            self.ctx, staff=self.nurse, leave_type=annual,
            start_date=date(2030, 5, 13), end_date=date(2030, 5, 15),
        )
        LeaveService.approve(self.ctx, request)

        with self.assertRaises(ValidationException) as caught:
            ScheduleService.assign_staff(self.ctx, self.shift, staff=self.nurse)
        self.assertIn('approved leave', caught.exception.message)

    def test_archived_staff_refused(self):
        self.nurse.status = StaffMember.STATUS_ARCHIVED
        self.nurse.save()
        with self.assertRaises(ValidationException):
            ScheduleService.assign_staff(self.ctx, self.shift, staff=self.nurse)

    def test_staff_from_other_organization_refused(self):
        with self.assertRaises(ValidationException):
            ScheduleService.assign_staff(self.ctx, self.shift, staff=StaffMemberFactory())

    def test_employee_cannot_schedule(self):
        _, employee = make_member(self.organization)
        with self.assertRaises(PermissionDeniedException):
            ScheduleService.assign_staff(make_context(employee), self.shift, staff=self.nurse)

    def test_employee_with_scheduling_capability_can_schedule(self):
        _, shift_lead = make_member(self.organization, capabilities=[Capability.SCHEDULING])
        assignment = ScheduleService.assign_staff(make_context(shift_lead), self.shift, staff=self.nurse)
        self.assertEqual(assignment.staff, self.nurse)
        shift_lead.refresh_from_db()
        self.assertEqual(shift_lead.system_role, StaffMember.ROLE_EMPLOYEE)

    def test_staff_needed_cannot_drop_below_cover(self):
        ScheduleService.assign_staff(self.ctx, self.shift, staff=self.nurse)
        ScheduleService.assign_staff(self.ctx, self.shift, is_locum=True, locum_name='Dr. Kamau')
        with self.assertRaises(ValidationException):
            ScheduleService.update_shift(self.ctx, self.shift, staff_needed=1)

    def test_create_shift_rejects_foreign_location(self):
        with self.assertRaises(ValidationException):
            ScheduleService.create_shift(
                self.ctx, location=LocationFactory(), date=SHIFT_DATE,
                start_time=self.shift.start_time, end_time=self.shift.end_time,
            )

    def test_staff_schedule(self):
        ScheduleService.assign_staff(self.ctx, self.shift, staff=self.nurse)
        self.assertEqual(list(ScheduleService.staff_schedule(self.nurse)), [self.shift])
