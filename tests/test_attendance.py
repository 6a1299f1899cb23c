"""
Clock in / clock out
"""
from datetime import datetime, timedelta
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from apps.attendance.models import AttendanceRecord
from apps.attendance.services import AttendanceService, hours_between
from apps.core.exceptions import PermissionDeniedException, ValidationException
from apps.roles.capabilities import Capability
from apps.staff.models import StaffMember

from .factories import LocationFactory, OrganizationFactory, make_context, make_member

MORNING = timezone.make_aware(datetime(2030, 3, 4, 8, 0))


class HoursBetweenTests(SimpleTestCase):

    def test_rounding(self):
        self.assertEqual(hours_between(MORNING, MORNING + timedelta(hours=8)), Decimal('8.00'))
        self.assertEqual(hours_between(MORNING, MORNING + timedelta(minutes=20)), Decimal('0.33'))
        self.assertEqual(hours_between(MORNING, MORNING + timedelta(minutes=3)), Decimal('0.05'))

    def test_missing_bound(self):
        self.assertEqual(hours_between(MORNING, None), Decimal('0.00'))

    def test_negative(self):
        with self.assertRaises(ValidationException):
            hours_between(MORNING, MORNING - timedelta(minutes=1))


class ClockTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        self.location = LocationFactory(organization=self.organization)
        _, self.nurse = make_member(self.organization, location=self.location)
        self.ctx = make_context(self.nurse)

    def test_clock_in_then_out(self):
        record = AttendanceService.clock_in(self.ctx, now=MORNING)
        self.assertEqual(record.location, self.location)
        self.assertEqual(record.status, AttendanceRecord.STATUS_PRESENT)
        self.assertEqual(AttendanceService.open_record(self.nurse, MORNING.date()), record)

        record = AttendanceService.clock_out(self.ctx, record, now=MORNING + timedelta(hours=8, minutes=30))
        self.assertEqual(record.total_hours, Decimal('8.50'))
        self.assertIsNone(AttendanceService.open_record(self.nurse, MORNING.date()))

    def test_double_clock_in_refused(self):
        AttendanceService.clock_in(self.ctx, now=MORNING)
        with self.assertRaises(ValidationException):
            AttendanceService.clock_in(self.ctx, now=MORNING + timedelta(hours=1))
        self.assertEqual(AttendanceRecord.objects.filter(staff=self.nurse).count(), 1)

    def test_second_session_after_clock_out(self):
        record = AttendanceService.clock_in(self.ctx, now=MORNING)
        AttendanceService.clock_out(self.ctx, record, now=MORNING + timedelta(hours=4))
        AttendanceService.clock_in(self.ctx, now=MORNING + timedelta(hours=5))
        self.assertEqual(AttendanceRecord.objects.filter(staff=self.nurse).count(), 2)

    def test_double_clock_out_refused(self):
        record = AttendanceService.clock_in(self.ctx, now=MORNING)
        AttendanceService.clock_out(self.ctx, record, now=MORNING + timedelta(hours=1))
        with self.assertRaises(ValidationException):
            AttendanceService.clock_out(self.ctx, record, now=MORNING + timedelta(hours=2))

    def test_inactive_staff_cannot_clock_in(self):
        StaffMember.objects.filter(pk=self.nurse.pk).update(status=StaffMember.STATUS_INACTIVE)
        with self.assertRaises(ValidationException):
            AttendanceService.clock_in(make_context(self.nurse), now=MORNING)

    def test_colleague_cannot_clock_out_for_someone(self):
        record = AttendanceService.clock_in(self.ctx, now=MORNING)
        _, colleague = make_member(self.organization)
        with self.assertRaises(PermissionDeniedException):
            AttendanceService.clock_out(make_context(colleague), record)

    def test_foreign_location_refused(self):
        with self.assertRaises(ValidationException):
            AttendanceService.clock_in(self.ctx, location=LocationFactory(), now=MORNING)


class ManagerAttendanceTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory()
        _, manager = make_member(self.organization, StaffMember.ROLE_ADMIN, capabilities=[Capability.ATTENDANCE])
        _, self.nurse = make_member(self.organization)
        self.ctx = make_context(manager)

    def test_manual_entry_computes_hours(self):
        record = AttendanceService.record_manual_entry(
            self.ctx, date=MORNING.date(), status=AttendanceRecord.STATUS_PRESENT, staff=self.nurse,
            clock_in=MORNING, clock_out=MORNING + timedelta(hours=6),
        )
        self.assertTrue(record.is_manual_entry)
        self.assertEqual(record.total_hours, Decimal('6.00'))

    def test_locum_statuses(self):
        with self.assertRaises(ValidationException):
            AttendanceService.record_manual_entry(
                self.ctx, date=MORNING.date(), status=AttendanceRecord.STATUS_PRESENT, locum_name='Dr. Kamau',
            )
        record = AttendanceService.record_manual_entry(
            self.ctx, date=MORNING.date(), status=AttendanceRecord.STATUS_WORKED, locum_name='Dr. Kamau',
            total_hours='7.5',
        )
        self.assertEqual(record.total_hours, Decimal('7.50'))

    def test_edit_requires_reason_and_recomputes(self):
        record = AttendanceService.clock_in(make_context(self.nurse), now=MORNING)
        with self.assertRaises(ValidationException):
            AttendanceService.edit_record(self.ctx, record, '', clock_out=MORNING + timedelta(hours=2))
        record = AttendanceService.edit_record(
            self.ctx, record, 'Forgot to clock out', clock_out=MORNING + timedelta(hours=9),
        )
        self.assertEqual(record.total_hours, Decimal('9.00'))
        self.assertEqual(record.edit_reason, 'Forgot to clock out')

    def test_daily_summary(self):
        AttendanceService.clock_in(make_context(self.nurse), now=MORNING)
        summary = AttendanceService.daily_summary(self.organization, MORNING.date())
        self.assertEqual(summary['total'], 1)
        self.assertEqual(summary['clocked_in'], 1)
