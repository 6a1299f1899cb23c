from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from rest_framework.test import APITestCase

from apps.core.exceptions import PermissionDeniedException, ValidationException
from apps.core.models import Organization
from apps.leave.models import LeaveType
from apps.leave.services import LeaveService
from apps.payroll.models import PayrollEntry
from apps.payroll.services import PayrollService, unpaid_leave_days
from apps.payroll.statutory import calculate_nssf, calculate_paye, calculate_statutory_deductions
from apps.roles.capabilities import Capability
from apps.staff.models import StaffMember
from tests.factories import OrganizationFactory, make_context, make_member


class StatutoryDeductionTests(SimpleTestCase):

    def test_mid_band_salary(self):
        result = calculate_statutory_deductions(50000)
        self.assertEqual(result.gross, Decimal('50000.00'))
        self.assertEqual(result.nssf, Decimal('1080.00'))
        self.assertEqual(result.shif, Decimal('1375.00'))
        self.assertEqual(result.housing_levy, Decimal('750.00'))
        self.assertEqual(result.paye_gross, Decimal('9783.35'))
        self.assertEqual(result.paye, Decimal('7383.35'))
        self.assertEqual(result.total_deductions, Decimal('10588.35'))
        self.assertEqual(result.net_pay, Decimal('39411.65'))

    def test_relief_never_makes_paye_negative(self):
        result = calculate_statutory_deductions(20000)
        self.assertEqual(result.paye_gross, Decimal('2000.00'))
        self.assertEqual(result.personal_relief, Decimal('2000.00'))
        self.assertEqual(result.paye, Decimal('0.00'))

    def test_nssf_tiers_and_cap(self):
        self.assertEqual(calculate_nssf(5000), (Decimal('300.00'), Decimal('0.00'), Decimal('300.00')))
        self.assertEqual(calculate_nssf(10000), (Decimal('360.00'), Decimal('240.00'), Decimal('600.00')))
        self.assertEqual(calculate_nssf(250000)[2], Decimal('1080.00'))

    def test_non_taxable_allowances_skip_paye_only(self):
        result = calculate_statutory_deductions(40000, non_taxable_allowances=5000)
        self.assertEqual(result.taxable, Decimal('40000.00'))
        self.assertEqual(result.paye, Decimal('4383.35'))
        self.assertEqual(result.shif, Decimal('1237.50'))

    def test_top_band(self):
        tax, bands = calculate_paye(900000)
        self.assertEqual(tax, Decimal('277283.35'))
        self.assertEqual(len(bands), 5)
        self.assertEqual(bands[-1][2], Decimal('35000.00'))

    def test_negative_pay_rejected(self):
        with self.assertRaises(ValueError):
            calculate_statutory_deductions(-1)


class PayrollEntryTests(TestCase):

    def setUp(self):
        self.organization = OrganizationFactory(verification_status=Organization.VERIFICATION_VERIFIED)
        _, self.officer = make_member(
            self.organization, StaffMember.ROLE_ADMIN, capabilities=[Capability.PAYROLL, Capability.LEAVE],
        )
        _, self.nurse = make_member(self.organization)
        self.ctx = make_context(self.officer)

    def generate(self, **kwargs):
        params = {
            'staff': self.nurse, 'period_start': date(2030, 6, 1), 'period_end': date(2030, 6, 30),
            'basic': 50000,
        }
        params.update(kwargs)
        return PayrollService.generate_entry(self.ctx, **params)

    def test_entry_stores_breakdown(self):
        entry = self.generate(other_deductions='500')
        self.assertEqual(entry.status, PayrollEntry.STATUS_DRAFT)
        self.assertEqual(entry.paye, Decimal('7383.35'))
        self.assertEqual(entry.total_deductions, Decimal('11088.35'))
        self.assertEqual(entry.net, Decimal('38911.65'))

    def test_duplicate_period_refused(self):
        self.generate()
        with self.assertRaises(ValidationException):
            self.generate(basic=60000)
        self.assertEqual(PayrollEntry.objects.count(), 1)

    def test_unpaid_leave_prorated(self):
        unpaid = LeaveType.objects.get(organization=self.organization, name='Unpaid Leave')
        request = LeaveService.submit(
            self.ctx, staff=self.nurse, leave_type=unpaid,
            start_date=date(2030, 5, 30), end_date=date(2030, 6, 3),
        )
        LeaveService.approve(self.ctx, request)

        self.assertEqual(unpaid_leave_days(self.nurse, date(2030, 6, 1), date(2030, 6, 30)), Decimal('3'))
        entry = self.generate(basic=30000)
        self.assertEqual(entry.unpaid_leave_deduction, Decimal('3000.00'))
        self.assertEqual(entry.gross, Decimal('27000.00'))

    def test_requires_payroll_capability(self):
        with self.assertRaises(PermissionDeniedException):
            PayrollService.generate_entry(
                make_context(self.nurse), staff=self.nurse,
                period_start=date(2030, 6, 1), period_end=date(2030, 6, 30), basic=1,
            )

    def test_approval_flow(self):
        entry = self.generate()
        PayrollService.approve_entry(self.ctx, entry)
        with self.assertRaises(ValidationException):
            PayrollService.delete_entry(self.ctx, entry)
        entry = PayrollService.mark_paid(self.ctx, entry)
        self.assertEqual(entry.status, PayrollEntry.STATUS_PAID)
        with self.assertRaises(ValidationException):
            PayrollService.approve_entry(self.ctx, entry)


class UnverifiedOrganizationPayrollTests(APITestCase):

    def setUp(self):
        self.organization = OrganizationFactory(verification_status=Organization.VERIFICATION_PENDING)
        _, self.officer = make_member(self.organization, StaffMember.ROLE_ADMIN, capabilities=[Capability.PAYROLL])
        self.nurse_user, self.nurse = make_member(self.organization)
        self.ctx = make_context(self.officer)
        entry = PayrollService.generate_entry(
            self.ctx, staff=self.nurse, period_start=date(2030, 6, 1), period_end=date(2030, 6, 30), basic=50000,
        )
        self.entry = PayrollService.approve_entry(self.ctx, entry)

    def test_approved_entry_cannot_be_paid_out(self):
        with self.assertRaises(PermissionDeniedException):
            PayrollService.mark_paid(self.ctx, self.entry)
        self.entry.refresh_from_db()
        self.assertEqual(self.entry.status, PayrollEntry.STATUS_APPROVED)

    def test_payout_allowed_after_verification(self):
        Organization.objects.filter(pk=self.organization.pk).update(
            verification_status=Organization.VERIFICATION_VERIFIED,
        )
        entry = PayrollService.mark_paid(make_context(self.officer), self.entry)
        self.assertEqual(entry.status, PayrollEntry.STATUS_PAID)

    def test_payslips_hidden_from_staff(self):
        self.client.force_authenticate(self.nurse_user)
        response = self.client.get('/api/v1/payroll/entries/')
        self.assertEqual(response.status_code, 403)
        self.assertFalse(response.json()['success'])

    def test_payroll_officer_can_still_prepare_entries(self):
        self.client.force_authenticate(self.officer.user)
        response = self.client.get('/api/v1/payroll/entries/')
        self.assertEqual(response.status_code, 200)
