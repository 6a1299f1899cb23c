from rest_framework import serializers

from apps.staff.models import StaffMember

from .models import PayrollEntry

MONEY = dict(max_digits=12, decimal_places=2, min_value=0)


class PayrollEntrySerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source='staff.full_name', read_only=True)

    class Meta:
        model = PayrollEntry
        fields = [
            'id', 'staff', 'staff_name', 'period_start', 'period_end',
            'basic', 'allowances', 'non_taxable_allowances',
            'unpaid_leave_days', 'unpaid_leave_deduction', 'gross', 'taxable',
            'paye', 'personal_relief', 'nssf', 'shif', 'housing_levy',
            'other_deductions', 'total_deductions', 'net',
            'status', 'approved_by', 'approved_at', 'paid_at', 'notes', 'created_at',
        ]
        read_only_fields = fields


class GenerateEntrySerializer(serializers.Serializer):
    staff = serializers.PrimaryKeyRelatedField(queryset=StaffMember.objects.all())
    period_start = serializers.DateField()
    period_end = serializers.DateField()
    basic = serializers.DecimalField(**MONEY)
    allowances = serializers.DecimalField(required=False, default=0, **MONEY)
    non_taxable_allowances = serializers.DecimalField(required=False, default=0, **MONEY)
    other_deductions = serializers.DecimalField(required=False, default=0, **MONEY)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class CalculateSerializer(serializers.Serializer):
    basic = serializers.DecimalField(**MONEY)
    allowances = serializers.DecimalField(required=False, default=0, **MONEY)
    non_taxable_allowances = serializers.DecimalField(required=False, default=0, **MONEY)
