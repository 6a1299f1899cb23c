"""
Attendance Serializers
"""

from rest_framework import serializers

from apps.core.models import Location
from apps.scheduling.models import Shift
from apps.staff.models import StaffMember

from .models import AttendanceRecord


class AttendanceRecordSerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source='staff.full_name', read_only=True, default=None)
    location_name = serializers.CharField(source='location.name', read_only=True, default=None)
    is_open = serializers.BooleanField(read_only=True)

    class Meta:
        model = AttendanceRecord
        fields = [
            'id', 'staff', 'staff_name', 'locum_name', 'location', 'location_name',
            'shift', 'date', 'clock_in', 'clock_out', 'total_hours', 'status',
            'is_open', 'is_manual_entry', 'notes', 'edit_reason', 'edited_by',
            'edited_at', 'created_at',
        ]
        read_only_fields = fields


class ClockInSerializer(serializers.Serializer):
    location = serializers.PrimaryKeyRelatedField(
        queryset=Location.objects.filter(is_active=True), required=False, allow_null=True,
    )
    shift = serializers.PrimaryKeyRelatedField(
        queryset=Shift.objects.all(), required=False, allow_null=True,
    )


class ClockOutSerializer(serializers.Serializer):
    record = serializers.PrimaryKeyRelatedField(
        queryset=AttendanceRecord.objects.all(), required=False, allow_null=True,
    )


class ManualEntrySerializer(serializers.Serializer):
    staff = serializers.PrimaryKeyRelatedField(
        queryset=StaffMember.objects.all(), required=False, allow_null=True,
    )
    locum_name = serializers.CharField(required=False, allow_blank=True, default='')
    location = serializers.PrimaryKeyRelatedField(
        queryset=Location.objects.all(), required=False, allow_null=True,
    )
    shift = serializers.PrimaryKeyRelatedField(
        queryset=Shift.objects.all(), required=False, allow_null=True,
    )
    date = serializers.DateField()
    status = serializers.ChoiceField(choices=AttendanceRecord.STATUS_CHOICES)
    clock_in = serializers.DateTimeField(required=False, allow_null=True)
    clock_out = serializers.DateTimeField(required=False, allow_null=True)
    total_hours = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True, min_value=0,
    )
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        clock_in, clock_out = attrs.get('clock_in'), attrs.get('clock_out')
        if clock_in and clock_out and clock_out < clock_in:
            raise serializers.ValidationError({'clock_out': 'Clock-out cannot be before clock-in.'})
        return attrs


class EditRecordSerializer(serializers.Serializer):
    clock_in = serializers.DateTimeField(required=False, allow_null=True)
    clock_out = serializers.DateTimeField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=AttendanceRecord.STATUS_CHOICES, required=False)
    total_hours = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True)
    edit_reason = serializers.CharField(required=False, allow_blank=True, default='')
