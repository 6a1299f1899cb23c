from rest_framework import serializers

from apps.core.models import Location
from apps.staff.models import StaffMember

from .models import Shift, ShiftAssignment


class ShiftAssignmentSerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source='staff.full_name', read_only=True, default=None)

    class Meta:
        model = ShiftAssignment
        fields = [
            'id', 'shift', 'staff', 'staff_name', 'is_locum', 'locum_name',
            'locum_phone', 'locum_rate_cents', 'supervisor', 'notes', 'created_at',
        ]
        read_only_fields = fields


class ShiftSerializer(serializers.ModelSerializer):
    location = serializers.PrimaryKeyRelatedField(queryset=Location.objects.filter(is_active=True))
    location_name = serializers.CharField(source='location.name', read_only=True)
    assignments = ShiftAssignmentSerializer(many=True, read_only=True)
    assigned_count = serializers.IntegerField(read_only=True)
    is_filled = serializers.BooleanField(read_only=True)

    class Meta:
        model = Shift
        fields = [
            'id', 'location', 'location_name', 'date', 'start_time', 'end_time',
            'role_required', 'staff_needed', 'notes', 'assignments',
            'assigned_count', 'is_filled', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class AssignStaffSerializer(serializers.Serializer):
    staff = serializers.PrimaryKeyRelatedField(
        queryset=StaffMember.objects.all(), required=False, allow_null=True,
    )
    is_locum = serializers.BooleanField(required=False, default=False)
    locum_name = serializers.CharField(required=False, allow_blank=True, default='')
    locum_phone = serializers.CharField(required=False, allow_blank=True, default='')
    locum_rate_cents = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    supervisor = serializers.PrimaryKeyRelatedField(
        queryset=StaffMember.objects.all(), required=False, allow_null=True,
    )
    notes = serializers.CharField(required=False, allow_blank=True, default='')
