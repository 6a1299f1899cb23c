"""
Leave Serializers
"""

from rest_framework import serializers

from apps.staff.models import StaffMember

from .models import LeaveEntitlement, LeaveRequest, LeaveType


class LeaveTypeSerializer(serializers.ModelSerializer):
    is_unlimited = serializers.BooleanField(read_only=True)

    class Meta:
        model = LeaveType
        fields = [
            'id', 'name', 'default_days', 'is_paid', 'is_unlimited',
            'description', 'is_active', 'created_at',
        ]
        read_only_fields = ['id', 'is_active', 'created_at']


class LeaveEntitlementSerializer(serializers.ModelSerializer):
    leave_type_name = serializers.CharField(source='leave_type.name', read_only=True)
    staff_name = serializers.CharField(source='staff.full_name', read_only=True)
    remaining = serializers.DecimalField(max_digits=6, decimal_places=1, read_only=True)
    is_unlimited = serializers.BooleanField(source='leave_type.is_unlimited', read_only=True)

    class Meta:
        model = LeaveEntitlement
        fields = [
            'id', 'staff', 'staff_name', 'leave_type', 'leave_type_name', 'year',
            'allocated', 'used', 'pending', 'remaining', 'is_unlimited',
        ]
        read_only_fields = ['id', 'staff', 'leave_type', 'year', 'used', 'pending']


class LeaveRequestSerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source='staff.full_name', read_only=True)
    leave_type_name = serializers.CharField(source='leave_type.name', read_only=True)

    class Meta:
        model = LeaveRequest
        fields = [
            'id', 'staff', 'staff_name', 'leave_type', 'leave_type_name',
            'start_date', 'end_date', 'days', 'reason', 'is_paid', 'status',
            'reviewer', 'reviewed_at', 'review_comment', 'rejection_reason',
            'created_at',
        ]
        read_only_fields = fields


class LeaveApplySerializer(serializers.Serializer):
    leave_type = serializers.PrimaryKeyRelatedField(queryset=LeaveType.objects.filter(is_active=True))
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    staff = serializers.PrimaryKeyRelatedField(
        queryset=StaffMember.objects.all(), required=False, allow_null=True,
    )
    allow_over_balance = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if attrs['end_date'] < attrs['start_date']:
            raise serializers.ValidationError({'end_date': 'End date must be on or after start date.'})
        return attrs


class LeaveReviewSerializer(serializers.Serializer):
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class LeaveRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')
