from rest_framework import serializers

from apps.core.models import Location
from apps.roles.models import CustomRole

from .models import StaffInvitation, StaffMember


class StaffMemberSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    effective_capabilities = serializers.SerializerMethodField()
    location_name = serializers.CharField(source='location.name', read_only=True, default=None)
    location = serializers.PrimaryKeyRelatedField(
        queryset=Location.objects.all(), required=False, allow_null=True,
    )

    class Meta:
        model = StaffMember
        fields = [
            'id', 'first_name', 'last_name', 'full_name', 'email', 'phone',
            'job_title', 'location', 'location_name', 'system_role', 'status',
            'capabilities', 'custom_role', 'effective_capabilities',
            'hire_date', 'archived_at', 'user', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'status', 'custom_role', 'archived_at', 'user', 'created_at', 'updated_at',
        ]

    def get_effective_capabilities(self, obj):
        return sorted(obj.effective_capabilities())


class StaffUpdateSerializer(StaffMemberSerializer):
    """Profile fields only; role changes go through ``assign-role``."""

    class Meta(StaffMemberSerializer.Meta):
        read_only_fields = StaffMemberSerializer.Meta.read_only_fields + ['system_role', 'capabilities']


class AssignRoleSerializer(serializers.Serializer):
    system_role = serializers.ChoiceField(choices=StaffMember.ROLE_CHOICES)
    capabilities = serializers.ListField(child=serializers.CharField(), required=False)
    custom_role = serializers.PrimaryKeyRelatedField(
        queryset=CustomRole.objects.all(), required=False, allow_null=True,
    )


class StaffInvitationSerializer(serializers.ModelSerializer):
    is_expired = serializers.BooleanField(read_only=True)

    class Meta:
        model = StaffInvitation
        fields = ['id', 'staff', 'email', 'status', 'expires_at', 'accepted_at', 'is_expired', 'created_at']
        read_only_fields = fields


class AcceptInvitationSerializer(serializers.Serializer):
    token = serializers.CharField()
    password = serializers.CharField(write_only=True, min_length=8)
