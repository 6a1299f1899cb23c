"""
Authentication Serializers
"""

from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import User


class HureTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT serializer with tenant binding.
    Includes the organization_id and role claims; operators without an
    organization must be platform staff.
    """

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)

        if not user.is_superuser and not user.is_staff and not user.organization_id:
            raise AuthenticationFailed('User is not assigned to any organization')

        if user.organization_id:
            token['organization_id'] = str(user.organization_id)
        staff = getattr(user, 'staff_profile', None)
        token['role'] = staff.system_role if staff else None
        return token


class UserSerializer(serializers.ModelSerializer):
    role = serializers.SerializerMethodField()
    capabilities = serializers.SerializerMethodField()
    organization_name = serializers.CharField(source='organization.name', read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'phone',
            'organization', 'organization_name', 'role', 'capabilities',
            'is_staff', 'date_joined',
        ]
        read_only_fields = fields

    def get_role(self, obj):
        staff = getattr(obj, 'staff_profile', None)
        return staff.system_role if staff else None

    def get_capabilities(self, obj):
        staff = getattr(obj, 'staff_profile', None)
        return sorted(staff.effective_capabilities()) if staff else []
