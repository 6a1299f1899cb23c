from rest_framework import serializers

from .models import Location, Organization
from .phone import normalize_kenyan_phone


class OrganizationSerializer(serializers.ModelSerializer):
    """
    Organization Serializer

    Plan, limits, verification and account status are managed through the
    billing and verification endpoints, so they are read-only here.
    """

    class Meta:
        model = Organization
        fields = [
            'id', 'name', 'email', 'phone', 'county', 'address',
            'plan', 'max_locations', 'max_staff', 'max_admins',
            'verification_status', 'registration_number', 'kra_pin',
            'verification_submitted_at', 'verified_at', 'rejection_reason',
            'account_status', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'plan', 'max_locations', 'max_staff', 'max_admins',
            'verification_status', 'registration_number', 'kra_pin',
            'verification_submitted_at', 'verified_at', 'rejection_reason',
            'account_status', 'is_active', 'created_at', 'updated_at',
        ]

    def validate_phone(self, value):
        if not value:
            return value
        normalized = normalize_kenyan_phone(value)
        if not normalized:
            raise serializers.ValidationError('Enter a valid Kenyan phone number.')
        return normalized


class VerificationSubmitSerializer(serializers.Serializer):
    registration_number = serializers.CharField(max_length=100)
    kra_pin = serializers.CharField(max_length=20)


class VerificationReviewSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True)


class LocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Location
        fields = [
            'id', 'name', 'address', 'county', 'phone', 'license_number',
            'is_primary', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at']

    def validate_phone(self, value):
        if not value:
            return value
        normalized = normalize_kenyan_phone(value)
        if not normalized:
            raise serializers.ValidationError('Enter a valid Kenyan phone number.')
        return normalized
