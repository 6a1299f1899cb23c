from rest_framework import serializers

from .capabilities import Capability
from .models import CustomRole


class CustomRoleSerializer(serializers.ModelSerializer):
    capabilities = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = CustomRole
        fields = ['id', 'name', 'description', 'capabilities', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at']


class CapabilitySerializer(serializers.Serializer):
    value = serializers.ChoiceField(choices=Capability.choices)
    label = serializers.CharField()
