from rest_framework import serializers

from apps.staff.models import StaffMember

from .models import DocumentAcknowledgement, PolicyDocument


class PolicyDocumentSerializer(serializers.ModelSerializer):
    assigned_staff = serializers.PrimaryKeyRelatedField(
        queryset=StaffMember.objects.all(), many=True, required=False,
    )
    assigned_roles = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = PolicyDocument
        fields = [
            'id', 'title', 'description', 'file_url', 'category', 'assigned_to',
            'assigned_roles', 'assigned_staff', 'requires_acknowledgement',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at']


class MyDocumentSerializer(serializers.ModelSerializer):
    acknowledged_at = serializers.SerializerMethodField()

    class Meta:
        model = PolicyDocument
        fields = [
            'id', 'title', 'description', 'file_url', 'category',
            'requires_acknowledgement', 'acknowledged_at', 'created_at',
        ]

    def get_acknowledged_at(self, obj):
        acknowledged = self.context.get('acknowledged', {})
        return acknowledged.get(obj.pk)


class DocumentAcknowledgementSerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source='staff.full_name', read_only=True)
    document_title = serializers.CharField(source='document.title', read_only=True)

    class Meta:
        model = DocumentAcknowledgement
        fields = ['id', 'document', 'document_title', 'staff', 'staff_name', 'acknowledged_at']
        read_only_fields = fields
