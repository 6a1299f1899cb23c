"""
Documents Views
"""
from rest_framework import permissions, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.billing.mixins import BillingAccessMixin
from apps.core.permissions import IsOrganizationMember
from apps.core.response import success_response
from apps.core.viewsets import ContextMixin, TenantScopedModelViewSet
from apps.roles.capabilities import Capability

from .models import DocumentAcknowledgement, PolicyDocument
from .serializers import (
    DocumentAcknowledgementSerializer,
    MyDocumentSerializer,
    PolicyDocumentSerializer,
)
from .services import DocumentService


class PolicyDocumentViewSet(TenantScopedModelViewSet):
    queryset = PolicyDocument.objects.filter(is_active=True).prefetch_related('assigned_staff')
    serializer_class = PolicyDocumentSerializer
    filterset_fields = ['category', 'assigned_to', 'requires_acknowledgement']
    search_fields = ['title', 'description']
    read_capability = Capability.DOCUMENTS_AND_POLICIES
    write_capability = Capability.DOCUMENTS_AND_POLICIES
    capability_map = {
        'acknowledge': None,
        'summary': Capability.DOCUMENTS_AND_POLICIES,
    }

    def perform_create(self, serializer):
        serializer.instance = DocumentService.create_document(self.ctx, **serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = DocumentService.update_document(
            self.ctx, serializer.instance, **serializer.validated_data,
        )

    def perform_destroy(self, instance):
        DocumentService.archive_document(self.ctx, instance)

    @action(detail=True, methods=['post'])
    def acknowledge(self, request, pk=None):
        ack, created = DocumentService.acknowledge(self.ctx, self.get_object())
        return Response(
            DocumentAcknowledgementSerializer(ack).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        return Response(DocumentService.acknowledgement_summary(self.get_object()))


class MyDocumentsView(BillingAccessMixin, ContextMixin, APIView):
    """GET /documents/mine/ – documents assigned to the caller, with acknowledgement state."""

    permission_classes = [permissions.IsAuthenticated, IsOrganizationMember]

    def get(self, request):
        staff = self.ctx.staff
        if staff is None:
            return success_response([])
        documents = DocumentService.documents_for_staff(staff)
        acknowledged = dict(
            DocumentAcknowledgement.objects.filter(staff=staff).values_list('document_id', 'acknowledged_at')
        )
        data = MyDocumentSerializer(documents, many=True, context={'acknowledged': acknowledged}).data
        return success_response(data)
