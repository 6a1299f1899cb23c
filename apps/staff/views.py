"""Staff endpoints"""
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.response import success_response
from apps.core.throttling import InvitationAcceptThrottle
from apps.core.viewsets import ContextMixin, TenantScopedModelViewSet
from apps.roles.capabilities import Capability

from .models import StaffInvitation, StaffMember
from .serializers import (
    AcceptInvitationSerializer,
    AssignRoleSerializer,
    StaffInvitationSerializer,
    StaffMemberSerializer,
    StaffUpdateSerializer,
)
from .services import InvitationService, StaffService


class StaffMemberViewSet(TenantScopedModelViewSet):
    queryset = StaffMember.objects.select_related('location', 'custom_role')
    serializer_class = StaffMemberSerializer
    filterset_fields = ['status', 'system_role', 'location']
    search_fields = ['first_name', 'last_name', 'email', 'phone', 'job_title']
    ordering_fields = ['first_name', 'last_name', 'created_at']
    ordering = ['first_name', 'last_name']
    write_capability = Capability.STAFF_MANAGEMENT

    def get_serializer_class(self):
        if self.action in ('update', 'partial_update'):
            return StaffUpdateSerializer
        return super().get_serializer_class()

    def perform_create(self, serializer):
        data = dict(serializer.validated_data)
        serializer.instance = StaffService.create_staff(
            self.ctx,
            system_role=data.pop('system_role', StaffMember.ROLE_EMPLOYEE),
            capabilities=data.pop('capabilities', None),
            **data,
        )

    def perform_update(self, serializer):
        serializer.instance = StaffService.update_staff(
            self.ctx, serializer.instance, **serializer.validated_data,
        )

    def perform_destroy(self, instance):
        StaffService.archive_staff(self.ctx, instance)

    @action(detail=True, methods=['post'], url_path='assign-role')
    def assign_role(self, request, pk=None):
        serializer = AssignRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        staff = StaffService.assign_role(
            self.ctx,
            self.get_object(),
            serializer.validated_data['system_role'],
            capabilities=serializer.validated_data.get('capabilities'),
            custom_role=serializer.validated_data.get('custom_role'),
        )
        return Response(StaffMemberSerializer(staff).data)

    @action(detail=True, methods=['post'])
    def archive(self, request, pk=None):
        staff = StaffService.archive_staff(self.ctx, self.get_object())
        return Response(StaffMemberSerializer(staff).data)

    @action(detail=True, methods=['post'])
    def reactivate(self, request, pk=None):
        staff = StaffService.reactivate_staff(self.ctx, self.get_object())
        return Response(StaffMemberSerializer(staff).data)

    @action(detail=True, methods=['post'])
    def invite(self, request, pk=None):
        invitation = InvitationService.invite(self.ctx, self.get_object())
        return Response(StaffInvitationSerializer(invitation).data, status=status.HTTP_201_CREATED)


class AcceptInvitationView(APIView):
    """POST /staff/invitations/accept/ – public, token-authenticated."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    throttle_classes = [InvitationAcceptThrottle]

    def post(self, request):
        serializer = AcceptInvitationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = InvitationService.accept(**serializer.validated_data)
        return success_response({'email': user.email}, message='Invitation accepted. You can now sign in.')


class CancelInvitationView(ContextMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, invitation_id):
        invitation = get_object_or_404(
            StaffInvitation, pk=invitation_id, organization=self.ctx.organization,
        )
        invitation = InvitationService.cancel(self.ctx, invitation)
        return success_response(StaffInvitationSerializer(invitation).data, message='Invitation cancelled.')
