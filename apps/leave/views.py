"""
Leave Views - types, balances, request workflow
"""

from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.viewsets import TenantScopedModelViewSet, TenantScopedReadOnlyViewSet
from apps.roles.capabilities import Capability

from .models import LeaveEntitlement, LeaveRequest, LeaveType
from .serializers import (
    LeaveApplySerializer,
    LeaveEntitlementSerializer,
    LeaveRejectSerializer,
    LeaveRequestSerializer,
    LeaveReviewSerializer,
    LeaveTypeSerializer,
)
from .services import LeaveService


class LeaveTypeViewSet(TenantScopedModelViewSet):
    queryset = LeaveType.objects.filter(is_active=True)
    serializer_class = LeaveTypeSerializer
    search_fields = ['name']
    ordering = ['name']
    write_capability = Capability.LEAVE


class LeaveEntitlementViewSet(mixins.UpdateModelMixin, TenantScopedReadOnlyViewSet):
    """Balances; employees only see their own, leave managers may adjust allocations."""

    queryset = LeaveEntitlement.objects.select_related('staff', 'leave_type')
    serializer_class = LeaveEntitlementSerializer
    filterset_fields = ['staff', 'leave_type', 'year']
    ordering = ['leave_type__name']
    capability_map = {
        'update': Capability.LEAVE,
        'partial_update': Capability.LEAVE,
    }

    def get_queryset(self):
        qs = super().get_queryset()
        if self.ctx.has_capability(Capability.LEAVE):
            return qs
        if self.ctx.staff is None:
            return qs.none()
        return qs.filter(staff=self.ctx.staff)

    @action(detail=False, methods=['get'])
    def mine(self, request):
        if self.ctx.staff is None:
            return Response([])
        year = request.query_params.get('year')
        balances = LeaveService.balances_for(self.ctx.staff, int(year) if year else None)
        return Response(LeaveEntitlementSerializer(balances, many=True).data)


class LeaveRequestViewSet(
    mixins.CreateModelMixin,
    TenantScopedReadOnlyViewSet,
):
    queryset = LeaveRequest.objects.select_related('staff', 'leave_type', 'reviewer')
    serializer_class = LeaveRequestSerializer
    filterset_fields = ['status', 'staff', 'leave_type']
    search_fields = ['staff__first_name', 'staff__last_name', 'reason']
    ordering_fields = ['start_date', 'end_date', 'status', 'created_at']
    capability_map = {
        'approve': Capability.LEAVE,
        'reject': Capability.LEAVE,
    }

    def get_serializer_class(self):
        if self.action == 'create':
            return LeaveApplySerializer
        return super().get_serializer_class()

    def get_queryset(self):
        qs = super().get_queryset()
        if self.ctx.has_capability(Capability.LEAVE):
            return qs
        if self.ctx.staff is None:
            return qs.none()
        return qs.filter(staff=self.ctx.staff)

    def create(self, request, *args, **kwargs):
        serializer = LeaveApplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        leave_request = LeaveService.submit(self.ctx, **serializer.validated_data)
        return Response(LeaveRequestSerializer(leave_request).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        serializer = LeaveReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        leave_request = LeaveService.approve(
            self.ctx, self.get_object(), comment=serializer.validated_data['comment'],
        )
        return Response(LeaveRequestSerializer(leave_request).data)

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        serializer = LeaveRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        leave_request = LeaveService.reject(
            self.ctx, self.get_object(), serializer.validated_data['reason'],
        )
        return Response(LeaveRequestSerializer(leave_request).data)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        leave_request = LeaveService.cancel(self.ctx, self.get_object())
        return Response(LeaveRequestSerializer(leave_request).data)
