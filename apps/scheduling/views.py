"""
Scheduling Views
"""
from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.viewsets import TenantScopedModelViewSet, TenantScopedReadOnlyViewSet
from apps.roles.capabilities import Capability

from .models import Shift, ShiftAssignment
from .serializers import AssignStaffSerializer, ShiftAssignmentSerializer, ShiftSerializer
from .services import ScheduleService


class ShiftViewSet(TenantScopedModelViewSet):
    queryset = Shift.objects.select_related('location').prefetch_related('assignments__staff')
    serializer_class = ShiftSerializer
    filterset_fields = {
        'location': ['exact'],
        'date': ['exact', 'gte', 'lte'],
    }
    ordering_fields = ['date', 'start_time']
    ordering = ['date', 'start_time']
    write_capability = Capability.SCHEDULING
    capability_map = {'assign': Capability.SCHEDULING}

    def perform_create(self, serializer):
        serializer.instance = ScheduleService.create_shift(self.ctx, **serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = ScheduleService.update_shift(
            self.ctx, serializer.instance, **serializer.validated_data,
        )

    def perform_destroy(self, instance):
        ScheduleService.delete_shift(self.ctx, instance)

    @action(detail=False, methods=['get'])
    def open(self, request):
        shifts = ScheduleService.open_shifts(self.ctx.organization, request.query_params.get('start_date'))
        return Response(ShiftSerializer(shifts, many=True).data)

    @action(detail=False, methods=['get'])
    def mine(self, request):
        if self.ctx.staff is None:
            return Response([])
        shifts = ScheduleService.staff_schedule(
            self.ctx.staff,
            request.query_params.get('start_date'),
            request.query_params.get('end_date'),
        )
        return Response(ShiftSerializer(shifts, many=True).data)

    @action(detail=True, methods=['post'])
    def assign(self, request, pk=None):
        serializer = AssignStaffSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment = ScheduleService.assign_staff(self.ctx, self.get_object(), **serializer.validated_data)
        return Response(ShiftAssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)


class ShiftAssignmentViewSet(mixins.DestroyModelMixin, TenantScopedReadOnlyViewSet):
    queryset = ShiftAssignment.objects.select_related('shift', 'staff')
    serializer_class = ShiftAssignmentSerializer
    filterset_fields = ['shift', 'staff', 'is_locum']
    capability_map = {'destroy': Capability.SCHEDULING}

    def perform_destroy(self, instance):
        ScheduleService.remove_assignment(self.ctx, instance)
