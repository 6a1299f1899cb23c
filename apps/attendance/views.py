"""
Attendance Views - clock in/out and manager corrections
"""

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.exceptions import ValidationException
from apps.core.throttling import ClockRateThrottle
from apps.core.viewsets import TenantScopedReadOnlyViewSet
from apps.roles.capabilities import Capability

from .models import AttendanceRecord
from .serializers import (
    AttendanceRecordSerializer,
    ClockInSerializer,
    ClockOutSerializer,
    EditRecordSerializer,
    ManualEntrySerializer,
)
from .services import AttendanceService


class AttendanceRecordViewSet(TenantScopedReadOnlyViewSet):
    """
    Attendance records.

    Staff see their own records; ``attendance`` holders see the whole
    organization and may add manual entries or correct records.
    """

    queryset = AttendanceRecord.objects.select_related('staff', 'location', 'shift')
    serializer_class = AttendanceRecordSerializer
    filterset_fields = {
        'staff': ['exact'],
        'location': ['exact'],
        'status': ['exact'],
        'date': ['exact', 'gte', 'lte'],
    }
    ordering_fields = ['date', 'clock_in']
    ordering = ['-date', '-clock_in']
    capability_map = {
        'manual': Capability.ATTENDANCE,
        'edit': Capability.ATTENDANCE,
        'summary': Capability.ATTENDANCE,
    }

    def get_queryset(self):
        qs = super().get_queryset()
        if self.ctx.has_capability(Capability.ATTENDANCE):
            return qs
        if self.ctx.staff is None:
            return qs.none()
        return qs.filter(staff=self.ctx.staff)

    @action(detail=False, methods=['post'], url_path='clock-in', throttle_classes=[ClockRateThrottle])
    def clock_in(self, request):
        serializer = ClockInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = AttendanceService.clock_in(self.ctx, **serializer.validated_data)
        return Response(AttendanceRecordSerializer(record).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'], url_path='clock-out', throttle_classes=[ClockRateThrottle])
    def clock_out(self, request):
        serializer = ClockOutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = serializer.validated_data.get('record')
        if record is not None and record.organization_id != self.ctx.organization_id:
            record = None
        if record is None and self.ctx.staff is not None:
            record = AttendanceService.open_record(self.ctx.staff)
        if record is None:
            raise ValidationException('No open attendance record found. Please clock in first.', field='record')
        record = AttendanceService.clock_out(self.ctx, record)
        return Response(AttendanceRecordSerializer(record).data)

    @action(detail=False, methods=['get'])
    def today(self, request):
        if self.ctx.staff is None:
            return Response(None)
        record = AttendanceService.open_record(self.ctx.staff)
        return Response(AttendanceRecordSerializer(record).data if record else None)

    @action(detail=False, methods=['get'])
    def summary(self, request):
        return Response(AttendanceService.daily_summary(
            self.ctx.organization, request.query_params.get('date'),
        ))

    @action(detail=False, methods=['post'])
    def manual(self, request):
        serializer = ManualEntrySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = AttendanceService.record_manual_entry(self.ctx, **serializer.validated_data)
        return Response(AttendanceRecordSerializer(record).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def edit(self, request, pk=None):
        serializer = EditRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        changes = dict(serializer.validated_data)
        reason = changes.pop('edit_reason', '')
        record = AttendanceService.edit_record(self.ctx, self.get_object(), reason, **changes)
        return Response(AttendanceRecordSerializer(record).data)
