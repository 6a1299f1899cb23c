"""
Payroll Views
"""

from rest_framework import mixins, permissions, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.billing.mixins import BillingAccessMixin
from apps.core.permissions import IsOrganizationMember
from apps.core.response import success_response
from apps.core.viewsets import ContextMixin, TenantScopedReadOnlyViewSet
from apps.roles.capabilities import Capability

from .models import PayrollEntry
from .serializers import CalculateSerializer, GenerateEntrySerializer, PayrollEntrySerializer
from .services import PayrollService, require_verified_organization
from .statutory import calculate_statutory_deductions


class PayrollEntryViewSet(mixins.CreateModelMixin, mixins.DestroyModelMixin, TenantScopedReadOnlyViewSet):
    """Payroll entries; everything except reading one's own payslips requires ``payroll``."""

    queryset = PayrollEntry.objects.select_related('staff')
    serializer_class = PayrollEntrySerializer
    filterset_fields = ['staff', 'status', 'period_start', 'period_end']
    ordering_fields = ['period_start', 'net']
    ordering = ['-period_start']
    write_capability = Capability.PAYROLL

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        if self.action in ('list', 'retrieve') and not self.ctx.has_capability(Capability.PAYROLL):
            require_verified_organization(self.ctx)

    def get_queryset(self):
        qs = super().get_queryset()
        if self.ctx.has_capability(Capability.PAYROLL):
            return qs
        if self.ctx.staff is None:
            return qs.none()
        return qs.filter(staff=self.ctx.staff).exclude(status=PayrollEntry.STATUS_DRAFT)

    def create(self, request, *args, **kwargs):
        serializer = GenerateEntrySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = PayrollService.generate_entry(self.ctx, **serializer.validated_data)
        return Response(PayrollEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    def perform_destroy(self, instance):
        PayrollService.delete_entry(self.ctx, instance)

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        entry = PayrollService.approve_entry(self.ctx, self.get_object())
        return Response(PayrollEntrySerializer(entry).data)

    @action(detail=True, methods=['post'], url_path='mark-paid')
    def mark_paid(self, request, pk=None):
        entry = PayrollService.mark_paid(self.ctx, self.get_object())
        return Response(PayrollEntrySerializer(entry).data)


class StatutoryCalculatorView(BillingAccessMixin, ContextMixin, APIView):
    """POST /payroll/calculate/ – statutory breakdown without saving anything."""

    permission_classes = [permissions.IsAuthenticated, IsOrganizationMember]

    def post(self, request):
        self.ctx.require_capability(Capability.PAYROLL)
        serializer = CalculateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        breakdown = calculate_statutory_deductions(**serializer.validated_data)
        return success_response(breakdown.as_dict())
