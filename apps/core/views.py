from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.billing.access import AppArea
from apps.billing.mixins import BillingAccessMixin
from apps.roles.capabilities import Capability

from .models import Location, Organization
from .permissions import IsOrganizationMember, IsPlatformStaff
from .response import success_response
from .serializers import (
    LocationSerializer,
    OrganizationSerializer,
    VerificationReviewSerializer,
    VerificationSubmitSerializer,
)
from .services import LocationService, OrganizationService, get_verification_state
from .viewsets import ContextMixin, TenantScopedModelViewSet


def api_404_view(request, exception=None):
    return JsonResponse(
        {'success': False, 'error': {'code': 404, 'message': 'Endpoint not found', 'details': {}}},
        status=404,
    )


class OrganizationAPIView(BillingAccessMixin, ContextMixin, APIView):
    permission_classes = [permissions.IsAuthenticated, IsOrganizationMember]


class CurrentOrganizationView(OrganizationAPIView):
    """GET/PATCH /core/organization/ – the caller's organization."""

    def get(self, request):
        return success_response(OrganizationSerializer(self.ctx.organization).data)

    def patch(self, request):
        self.ctx.require_capability(Capability.SETTINGS_ADMIN)
        serializer = OrganizationSerializer(self.ctx.organization, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success_response(serializer.data, message='Updated successfully.')


class OrganizationStatsView(OrganizationAPIView):
    """GET /core/organization/stats/ – location, staff and admin counts."""

    def get(self, request):
        return success_response(OrganizationService.get_stats(self.ctx.organization))


class VerificationView(OrganizationAPIView):
    """GET state / POST submit – reachable while suspended."""

    billing_area = AppArea.VERIFICATION

    def get(self, request):
        return success_response(get_verification_state(self.ctx.organization).as_dict())

    def post(self, request):
        serializer = VerificationSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        state = OrganizationService.submit_for_verification(self.ctx, **serializer.validated_data)
        return success_response(state.as_dict(), message='Verification submitted.')


class VerificationReviewView(APIView):
    """POST /core/organizations/<id>/verification/<approve|reject>/ – platform staff."""

    permission_classes = [permissions.IsAuthenticated, IsPlatformStaff]

    def post(self, request, organization_id, decision):
        organization = get_object_or_404(Organization, pk=organization_id)
        serializer = VerificationReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if decision == 'approve':
            state = OrganizationService.approve_verification(organization, request.user)
        elif decision == 'reject':
            state = OrganizationService.reject_verification(
                organization, request.user, serializer.validated_data.get('reason', ''),
            )
        else:
            return Response(
                {'success': False, 'error': {'code': 400, 'message': 'Unknown decision', 'details': {}}},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return success_response(state.as_dict())


class LocationViewSet(TenantScopedModelViewSet):
    queryset = Location.objects.filter(is_active=True)
    serializer_class = LocationSerializer
    search_fields = ['name', 'county']
    ordering_fields = ['name', 'created_at']
    ordering = ['name']
    write_capability = Capability.SETTINGS_ADMIN

    def perform_create(self, serializer):
        serializer.instance = LocationService.create_location(self.ctx, **serializer.validated_data)

    def perform_destroy(self, instance):
        LocationService.deactivate_location(self.ctx, instance)
