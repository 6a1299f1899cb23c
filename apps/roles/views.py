"""Custom role endpoints"""
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsOrganizationMember
from apps.core.viewsets import TenantScopedModelViewSet

from .capabilities import Capability
from .models import CustomRole
from .serializers import CustomRoleSerializer
from .services import RoleService


class CustomRoleViewSet(TenantScopedModelViewSet):
    queryset = CustomRole.objects.all()
    serializer_class = CustomRoleSerializer
    search_fields = ['name']
    ordering_fields = ['name', 'created_at']
    ordering = ['name']
    write_capability = Capability.SETTINGS_ADMIN

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        role = RoleService.create_role(self.ctx, **serializer.validated_data)
        return Response(self.get_serializer(role).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        role = self.get_object()
        serializer = self.get_serializer(role, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        role = RoleService.update_role(self.ctx, role, **serializer.validated_data)
        return Response(self.get_serializer(role).data)

    def destroy(self, request, *args, **kwargs):
        RoleService.delete_role(self.ctx, self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)


class CapabilityListView(APIView):
    permission_classes = [IsOrganizationMember]

    def get(self, request):
        data = [{'value': value, 'label': label} for value, label in Capability.choices]
        return Response({'success': True, 'data': data, 'message': 'OK'})
