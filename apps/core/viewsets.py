"""
Shared base ViewSet classes for all HURE apps.

Every tenant-scoped ModelViewSet should inherit from ``TenantScopedModelViewSet``
so that organisation isolation, the billing access gate, standard response
wrapping, filtering and capability enforcement come for free.
"""

from rest_framework import viewsets, filters
from rest_framework.permissions import IsAuthenticated
from django_filters.rest_framework import DjangoFilterBackend

from apps.billing.mixins import BillingAccessMixin
from apps.core.context import get_request_context
from apps.core.permissions import HasCapability


# ---------------------------------------------------------------------------
# Base ViewSet: wraps responses in the standard envelope
# ---------------------------------------------------------------------------

class StandardResponseMixin:
    """Wraps *non-paginated* responses in ``{success, data, message}``."""

    def finalize_response(self, request, response, *args, **kwargs):
        response = super().finalize_response(request, response, *args, **kwargs)
        if (
            hasattr(response, 'data')
            and response.data is not None
            and not isinstance(response.data, bytes)
            and response.status_code < 400
        ):
            data = response.data
            # Already wrapped by paginator or a helper
            if isinstance(data, dict) and 'success' in data:
                return response
            response.data = {
                'success': True,
                'data': data,
                'message': self._get_success_message(request, response),
            }
        return response

    def _get_success_message(self, request, response):
        messages = {
            'POST': 'Created successfully.',
            'PUT': 'Updated successfully.',
            'PATCH': 'Updated successfully.',
            'DELETE': 'Deleted successfully.',
        }
        return messages.get(request.method, 'OK')


class ContextMixin:
    """Exposes the explicit ``RequestContext`` for the current request."""

    @property
    def ctx(self):
        return get_request_context(self.request)


# ---------------------------------------------------------------------------
# Tenant-Scoped ModelViewSet
# ---------------------------------------------------------------------------

class TenantScopedModelViewSet(
    StandardResponseMixin,
    BillingAccessMixin,
    ContextMixin,
    viewsets.ModelViewSet,
):
    """
    ModelViewSet with built-in:

    • **Multi-tenancy**: filters the queryset by the caller's organization and
      injects it on create.
    • **Billing access gate**: suspended organizations are refused with 402
      outside the billing and verification areas.
    • **Capability enforcement**: per-action ``capability_map`` checked by
      ``HasCapability``.
    • **Standard response envelope**: ``{success, data, message}``.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    ordering = ['-created_at']

    # Subclasses set queryset, serializer_class, capability_map and
    # optionally read_capability / write_capability.
    capability_map = {}
    read_capability = None
    write_capability = None

    def get_queryset(self):
        qs = super().get_queryset()
        if getattr(self, 'swagger_fake_view', False):
            return qs.none()
        return qs.filter(organization=self.ctx.organization)

    def perform_create(self, serializer):
        kwargs = {'organization': self.ctx.organization}
        if hasattr(serializer.Meta.model, 'created_by_id'):
            kwargs['created_by'] = self.request.user
        serializer.save(**kwargs)

    def perform_update(self, serializer):
        kwargs = {}
        if hasattr(serializer.Meta.model, 'updated_by_id'):
            kwargs['updated_by'] = self.request.user
        serializer.save(**kwargs)

    def perform_destroy(self, instance):
        if hasattr(instance, 'is_active'):
            instance.is_active = False
            instance.save(update_fields=['is_active', 'updated_at'])
        else:
            instance.delete()


class TenantScopedReadOnlyViewSet(
    StandardResponseMixin,
    BillingAccessMixin,
    ContextMixin,
    viewsets.ReadOnlyModelViewSet,
):
    """Read-only tenant-scoped ViewSet (list + retrieve only)."""

    permission_classes = [IsAuthenticated, HasCapability]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    ordering = ['-created_at']
    capability_map = {}
    read_capability = None

    def get_queryset(self):
        qs = super().get_queryset()
        if getattr(self, 'swagger_fake_view', False):
            return qs.none()
        return qs.filter(organization=self.ctx.organization)
