"""
Core URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    CurrentOrganizationView,
    LocationViewSet,
    OrganizationStatsView,
    VerificationReviewView,
    VerificationView,
)

router = DefaultRouter()
router.register(r'locations', LocationViewSet, basename='location')

urlpatterns = [
    path('organization/', CurrentOrganizationView.as_view(), name='organization-current'),
    path('organization/stats/', OrganizationStatsView.as_view(), name='organization-stats'),
    path('organization/verification/', VerificationView.as_view(), name='organization-verification'),
    path(
        'organizations/<uuid:organization_id>/verification/<str:decision>/',
        VerificationReviewView.as_view(),
        name='organization-verification-review',
    ),
    path('', include(router.urls)),
]
