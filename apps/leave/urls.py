"""
Leave URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import LeaveEntitlementViewSet, LeaveRequestViewSet, LeaveTypeViewSet

router = DefaultRouter()
router.register(r'types', LeaveTypeViewSet, basename='leave-type')
router.register(r'entitlements', LeaveEntitlementViewSet, basename='leave-entitlement')
router.register(r'requests', LeaveRequestViewSet, basename='leave-request')

urlpatterns = [
    path('', include(router.urls)),
]
