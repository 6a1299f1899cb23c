from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ShiftAssignmentViewSet, ShiftViewSet

router = DefaultRouter()
router.register(r'shifts', ShiftViewSet, basename='shift')
router.register(r'assignments', ShiftAssignmentViewSet, basename='shift-assignment')

urlpatterns = [
    path('', include(router.urls)),
]
