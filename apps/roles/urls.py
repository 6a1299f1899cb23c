from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import CapabilityListView, CustomRoleViewSet

router = DefaultRouter()
router.register(r'custom-roles', CustomRoleViewSet, basename='custom-role')

urlpatterns = [
    path('', include(router.urls)),
    path('capabilities/', CapabilityListView.as_view(), name='capability-list'),
]
