from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import AcceptInvitationView, CancelInvitationView, StaffMemberViewSet

router = DefaultRouter()
router.register(r'members', StaffMemberViewSet, basename='staff-member')

urlpatterns = [
    path('invitations/accept/', AcceptInvitationView.as_view(), name='staff-invitation-accept'),
    path('invitations/<uuid:invitation_id>/cancel/', CancelInvitationView.as_view(), name='staff-invitation-cancel'),
    path('', include(router.urls)),
]
