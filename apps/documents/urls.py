from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import MyDocumentsView, PolicyDocumentViewSet

router = DefaultRouter()
router.register(r'policies', PolicyDocumentViewSet, basename='policy-document')

urlpatterns = [
    path('mine/', MyDocumentsView.as_view(), name='my-documents'),
    path('', include(router.urls)),
]
