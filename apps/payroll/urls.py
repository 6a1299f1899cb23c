from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import PayrollEntryViewSet, StatutoryCalculatorView

router = DefaultRouter()
router.register(r'entries', PayrollEntryViewSet, basename='payroll-entry')

urlpatterns = [
    path('calculate/', StatutoryCalculatorView.as_view(), name='payroll-calculate'),
    path('', include(router.urls)),
]
