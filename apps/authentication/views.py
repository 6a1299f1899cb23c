"""
Authentication Views
"""

from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from apps.core.response import success_response
from apps.core.throttling import LoginRateThrottle

from .serializers import HureTokenObtainPairSerializer, UserSerializer


class HureTokenObtainPairView(TokenObtainPairView):
    permission_classes = [AllowAny]
    serializer_class = HureTokenObtainPairSerializer
    throttle_classes = [LoginRateThrottle]


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return success_response(UserSerializer(request.user).data)
