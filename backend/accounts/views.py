from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import IdentifierTokenObtainPairSerializer, MeSerializer


class CustomTokenObtainPairView(TokenObtainPairView):
    # identifier may be an email, a student number or a username
    serializer_class = IdentifierTokenObtainPairSerializer


class MeView(APIView):
    permission_classes = (permissions.IsAuthenticated,)

    def get(self, request):
        serializer = MeSerializer(request.user)
        return Response(serializer.data)
