from rest_framework import viewsets
from rest_framework import status, filters
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView
from rest_framework.decorators import action
from drf_spectacular.utils import extend_schema

from utils.gencode import get_tokens_for_user
from utils.permissions import IsSuperAdmin
from users.models import User
from users.serializers import (
    UserSerializer, RegisterSerializer, LoginSerializer,
    UserMeSerializer, UserUpdateSerializer, ChangePasswordSerializer,
)


class UserViewset(viewsets.ModelViewSet):
    """User administration (role changes, deactivation) for superadmins."""
    queryset = User.objects.all().order_by("id")
    permission_classes = [IsSuperAdmin]
    serializer_class = UserSerializer
    filter_backends = [filters.SearchFilter]
    search_fields = ["username", "email", "name"]

    @action(detail=False, methods=["post"], url_path="me/change-password",
            permission_classes=[IsAuthenticated])
    def change_password(self, request):
        ser = ChangePasswordSerializer(data=request.data, context={"request": request})
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response({"message": "Password changed."}, status=status.HTTP_200_OK)


@extend_schema(
    request=RegisterSerializer,
    responses={201: dict},
    description="Create a learner account and return a JWT pair."
)
class RegisterView(APIView):
    permission_classes = [AllowAny]
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        return Response({
            "message": "User registered.",
            "user": UserMeSerializer(user).data,
            "tokens": get_tokens_for_user(user),
        }, status=status.HTTP_201_CREATED)


@extend_schema(
    request=LoginSerializer,
    responses={200: dict},
    description="Log in with username or email, returns a JWT pair."
)
class LoginView(APIView):
    permission_classes = [AllowAny]
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        tokens = get_tokens_for_user(user)

        return Response({
            "message": "Login successful",
            "tokens": tokens
        }, status=status.HTTP_200_OK)


class MeView(APIView):
    permission_classes = [IsAuthenticated]
    @extend_schema(responses=UserMeSerializer)
    def get(self, request):
        return Response(UserMeSerializer(request.user, context={"request": request}).data)

    @extend_schema(
        request=UserUpdateSerializer,
        responses=UserMeSerializer,
        description="Update the current user's display name / avatar.",
    )
    def patch(self, request):
        user = request.user
        ser = UserUpdateSerializer(
            user, data=request.data, partial=True, context={"request": request}
        )
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response(
            UserMeSerializer(user, context={"request": request}).data,
            status=status.HTTP_200_OK,
        )
