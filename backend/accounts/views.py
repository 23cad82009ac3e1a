# accounts/views.py
"""
Authentication and membership views.

Mutations go through accounts.commands; views only parse input and
format responses.
"""

from django.http import Http404
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from .authz import require, resolve_actor
from .commands import (
    add_user_to_company,
    deactivate_membership,
    register_signup,
    switch_active_company,
    update_membership_role,
)
from .models import CompanyMembership, Permission
from .serializers import (
    CompanySerializer,
    EmailTokenObtainPairSerializer,
    MembershipCreateSerializer,
    MembershipRoleSerializer,
    MembershipSerializer,
    PermissionSerializer,
    RegistrationSerializer,
    SwitchCompanySerializer,
    UserSerializer,
    tokens_for,
)
from .throttles import LoginThrottle, RegistrationThrottle


# =============================================================================
# Authentication
# =============================================================================

class RegisterView(APIView):
    """POST /api/auth/register/ -> create user + company, return JWT pair."""
    permission_classes = [permissions.AllowAny]
    throttle_classes = [RegistrationThrottle]

    def post(self, request):
        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = register_signup(**serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        user = result.data["user"]
        return Response(
            {
                "user": UserSerializer(user).data,
                "company": CompanySerializer(result.data["company"]).data,
                **tokens_for(user),
            },
            status=status.HTTP_201_CREATED,
        )


class LoginView(generics.GenericAPIView):
    serializer_class = EmailTokenObtainPairSerializer
    permission_classes = [permissions.AllowAny]
    throttle_classes = [LoginThrottle]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(serializer.validated_data, status=status.HTTP_200_OK)


class LogoutView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        refresh_token = request.data.get("refresh")
        if not refresh_token:
            return Response({"detail": "Yenileme anahtarı gerekli."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            token = RefreshToken(refresh_token)
            token.blacklist()
        except TokenError:
            return Response({"detail": "Geçersiz anahtar."}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(APIView):
    """GET /api/auth/me/ -> user, active company, role and permissions."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        user = request.user
        data = {"user": UserSerializer(user).data, "company": None, "role": None, "permissions": []}

        membership = None
        if user.active_company_id:
            membership = CompanyMembership.objects.filter(
                user=user, company_id=user.active_company_id, is_active=True,
            ).select_related("company").first()
        if membership:
            data["company"] = CompanySerializer(membership.company).data
            data["role"] = membership.role
            data["permissions"] = sorted(membership.permissions.values_list("code", flat=True))

        data["companies"] = [
            {"id": m.company_id, "name": m.company.name, "role": m.role}
            for m in CompanyMembership.objects.filter(user=user, is_active=True).select_related("company")
        ]
        return Response(data)


class SwitchCompanyView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = SwitchCompanySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = switch_active_company(request.user, serializer.validated_data["company_id"])
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result.data)


# =============================================================================
# Memberships
# =============================================================================

class MembershipListCreateView(APIView):
    """
    GET /api/memberships/ -> members of the active company
    POST /api/memberships/ -> add a member (creates the user if needed)
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "company.view")

        memberships = CompanyMembership.objects.filter(
            company=actor.company,
        ).select_related("user", "company").prefetch_related("permissions").order_by("joined_at")
        return Response(MembershipSerializer(memberships, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = MembershipCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = add_user_to_company(actor, **serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(MembershipSerializer(result.data).data, status=status.HTTP_201_CREATED)


class MembershipRoleView(APIView):
    """PATCH /api/memberships/<pk>/role/ -> change role (resets permissions)."""
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = MembershipRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = update_membership_role(actor, pk, serializer.validated_data["role"])
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(MembershipSerializer(result.data).data)


class MembershipDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "company.view")

        membership = CompanyMembership.objects.filter(company=actor.company, pk=pk).first()
        if not membership:
            raise Http404("Üyelik bulunamadı.")
        return Response(MembershipSerializer(membership).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)

        result = deactivate_membership(actor, pk)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PermissionListView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "company.view")
        return Response(PermissionSerializer(Permission.objects.all(), many=True).data)
