# accounts/urls.py
"""
URL configuration for accounts/auth API.

Endpoints:
- /auth/ - Authentication (register, login, refresh, logout, me, switch-company)
- /memberships/ - Membership management
- /permissions/ - Available permissions list
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    # Auth
    RegisterView,
    LoginView,
    LogoutView,
    MeView,
    SwitchCompanyView,
    # Memberships
    MembershipListCreateView,
    MembershipDetailView,
    MembershipRoleView,
    # Permissions
    PermissionListView,
)

app_name = "accounts"

urlpatterns = [
    # ==========================================================================
    # Authentication
    # ==========================================================================
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("auth/me/", MeView.as_view(), name="me"),
    path("auth/switch-company/", SwitchCompanyView.as_view(), name="switch-company"),

    # ==========================================================================
    # Memberships
    # ==========================================================================
    path("memberships/", MembershipListCreateView.as_view(), name="membership-list"),
    path("memberships/<int:pk>/", MembershipDetailView.as_view(), name="membership-detail"),
    path("memberships/<int:pk>/role/", MembershipRoleView.as_view(), name="membership-role"),

    # ==========================================================================
    # Permissions
    # ==========================================================================
    path("permissions/", PermissionListView.as_view(), name="permission-list"),
]
