# tests/test_permissions.py
"""
Tests for authentication, company switching and role gating over the API.

Tests cover:
- Register -> login -> me -> refresh -> logout
- Tenant switching only into companies with an active membership
- Membership management restricted to company.manage_users
- Read-only roles never mutate
"""

import pytest

from accounts.models import Company, CompanyMembership
from accounts.permissions import grant_role_defaults
from audit.models import AuditLog


# =============================================================================
# Authentication Flow
# =============================================================================

@pytest.mark.django_db
class TestAuthFlow:

    def test_register_creates_owner_company(self, api_client):
        response = api_client.post("/api/auth/register/", {
            "email": "Kurucu@Example.com",
            "password": "guclusifre1",
            "company_name": "Yeni Şirket",
        }, format="json")

        assert response.status_code == 201
        assert response.data["user"]["email"] == "kurucu@example.com"
        assert response.data["company"]["slug"] == "yeni-sirket"
        assert response.data["access"] and response.data["refresh"]

        membership = CompanyMembership.objects.get(user__email="kurucu@example.com")
        assert membership.role == "OWNER"
        assert AuditLog.objects.filter(company=membership.company, entity_type="company").exists()

    def test_register_duplicate_email(self, api_client, owner):
        response = api_client.post("/api/auth/register/", {
            "email": owner[0].email,
            "password": "guclusifre1",
            "company_name": "Başka",
        }, format="json")

        assert response.status_code == 400
        assert response.data["detail"] == "Bu e-posta adresi zaten kayıtlı."

    def test_slug_collision_gets_suffix(self, api_client, company):
        response = api_client.post("/api/auth/register/", {
            "email": "ikinci@example.com",
            "password": "guclusifre1",
            "company_name": "Test Şirketi",
        }, format="json")
        assert response.data["company"]["slug"] == "test-sirketi-1"

    def test_login_and_me(self, api_client, owner):
        user, _ = owner
        response = api_client.post("/api/auth/login/", {"email": user.email, "password": "testpass123"}, format="json")
        assert response.status_code == 200

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        me = api_client.get("/api/auth/me/")

        assert me.status_code == 200
        assert me.data["role"] == "OWNER"
        assert "cashbox.transfer" in me.data["permissions"]
        assert me.data["company"]["default_currency"] == "TRY"

    def test_wrong_password(self, api_client, owner):
        response = api_client.post("/api/auth/login/", {"email": owner[0].email, "password": "yanlis"}, format="json")
        assert response.status_code == 401
        assert response.data["detail"] == "E-posta veya şifre hatalı."

    def test_refresh_rotates_and_logout_blacklists(self, api_client, owner):
        login = api_client.post(
            "/api/auth/login/", {"email": owner[0].email, "password": "testpass123"}, format="json",
        )

        refreshed = api_client.post("/api/auth/refresh/", {"refresh": login.data["refresh"]}, format="json")
        assert refreshed.status_code == 200
        # rotation blacklists the old refresh token
        assert api_client.post("/api/auth/refresh/", {"refresh": login.data["refresh"]}, format="json").status_code == 401

        new_refresh = refreshed.data["refresh"]
        assert api_client.post("/api/auth/logout/", {"refresh": new_refresh}, format="json").status_code == 204
        assert api_client.post("/api/auth/refresh/", {"refresh": new_refresh}, format="json").status_code == 401

    def test_unauthenticated_message_is_turkish(self, api_client):
        response = api_client.get("/api/accounts/")
        assert response.status_code == 401
        assert response.data["detail"] == "Kimlik doğrulama bilgileri sağlanmadı."


# =============================================================================
# Company Switching
# =============================================================================

@pytest.mark.django_db
class TestSwitchCompany:

    def test_switch_to_member_company(self, owner_client, owner, second_company):
        user, _ = owner
        membership = CompanyMembership.objects.create(company=second_company, user=user, role="VIEWER")
        grant_role_defaults(membership)

        response = owner_client.post("/api/auth/switch-company/", {"company_id": second_company.id}, format="json")

        assert response.status_code == 200
        assert response.data["role"] == "VIEWER"
        user.refresh_from_db()
        assert user.active_company_id == second_company.id

        # The new tenant's rules apply immediately
        denied = owner_client.post("/api/accounts/", {"name": "X", "account_type": "checking"}, format="json")
        assert denied.status_code == 403

    def test_switch_without_membership(self, owner_client, second_company):
        response = owner_client.post("/api/auth/switch-company/", {"company_id": second_company.id}, format="json")
        assert response.status_code == 400
        assert response.data["detail"] == "Bu şirkette aktif üyeliğiniz bulunmuyor."

    def test_no_active_company(self, client_for, owner):
        user, _ = owner
        user.active_company = None
        user.save()

        response = client_for(user).get("/api/accounts/")
        assert response.status_code == 403


# =============================================================================
# Memberships
# =============================================================================

@pytest.mark.django_db
class TestMemberships:

    def test_owner_adds_member(self, owner_client, company):
        response = owner_client.post("/api/memberships/", {
            "email": "yeni@example.com",
            "role": "FINANCE",
            "password": "guclusifre1",
        }, format="json")

        assert response.status_code == 201
        assert response.data["role"] == "FINANCE"
        assert "recurring.process" not in response.data["permissions"]

    def test_viewer_cannot_add_member(self, viewer_client):
        response = viewer_client.post("/api/memberships/", {"email": "x@example.com", "role": "VIEWER"}, format="json")
        assert response.status_code == 403

    def test_role_change_resets_permissions(self, owner_client, viewer):
        _, membership = viewer
        response = owner_client.patch(f"/api/memberships/{membership.id}/role/", {"role": "AUDITOR"}, format="json")

        assert response.status_code == 200
        assert "audit.view" in response.data["permissions"]

    def test_owner_cannot_be_deactivated(self, owner_client, owner):
        response = owner_client.delete(f"/api/memberships/{owner[1].id}/")
        assert response.status_code == 400

    def test_deactivated_member_is_locked_out(self, owner_client, viewer_client, viewer):
        assert owner_client.delete(f"/api/memberships/{viewer[1].id}/").status_code == 204
        assert viewer_client.get("/api/accounts/").status_code == 403

    def test_permission_catalog(self, owner_client):
        response = owner_client.get("/api/permissions/")
        codes = {row["code"] for row in response.data}
        assert {"cashbox.transfer", "audit.view", "recurring.process"} <= codes


# =============================================================================
# Read-only Roles
# =============================================================================

@pytest.mark.django_db
class TestReadOnlyRoles:

    @pytest.mark.parametrize("path,payload", [
        ("/api/accounts/", {"name": "X", "account_type": "checking"}),
        ("/api/cashbox/", {"name": "X"}),
        ("/api/aging/recalculate/", {}),
        ("/api/recurring/process/", {}),
    ])
    def test_auditor_cannot_mutate(self, auditor_client, path, payload):
        response = auditor_client.post(path, payload, format="json")
        assert response.status_code == 403
        assert response.data["detail"].startswith("Bu işlem için yetkiniz yok")

    def test_auditor_reads_audit_log(self, auditor_client, actor, checking_account):
        from accounting.commands import update_account

        update_account(actor, checking_account.id, name="Yeni")
        response = auditor_client.get("/api/audit/")

        assert response.status_code == 200
        assert response.data["count"] >= 1

    def test_viewer_cannot_read_audit_log(self, viewer_client):
        assert viewer_client.get("/api/audit/").status_code == 403
