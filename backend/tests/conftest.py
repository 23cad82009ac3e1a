# tests/conftest.py
"""
Pytest fixtures for FinBot tests.

- ActorContext requires: user, company, membership, perms
- Memberships get their role defaults through grant_role_defaults
- API clients authenticate with a real JWT access token
"""

import pytest
from decimal import Decimal

from django.contrib.auth import get_user_model

from accounts.authz import ActorContext
from accounts.models import Company, CompanyMembership
from accounts.permissions import grant_role_defaults
from accounts.serializers import tokens_for
from accounting.models import Account
from cashbox.models import Cashbox


User = get_user_model()


def make_member(company, email, role):
    """Create a user with an active membership and the role's default permissions."""
    user = User.objects.create_user(
        email=email,
        password="testpass123",
        name=email.split("@")[0].title(),
        active_company=company,
    )
    membership = CompanyMembership.objects.create(
        company=company,
        user=user,
        role=role,
        is_active=True,
    )
    grant_role_defaults(membership)
    return user, membership


def actor_for(user, membership):
    perms = frozenset(membership.permissions.values_list("code", flat=True))
    return ActorContext(
        user=user,
        company=membership.company,
        membership=membership,
        perms=perms,
        ip_address="127.0.0.1",
        user_agent="pytest",
    )


# =============================================================================
# Company & Member Fixtures
# =============================================================================

@pytest.fixture
def company(db):
    """Create a test company."""
    return Company.objects.create(
        name="Test Şirketi",
        slug="test-sirketi",
        default_currency="TRY",
        is_active=True,
    )


@pytest.fixture
def second_company(db):
    """Create a second test company for multi-tenant tests."""
    return Company.objects.create(
        name="Second Company",
        slug="second-company",
        default_currency="TRY",
        is_active=True,
    )


@pytest.fixture
def owner(company):
    return make_member(company, "owner@test.com", CompanyMembership.Role.OWNER)


@pytest.fixture
def finance(company):
    return make_member(company, "finance@test.com", CompanyMembership.Role.FINANCE)


@pytest.fixture
def viewer(company):
    return make_member(company, "viewer@test.com", CompanyMembership.Role.VIEWER)


@pytest.fixture
def auditor(company):
    return make_member(company, "auditor@test.com", CompanyMembership.Role.AUDITOR)


@pytest.fixture
def outsider(second_company):
    return make_member(second_company, "outsider@test.com", CompanyMembership.Role.OWNER)


# =============================================================================
# Actor Context Fixtures
# =============================================================================

@pytest.fixture
def actor(owner):
    """ActorContext for the company owner."""
    return actor_for(*owner)


@pytest.fixture
def finance_actor(finance):
    return actor_for(*finance)


@pytest.fixture
def viewer_actor(viewer):
    return actor_for(*viewer)


@pytest.fixture
def auditor_actor(auditor):
    return actor_for(*auditor)


@pytest.fixture
def outsider_actor(outsider):
    return actor_for(*outsider)


# =============================================================================
# Account & Cashbox Fixtures
# =============================================================================

@pytest.fixture
def checking_account(company):
    return Account.objects.create(
        company=company,
        bank_name="Ziraat",
        name="Vadesiz TL",
        account_type=Account.AccountType.CHECKING,
        balance=Decimal("1000.00"),
        currency="TRY",
    )


@pytest.fixture
def savings_account(company):
    return Account.objects.create(
        company=company,
        bank_name="Garanti",
        name="Vadeli TL",
        account_type=Account.AccountType.SAVINGS,
        balance=Decimal("0.00"),
        currency="TRY",
    )


@pytest.fixture
def usd_account(company):
    return Account.objects.create(
        company=company,
        bank_name="Garanti",
        name="Döviz USD",
        account_type=Account.AccountType.CHECKING,
        balance=Decimal("500.00"),
        currency="USD",
    )


@pytest.fixture
def foreign_account(second_company):
    return Account.objects.create(
        company=second_company,
        name="Foreign",
        account_type=Account.AccountType.CHECKING,
        balance=Decimal("750.00"),
        currency="TRY",
    )


@pytest.fixture
def main_cashbox(company):
    return Cashbox.objects.create(company=company, name="Merkez Kasa", currency="TRY")


@pytest.fixture
def branch_cashbox(company):
    return Cashbox.objects.create(company=company, name="Şube Kasa", currency="TRY")


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Create a DRF API client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def client_for(db):
    """Return a factory that builds a JWT-authenticated client for a user."""
    from rest_framework.test import APIClient

    def _client(user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens_for(user)['access']}")
        return client

    return _client


@pytest.fixture
def owner_client(client_for, owner):
    return client_for(owner[0])


@pytest.fixture
def viewer_client(client_for, viewer):
    return client_for(viewer[0])


@pytest.fixture
def auditor_client(client_for, auditor):
    return client_for(auditor[0])


@pytest.fixture
def outsider_client(client_for, outsider):
    return client_for(outsider[0])
