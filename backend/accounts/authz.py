# accounts/authz.py
"""
Authorization utilities for FinBot.

Provides:
- ActorContext: Immutable context for the current request
- resolve_actor: Extract actor context from request
- require: Check permissions and raise if not granted

Permissions are checked:
1. First by role (OWNER: implicit allow)
2. Every other role: explicit permissions only (role defaults + manual grants)
"""

from dataclasses import dataclass
from typing import FrozenSet

from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import NotAuthenticated

from accounts.models import Company, CompanyMembership


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor (user + company).

    This is passed to commands and policies to provide context
    about who is performing an action and in which company.

    Attributes:
        user: The authenticated user
        company: The active company (tenant)
        membership: The user's membership in the company
        perms: Set of explicit permission codes the user has
        ip_address: Client address, recorded in audit logs
        user_agent: Client user agent, recorded in audit logs
    """
    user: object
    company: Company
    membership: CompanyMembership
    perms: FrozenSet[str]
    ip_address: str = ""
    user_agent: str = ""

    def has(self, code: str) -> bool:
        """
        Check if actor has a specific permission.

        Order of checks:
        1. OWNER: implicit allow
        2. everyone else: only codes in perms
        """
        if not self.membership.is_active:
            return False

        if self.membership.role == CompanyMembership.Role.OWNER:
            return True
        if code in self.perms:
            return True
        # Permissions may have changed after the context was built.
        return self.membership.permissions.filter(code=code).exists()

    @property
    def is_owner(self) -> bool:
        return self.membership.role == CompanyMembership.Role.OWNER


def _client_ip(request) -> str:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "") or ""


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    This is called at the start of every view that needs authorization.
    It loads the user's membership and permissions FRESH from the database,
    so permission changes take effect immediately.

    Raises:
        NotAuthenticated: If user is not authenticated
        PermissionDenied: If user has no active company or membership
    """
    user = getattr(request, "user", None)

    if not user or not user.is_authenticated:
        raise NotAuthenticated("Kimlik doğrulama gerekli.")

    company = getattr(user, "active_company", None)

    if not company:
        raise PermissionDenied("Aktif şirket seçilmedi. Lütfen önce bir şirket seçin.")

    try:
        membership = CompanyMembership.objects.select_related(
            "company"
        ).prefetch_related(
            "permissions"
        ).get(
            user=user,
            company=company,
            is_active=True,
        )
    except CompanyMembership.DoesNotExist:
        raise PermissionDenied("Seçili şirketin aktif bir üyesi değilsiniz.")

    perms = frozenset(
        membership.permissions.values_list("code", flat=True)
    )

    return ActorContext(
        user=user,
        company=company,
        membership=membership,
        perms=perms,
        ip_address=_client_ip(request),
        user_agent=request.META.get("HTTP_USER_AGENT", "")[:500],
    )


def require(actor: ActorContext, code: str) -> None:
    """
    Require that the actor has a specific permission.

    Raises:
        PermissionDenied: If permission is not granted

    Example:
        require(actor, "cashbox.transfer")
    """
    if not actor.has(code):
        raise PermissionDenied(f"Bu işlem için yetkiniz yok: {code}")
