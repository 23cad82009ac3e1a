# accounts/commands.py
"""
Command layer for accounts/authorization operations.

ALL security-critical mutations MUST go through these commands:
- Registration (company + owner)
- Company switching
- Membership management

This ensures:
1. Consistent validation
2. Audit trail
3. Single point of enforcement
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils.text import slugify

from accounts.authz import ActorContext, require
from accounts.models import Company, CompanyMembership
from accounts.permissions import grant_role_defaults
from audit.emitter import record_audit, record_audit_no_actor
from audit.models import AuditLog

User = get_user_model()
logger = logging.getLogger(__name__)


class CommandResult:
    def __init__(self, success: bool, data=None, error: str = None, message: str = None):
        self.success = success
        self.data = data
        self.error = error
        self.message = message

    @classmethod
    def ok(cls, data=None, message: str = None):
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str):
        return cls(success=False, error=error)


def _membership_values(membership: CompanyMembership) -> dict:
    return {
        "user": membership.user.email,
        "role": membership.role,
        "is_active": membership.is_active,
    }


# =============================================================================
# Registration (Company + User + Membership atomic creation)
# =============================================================================

@transaction.atomic
def register_signup(
    email: str,
    password: str,
    company_name: str,
    name: str = "",
    default_currency: str = "TRY",
) -> CommandResult:
    """
    Register a new user with a new company.

    This is the ONLY way to create a company owner. It atomically:
    1. Creates the company with unique slug (retry on collision)
    2. Creates the user
    3. Creates the owner membership with default permissions
    4. Sets the active company

    Returns:
        CommandResult with user, company, membership
    """
    email = email.lower().strip()
    if User.objects.filter(email=email).exists():
        return CommandResult.fail("Bu e-posta adresi zaten kayıtlı.")

    if not company_name or not company_name.strip():
        return CommandResult.fail("Şirket adı gerekli.")

    if not password or len(password) < 8:
        return CommandResult.fail("Şifre en az 8 karakter olmalıdır.")

    base_slug = slugify(company_name.strip()) or "company"
    slug = base_slug
    max_attempts = 10
    for attempt in range(max_attempts):
        if not Company.objects.filter(slug=slug).exists():
            break
        slug = f"{base_slug}-{attempt + 1}"
    else:
        return CommandResult.fail("Şirket için benzersiz bir kısa ad üretilemedi. Lütfen farklı bir ad deneyin.")

    company = Company.objects.create(
        name=company_name.strip(),
        slug=slug,
        default_currency=(default_currency or "TRY").upper(),
    )
    user = User.objects.create_user(
        email=email,
        password=password,
        name=name.strip() if name else "",
        active_company=company,
    )
    membership = CompanyMembership.objects.create(
        company=company,
        user=user,
        role=CompanyMembership.Role.OWNER,
        is_active=True,
    )
    grant_role_defaults(membership, granted_by=user)

    record_audit_no_actor(
        company,
        AuditLog.Action.CREATE,
        "company",
        company.id,
        user=user,
        new_values={"name": company.name, "slug": company.slug, "owner": email},
    )
    logger.info("Company registered", extra={"company_id": company.id, "slug": slug})

    return CommandResult.ok({
        "user": user,
        "company": company,
        "membership": membership,
    })


@transaction.atomic
def switch_active_company(user, target_company_id: int) -> CommandResult:
    """
    Switch user's active company.

    Args:
        user: The user switching companies (not ActorContext - they may not have one yet)
        target_company_id: ID of company to switch to

    Returns:
        CommandResult with company info and role
    """
    if isinstance(user, ActorContext):
        user = user.user

    if not user or not user.is_authenticated:
        return CommandResult.fail("Kimlik doğrulama gerekli.")

    try:
        target_company = Company.objects.get(pk=target_company_id, is_active=True)
    except Company.DoesNotExist:
        return CommandResult.fail("Şirket bulunamadı veya aktif değil.")

    try:
        membership = CompanyMembership.objects.get(
            user=user, company=target_company, is_active=True
        )
    except CompanyMembership.DoesNotExist:
        return CommandResult.fail("Bu şirkette aktif üyeliğiniz bulunmuyor.")

    old_company_id = user.active_company_id
    user.active_company = target_company
    user.save(update_fields=["active_company"])

    record_audit_no_actor(
        target_company,
        AuditLog.Action.SWITCH_COMPANY,
        "user",
        user.id,
        user=user,
        old_values={"active_company": old_company_id},
        new_values={"active_company": target_company.id},
    )

    return CommandResult.ok({
        "company_id": target_company.id,
        "company_public_id": str(target_company.public_id),
        "company_name": target_company.name,
        "role": membership.role,
        "membership_id": membership.id,
    })


# =============================================================================
# Membership Management
# =============================================================================

@transaction.atomic
def add_user_to_company(
    actor: ActorContext,
    email: str,
    role: str = CompanyMembership.Role.VIEWER,
    name: str = "",
    password: str = None,
) -> CommandResult:
    """
    Add a user to the actor's company, creating the user when needed.

    A previously deactivated membership is reactivated with the new role.

    Returns:
        CommandResult with membership
    """
    require(actor, "company.manage_users")

    if role == CompanyMembership.Role.OWNER:
        return CommandResult.fail("Sahip rolü bu işlemle atanamaz.")

    email = email.lower().strip()
    user = User.objects.filter(email=email).first()
    if user is None:
        if not password:
            return CommandResult.fail("Yeni kullanıcı için şifre gerekli.")
        user = User.objects.create_user(email=email, password=password, name=name, active_company=actor.company)

    membership = CompanyMembership.objects.filter(user=user, company=actor.company).first()
    if membership and membership.is_active:
        return CommandResult.fail("Kullanıcı zaten bu şirketin üyesi.")

    if membership:
        old_values = _membership_values(membership)
        membership.is_active = True
        membership.role = role
        membership.save(update_fields=["is_active", "role"])
        grant_role_defaults(membership, granted_by=actor.user, overwrite=True)
        action = AuditLog.Action.RESTORE
    else:
        old_values = None
        membership = CompanyMembership.objects.create(
            company=actor.company,
            user=user,
            role=role,
            is_active=True,
        )
        grant_role_defaults(membership, granted_by=actor.user)
        action = AuditLog.Action.CREATE

    record_audit(
        actor,
        action,
        "membership",
        membership.id,
        old_values=old_values,
        new_values=_membership_values(membership),
    )
    return CommandResult.ok(membership)


@transaction.atomic
def update_membership_role(
    actor: ActorContext,
    membership_id: int,
    new_role: str,
) -> CommandResult:
    """
    Update a membership's role.

    Explicit permissions are reset to the new role's defaults.
    """
    require(actor, "company.manage_users")

    try:
        membership = CompanyMembership.objects.select_related("user", "company").select_for_update().get(
            pk=membership_id, company=actor.company
        )
    except CompanyMembership.DoesNotExist:
        return CommandResult.fail("Üyelik bulunamadı.")

    valid_roles = [r[0] for r in CompanyMembership.Role.choices]
    if new_role not in valid_roles:
        return CommandResult.fail(f"Geçersiz rol. Geçerli roller: {', '.join(valid_roles)}")

    if membership.role == CompanyMembership.Role.OWNER and not actor.is_owner:
        return CommandResult.fail("Şirket sahibinin rolü değiştirilemez.")

    if new_role == CompanyMembership.Role.OWNER and not actor.is_owner:
        return CommandResult.fail("Sahip rolünü yalnızca şirket sahibi atayabilir.")

    if (membership.user_id == actor.user.id and
            membership.role == CompanyMembership.Role.OWNER and
            new_role != CompanyMembership.Role.OWNER):
        return CommandResult.fail("Sahiplik devredilmeden kendi rolünüzü düşüremezsiniz.")

    old_values = _membership_values(membership)
    membership.role = new_role
    membership.save(update_fields=["role"])
    grant_role_defaults(membership, granted_by=actor.user, overwrite=True)

    record_audit(
        actor,
        AuditLog.Action.UPDATE,
        "membership",
        membership.id,
        old_values=old_values,
        new_values=_membership_values(membership),
    )
    return CommandResult.ok(membership)


@transaction.atomic
def deactivate_membership(
    actor: ActorContext,
    membership_id: int,
) -> CommandResult:
    """Deactivate a membership (soft delete)."""
    require(actor, "company.manage_users")

    try:
        membership = CompanyMembership.objects.select_related("user").get(
            pk=membership_id, company=actor.company
        )
    except CompanyMembership.DoesNotExist:
        return CommandResult.fail("Üyelik bulunamadı.")

    if membership.role == CompanyMembership.Role.OWNER:
        return CommandResult.fail("Şirket sahibinin üyeliği devre dışı bırakılamaz.")

    if membership.user_id == actor.user.id:
        return CommandResult.fail("Kendi üyeliğinizi devre dışı bırakamazsınız.")

    old_values = _membership_values(membership)
    membership.is_active = False
    membership.save(update_fields=["is_active"])

    record_audit(
        actor,
        AuditLog.Action.DELETE,
        "membership",
        membership.id,
        old_values=old_values,
        new_values=_membership_values(membership),
    )
    return CommandResult.ok({"deactivated": True})
