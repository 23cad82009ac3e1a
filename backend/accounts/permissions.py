# accounts/permissions.py
from __future__ import annotations

from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction

from accounts.models import CompanyMembership, CompanyMembershipPermission, Permission
from accounts.permission_defaults import PERMISSION_NAMES, ROLE_DEFAULTS, all_permission_codes

User = get_user_model()


def _permission_row(code: str) -> Permission:
    return Permission(
        code=code,
        name=PERMISSION_NAMES.get(code, code),
        module=code.split(".")[0],
        description="",
    )


def ensure_permissions(codes=None) -> int:
    """Create missing Permission rows. Returns how many were created."""
    codes = set(codes if codes is not None else all_permission_codes())
    existing = set(Permission.objects.filter(code__in=codes).values_list("code", flat=True))
    missing = sorted(codes - existing)
    if missing:
        Permission.objects.bulk_create([_permission_row(c) for c in missing], ignore_conflicts=True)
    return len(missing)


@transaction.atomic
def grant_role_defaults(
    membership: CompanyMembership,
    granted_by: Optional[User] = None,
    overwrite: bool = False,
) -> int:
    """
    Grant default permissions for the membership.role.

    - Idempotent by default: only grants missing codes.
    - If overwrite=True: first removes existing permissions then grants defaults.
    Returns number of permissions newly granted.
    """
    default_codes = ROLE_DEFAULTS.get(membership.role, set())

    if overwrite:
        CompanyMembershipPermission.objects.filter(
            membership=membership,
            company=membership.company,
        ).delete()

    ensure_permissions(default_codes)
    perms = list(Permission.objects.filter(code__in=default_codes))

    already = set(
        CompanyMembershipPermission.objects.filter(
            membership=membership,
            company=membership.company,
            permission__in=perms,
        ).values_list("permission__code", flat=True)
    )

    to_grant = [p for p in perms if p.code not in already]
    if not to_grant:
        return 0

    CompanyMembershipPermission.objects.bulk_create(
        [
            CompanyMembershipPermission(
                membership=membership,
                company=membership.company,
                permission=p,
                granted_by=granted_by if (granted_by and granted_by.is_authenticated) else None,
            )
            for p in to_grant
        ],
        ignore_conflicts=True,
    )
    return len(to_grant)


@transaction.atomic
def grant_defaults_to_all_memberships(
    granted_by: Optional[User] = None,
    only_if_empty: bool = True,
) -> dict[str, int]:
    """
    Grant defaults across all memberships.
    - only_if_empty=True: only touches memberships with zero explicit permissions.
    """
    updated = 0
    total_granted = 0

    for m in CompanyMembership.objects.select_related("company"):
        if only_if_empty and CompanyMembershipPermission.objects.filter(membership=m).exists():
            continue
        g = grant_role_defaults(membership=m, granted_by=granted_by, overwrite=False)
        if g > 0:
            updated += 1
            total_granted += g

    return {"memberships_updated": updated, "permissions_granted": total_granted}
