# accounting/policies.py
"""
Business policy functions for bookkeeping operations.

Policies answer: "Is this action allowed given the current state?"
They do NOT perform the action; that's the command's job.

Usage:
    from accounting.policies import can_transfer

    allowed, reason = can_transfer(actor, source, target, amount)
    if not allowed:
        return CommandResult.fail(reason)

Design Principles:
1. Policies are pure functions (no side effects)
2. Policies return (bool, str) tuples with a user-facing (Turkish) reason
3. Commands compose policies as needed
"""

from decimal import Decimal

INSUFFICIENT_BALANCE = "Yetersiz bakiye"


# =============================================================================
# Tenant Boundary Policies
# =============================================================================

def check_tenant_boundary(actor, entity) -> bool:
    """
    Verify entity belongs to actor's company.
    This is the fundamental multi-tenant security check.
    """
    entity_company_id = getattr(entity, "company_id", None)
    if entity_company_id is None:
        company = getattr(entity, "company", None)
        entity_company_id = getattr(company, "id", None) if company else None
    return entity_company_id == actor.company.id


# =============================================================================
# Account Policies
# =============================================================================

def can_post_to_account(actor, account) -> tuple[bool, str]:
    """
    Rules:
    - Must belong to actor's company
    - Must not be soft-deleted
    """
    if not check_tenant_boundary(actor, account):
        return False, "Hesap bulunamadı"
    if account.is_deleted:
        return False, "Silinmiş hesaba işlem yapılamaz"
    return True, ""


def can_change_currency(actor, account, new_currency: str) -> tuple[bool, str]:
    """The currency is fixed once the account has transactions."""
    if new_currency == account.currency:
        return True, ""
    if account.transactions.exists():
        return False, "İşlem görmüş hesabın para birimi değiştirilemez"
    return True, ""


def has_sufficient_balance(balance: Decimal, amount: Decimal) -> bool:
    return Decimal(balance) - Decimal(amount) >= 0


def can_transfer(actor, source, target, amount: Decimal) -> tuple[bool, str]:
    """
    Rules for an inter-account transfer (virman):
    - Both accounts postable and distinct
    - Same currency
    - Source balance covers the amount
    """
    for account in (source, target):
        allowed, reason = can_post_to_account(actor, account)
        if not allowed:
            return False, reason

    if source.pk == target.pk:
        return False, "Aynı hesaba virman yapılamaz"

    if source.currency != target.currency:
        return False, "Para birimleri farklı hesaplar arasında virman yapılamaz"

    if not has_sufficient_balance(source.balance, amount):
        return False, INSUFFICIENT_BALANCE

    return True, ""


# =============================================================================
# Transaction Policies
# =============================================================================

def can_delete_transaction(actor, txn) -> tuple[bool, str]:
    """
    Rules:
    - Must belong to actor's company
    - Transfer legs are removed only as a pair, never one by one
    """
    if not check_tenant_boundary(actor, txn):
        return False, "İşlem bulunamadı"
    if txn.virman_pair_id is not None:
        return False, "Virman işlemleri tek tek silinemez"
    return True, ""


# =============================================================================
# Investment & Credit Policies
# =============================================================================

def can_buy_investment(actor, account, currency: str) -> tuple[bool, str]:
    """
    Rules:
    - Account postable
    - Holding priced in the account's currency
    """
    allowed, reason = can_post_to_account(actor, account)
    if not allowed:
        return False, reason
    if currency != account.currency:
        return False, "Yatırım para birimi hesap para birimiyle aynı olmalıdır"
    return True, ""


def can_pay_credit(actor, credit, account) -> tuple[bool, str]:
    """
    Rules:
    - Credit still open
    - Paid from its linked, postable account in the same currency
    """
    if credit.remaining_amount <= 0:
        return False, "Kredi zaten kapanmış"
    if account is None:
        return False, "Ödeme için krediye bağlı bir hesap gerekli"
    allowed, reason = can_post_to_account(actor, account)
    if not allowed:
        return False, reason
    if credit.currency != account.currency:
        return False, "Kredi ve hesap para birimleri farklı"
    return True, ""
