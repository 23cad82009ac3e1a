# accounting/models.py
"""
Bookkeeping models for FinBot.

Models:
- Account: A bank / card / loan / investment account with a running balance
- Transaction: A single balance movement on an account
- RecurringTransaction: A template that spawns Transactions on a schedule
- Investment: A holding bought from an account
- Credit: A loan or card debt paid down from an account

Balances are only mutated through accounting/commands.py, which locks the
account row and writes the Transaction in the same database transaction.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from accounts.models import Company


def default_currency():
    return getattr(settings, "FINBOT_DEFAULT_CURRENCY", "TRY")


class Account(models.Model):
    """
    Bank account entry.

    Soft-deleted accounts keep their transactions but disappear from
    listings and can no longer receive postings.
    """

    class AccountType(models.TextChoices):
        CHECKING = "checking", "Vadesiz"
        SAVINGS = "savings", "Vadeli"
        CREDIT_CARD = "credit_card", "Kredi Kartı"
        LOAN = "loan", "Kredi"
        INVESTMENT = "investment", "Yatırım"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="accounts")
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)

    bank_name = models.CharField(max_length=255, blank=True, default="")
    name = models.CharField(max_length=255)
    account_type = models.CharField(max_length=20, choices=AccountType.choices)
    balance = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default=default_currency)

    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["bank_name", "name"]
        indexes = [
            models.Index(fields=["company", "is_deleted"], name="account_company_deleted_idx"),
        ]

    def __str__(self):
        if self.bank_name:
            return f"{self.bank_name} - {self.name}"
        return self.name


class Transaction(models.Model):
    """
    A balance movement on an account.

    ``amount`` is always positive; the direction comes from the type.
    The two legs of a transfer share ``virman_pair_id``.
    """

    class TransactionType(models.TextChoices):
        INCOME = "income", "Gelir"
        EXPENSE = "expense", "Gider"
        TRANSFER_IN = "transfer_in", "Gelen Virman"
        TRANSFER_OUT = "transfer_out", "Giden Virman"

    INFLOW_TYPES = {TransactionType.INCOME, TransactionType.TRANSFER_IN}

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="transactions")
    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="transactions")
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)

    transaction_type = models.CharField(max_length=20, choices=TransactionType.choices)
    amount = models.DecimalField(max_digits=15, decimal_places=2)
    description = models.CharField(max_length=500, blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="")
    date = models.DateField(default=timezone.localdate, db_index=True)

    virman_pair_id = models.UUIDField(null=True, blank=True, db_index=True)
    recurring = models.ForeignKey(
        "accounting.RecurringTransaction",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="generated_transactions",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at", "-id"]
        indexes = [
            models.Index(fields=["company", "date"], name="txn_company_date_idx"),
            models.Index(fields=["account", "date"], name="txn_account_date_idx"),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.amount} ({self.date})"

    @property
    def signed_amount(self) -> Decimal:
        """Effect of this row on the account balance."""
        if self.transaction_type in self.INFLOW_TYPES:
            return self.amount
        return -self.amount


class RecurringTransaction(models.Model):
    """
    A schedule that spawns Transactions.

    ``amount`` is signed: zero or positive spawns income, negative spawns
    expense (with the absolute value).
    """

    class Interval(models.TextChoices):
        DAILY = "daily", "Günlük"
        WEEKLY = "weekly", "Haftalık"
        MONTHLY = "monthly", "Aylık"
        QUARTERLY = "quarterly", "Üç Aylık"
        YEARLY = "yearly", "Yıllık"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="recurring_transactions")
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="recurring_transactions")

    amount = models.DecimalField(max_digits=15, decimal_places=2)
    description = models.CharField(max_length=500, blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="")

    interval = models.CharField(max_length=20, choices=Interval.choices)
    interval_count = models.PositiveIntegerField(default=1)

    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    next_due_date = models.DateField(db_index=True)
    last_processed = models.DateTimeField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["next_due_date", "id"]
        indexes = [
            models.Index(fields=["company", "is_active", "next_due_date"], name="recurring_due_idx"),
        ]

    def __str__(self):
        return f"{self.description or self.interval} {self.amount} every {self.interval_count} {self.interval}"


class Investment(models.Model):
    """
    A holding bought from an account.

    Buying writes an expense Transaction on the account for
    quantity * purchase_price; ``purchase_transaction`` points at it.
    Without a ``current_price`` the holding is valued at cost.
    """

    class InvestmentType(models.TextChoices):
        STOCK = "stock", "Hisse Senedi"
        CRYPTO = "crypto", "Kripto Para"
        BOND = "bond", "Tahvil"
        FUND = "fund", "Fon"
        REAL_ESTATE = "real_estate", "Gayrimenkul"

    class RiskLevel(models.TextChoices):
        LOW = "low", "Düşük"
        MEDIUM = "medium", "Orta"
        HIGH = "high", "Yüksek"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="investments")
    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="investments")
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)

    title = models.CharField(max_length=255)
    investment_type = models.CharField(max_length=20, choices=InvestmentType.choices)
    symbol = models.CharField(max_length=20, blank=True, default="")
    quantity = models.DecimalField(max_digits=20, decimal_places=6)
    purchase_price = models.DecimalField(max_digits=15, decimal_places=4)
    current_price = models.DecimalField(max_digits=15, decimal_places=4, null=True, blank=True)
    currency = models.CharField(max_length=3, default=default_currency)
    category = models.CharField(max_length=100, blank=True, default="")
    risk_level = models.CharField(max_length=10, choices=RiskLevel.choices, default=RiskLevel.MEDIUM)
    purchase_date = models.DateField(default=timezone.localdate)

    purchase_transaction = models.ForeignKey(
        Transaction,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["company", "investment_type"], name="investment_company_type_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.quantity})"

    @property
    def cost_basis(self) -> Decimal:
        return (self.quantity * self.purchase_price).quantize(Decimal("0.01"))

    @property
    def current_value(self) -> Decimal:
        price = self.current_price if self.current_price is not None else self.purchase_price
        return (self.quantity * price).quantize(Decimal("0.01"))

    @property
    def gain_loss(self) -> Decimal:
        return self.current_value - self.cost_basis


class Credit(models.Model):
    """
    A loan, card debt or overdraft line and what is left to pay.

    Payments go out of the linked account as expense Transactions.
    Deleting a credit only deactivates it.
    """

    class CreditType(models.TextChoices):
        LOAN = "loan", "Kredi"
        CREDIT_CARD = "credit_card", "Kredi Kartı"
        MORTGAGE = "mortgage", "Konut Kredisi"
        OVERDRAFT = "overdraft", "Kredili Mevduat"

    class Status(models.TextChoices):
        ACTIVE = "active", "Aktif"
        PAID_OFF = "paid_off", "Kapandı"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="credits")
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="credits",
    )
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    credit_type = models.CharField(max_length=20, choices=CreditType.choices)
    institution = models.CharField(max_length=255, blank=True, default="")

    amount = models.DecimalField(max_digits=15, decimal_places=2)
    remaining_amount = models.DecimalField(max_digits=15, decimal_places=2)
    currency = models.CharField(max_length=3, default=default_currency)
    interest_rate = models.DecimalField(max_digits=7, decimal_places=4, null=True, blank=True)
    minimum_payment = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)

    start_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    last_payment_date = models.DateField(null=True, blank=True)
    last_payment_amount = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)

    is_active = models.BooleanField(default=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["due_date", "id"]
        indexes = [
            models.Index(fields=["company", "is_active", "due_date"], name="credit_company_due_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.remaining_amount}/{self.amount})"

    def is_overdue(self, as_of) -> bool:
        return bool(
            self.is_active
            and self.due_date
            and self.due_date < as_of
            and self.remaining_amount > 0
        )
