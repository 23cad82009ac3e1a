import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import accounting.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("bank_name", models.CharField(blank=True, default="", max_length=255)),
                ("name", models.CharField(max_length=255)),
                ("account_type", models.CharField(
                    choices=[
                        ("checking", "Vadesiz"),
                        ("savings", "Vadeli"),
                        ("credit_card", "Kredi Kartı"),
                        ("loan", "Kredi"),
                        ("investment", "Yatırım"),
                    ],
                    max_length=20,
                )),
                ("balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("currency", models.CharField(default=accounting.models.default_currency, max_length=3)),
                ("is_deleted", models.BooleanField(default=False)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="accounts",
                    to="accounts.company",
                )),
                ("created_by", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "ordering": ["bank_name", "name"],
                "indexes": [
                    models.Index(fields=["company", "is_deleted"], name="account_company_deleted_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RecurringTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=15)),
                ("description", models.CharField(blank=True, default="", max_length=500)),
                ("category", models.CharField(blank=True, default="", max_length=100)),
                ("interval", models.CharField(
                    choices=[
                        ("daily", "Günlük"),
                        ("weekly", "Haftalık"),
                        ("monthly", "Aylık"),
                        ("quarterly", "Üç Aylık"),
                        ("yearly", "Yıllık"),
                    ],
                    max_length=20,
                )),
                ("interval_count", models.PositiveIntegerField(default=1)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField(blank=True, null=True)),
                ("next_due_date", models.DateField(db_index=True)),
                ("last_processed", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="recurring_transactions",
                    to="accounting.account",
                )),
                ("company", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="recurring_transactions",
                    to="accounts.company",
                )),
                ("created_by", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "ordering": ["next_due_date", "id"],
                "indexes": [
                    models.Index(fields=["company", "is_active", "next_due_date"], name="recurring_due_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("transaction_type", models.CharField(
                    choices=[
                        ("income", "Gelir"),
                        ("expense", "Gider"),
                        ("transfer_in", "Gelen Virman"),
                        ("transfer_out", "Giden Virman"),
                    ],
                    max_length=20,
                )),
                ("amount", models.DecimalField(decimal_places=2, max_digits=15)),
                ("description", models.CharField(blank=True, default="", max_length=500)),
                ("category", models.CharField(blank=True, default="", max_length=100)),
                ("date", models.DateField(db_index=True, default=django.utils.timezone.localdate)),
                ("virman_pair_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="transactions",
                    to="accounting.account",
                )),
                ("company", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="transactions",
                    to="accounts.company",
                )),
                ("created_by", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("recurring", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="generated_transactions",
                    to="accounting.recurringtransaction",
                )),
            ],
            options={
                "ordering": ["-date", "-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["company", "date"], name="txn_company_date_idx"),
                    models.Index(fields=["account", "date"], name="txn_account_date_idx"),
                ],
            },
        ),
    ]
