import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import accounting.models


class Migration(migrations.Migration):

    dependencies = [
        ("accounting", "0001_initial"),
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Investment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("title", models.CharField(max_length=255)),
                ("investment_type", models.CharField(
                    choices=[
                        ("stock", "Hisse Senedi"),
                        ("crypto", "Kripto Para"),
                        ("bond", "Tahvil"),
                        ("fund", "Fon"),
                        ("real_estate", "Gayrimenkul"),
                    ],
                    max_length=20,
                )),
                ("symbol", models.CharField(blank=True, default="", max_length=20)),
                ("quantity", models.DecimalField(decimal_places=6, max_digits=20)),
                ("purchase_price", models.DecimalField(decimal_places=4, max_digits=15)),
                ("current_price", models.DecimalField(blank=True, decimal_places=4, max_digits=15, null=True)),
                ("currency", models.CharField(default=accounting.models.default_currency, max_length=3)),
                ("category", models.CharField(blank=True, default="", max_length=100)),
                ("risk_level", models.CharField(
                    choices=[("low", "Düşük"), ("medium", "Orta"), ("high", "Yüksek")],
                    default="medium",
                    max_length=10,
                )),
                ("purchase_date", models.DateField(default=django.utils.timezone.localdate)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="investments",
                    to="accounting.account",
                )),
                ("company", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="investments",
                    to="accounts.company",
                )),
                ("created_by", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("purchase_transaction", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+",
                    to="accounting.transaction",
                )),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["company", "investment_type"], name="investment_company_type_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Credit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("credit_type", models.CharField(
                    choices=[
                        ("loan", "Kredi"),
                        ("credit_card", "Kredi Kartı"),
                        ("mortgage", "Konut Kredisi"),
                        ("overdraft", "Kredili Mevduat"),
                    ],
                    max_length=20,
                )),
                ("institution", models.CharField(blank=True, default="", max_length=255)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=15)),
                ("remaining_amount", models.DecimalField(decimal_places=2, max_digits=15)),
                ("currency", models.CharField(default=accounting.models.default_currency, max_length=3)),
                ("interest_rate", models.DecimalField(blank=True, decimal_places=4, max_digits=7, null=True)),
                ("minimum_payment", models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True)),
                ("start_date", models.DateField(default=django.utils.timezone.localdate)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("status", models.CharField(
                    choices=[("active", "Aktif"), ("paid_off", "Kapandı")],
                    default="active",
                    max_length=20,
                )),
                ("last_payment_date", models.DateField(blank=True, null=True)),
                ("last_payment_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="credits",
                    to="accounting.account",
                )),
                ("company", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="credits",
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
                "ordering": ["due_date", "id"],
                "indexes": [
                    models.Index(fields=["company", "is_active", "due_date"], name="credit_company_due_idx"),
                ],
            },
        ),
    ]
