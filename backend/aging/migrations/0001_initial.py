from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import accounting.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("accounting", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ArApItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("item_type", models.CharField(
                    choices=[("receivable", "Alacak"), ("payable", "Borç")],
                    max_length=20,
                )),
                ("invoice_number", models.CharField(max_length=100)),
                ("customer_supplier", models.CharField(max_length=255)),
                ("original_amount", models.DecimalField(decimal_places=2, max_digits=15)),
                ("current_amount", models.DecimalField(decimal_places=2, max_digits=15)),
                ("currency", models.CharField(default=accounting.models.default_currency, max_length=3)),
                ("invoice_date", models.DateField()),
                ("due_date", models.DateField()),
                ("aging_days", models.IntegerField(default=0)),
                ("aging_bucket", models.CharField(default="0-30", max_length=10)),
                ("status", models.CharField(
                    choices=[("outstanding", "Açık"), ("overdue", "Vadesi Geçmiş"), ("paid", "Ödendi")],
                    default="outstanding",
                    max_length=20,
                )),
                ("description", models.TextField(blank=True, default="")),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="arap_items",
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
                    models.Index(fields=["company", "item_type", "status"], name="arap_type_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(current_amount__gte=Decimal("0")),
                        name="arap_current_amount_non_negative",
                    ),
                ],
            },
        ),
    ]
