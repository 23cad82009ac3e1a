import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("cashbox", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(
                    choices=[
                        ("create", "Create"),
                        ("update", "Update"),
                        ("delete", "Delete"),
                        ("restore", "Restore"),
                        ("deposit", "Deposit"),
                        ("withdrawal", "Withdrawal"),
                        ("transfer_in", "Transfer in"),
                        ("transfer_out", "Transfer out"),
                        ("transfer", "Transfer"),
                        ("process", "Process"),
                        ("login", "Login"),
                        ("switch_company", "Switch company"),
                    ],
                    db_index=True,
                    max_length=20,
                )),
                ("entity_type", models.CharField(db_index=True, max_length=50)),
                ("entity_id", models.CharField(blank=True, default="", max_length=64)),
                ("old_values", models.JSONField(blank=True, null=True)),
                ("new_values", models.JSONField(blank=True, null=True)),
                ("changes", models.JSONField(blank=True, null=True)),
                ("reason", models.TextField(blank=True, default="")),
                ("ip_address", models.CharField(blank=True, default="", max_length=64)),
                ("user_agent", models.CharField(blank=True, default="", max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("cashbox", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="audit_logs",
                    to="cashbox.cashbox",
                )),
                ("cashbox_transaction", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="audit_logs",
                    to="cashbox.cashboxtransaction",
                )),
                ("company", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="audit_logs",
                    to="accounts.company",
                )),
                ("user", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="audit_logs",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["company", "entity_type", "entity_id"], name="audit_entity_idx"),
                    models.Index(fields=["company", "created_at"], name="audit_company_created_idx"),
                ],
            },
        ),
    ]
