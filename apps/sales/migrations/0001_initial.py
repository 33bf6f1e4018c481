import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import apps.sales.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("leads", "0001_initial"),
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="SaleFinalized",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("product_name", models.CharField(max_length=200)),
                (
                    "sale_value",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("completion_date", models.DateField(db_index=True)),
                (
                    "contract",
                    models.FileField(blank=True, max_length=255, upload_to=apps.sales.models.contract_upload_to),
                ),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "agent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "lead",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to="leads.lead",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "verbose_name": "Finalized sale",
                "verbose_name_plural": "Finalized sales",
                "db_table": "sales_finalized",
                "ordering": ["-completion_date", "-created_at"],
                "indexes": [models.Index(fields=["agent", "-completion_date"], name="sales_agent_date_idx")],
            },
        ),
    ]
