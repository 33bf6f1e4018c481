import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("leads", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ClientDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                (
                    "document_type",
                    models.CharField(
                        choices=[
                            ("id_document", "ID document"),
                            ("tax_id", "Tax ID"),
                            ("proof_of_address", "Proof of address"),
                            ("proof_of_income", "Proof of income"),
                            ("civil_status_certificate", "Civil status certificate"),
                            ("bank_statement", "Bank statement"),
                            ("income_tax_return", "Income tax return"),
                            ("other", "Other"),
                        ],
                        default="other",
                        max_length=30,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("received", "Received"),
                            ("approved", "Approved"),
                            ("expired", "Expired"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("due_date", models.DateField(blank=True, null=True)),
                ("received_at", models.DateTimeField(blank=True, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("file", models.FileField(blank=True, upload_to="documents/%Y/%m/")),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "lead",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="documents",
                        to="leads.lead",
                    ),
                ),
            ],
            options={
                "verbose_name": "Client document",
                "verbose_name_plural": "Client documents",
                "db_table": "client_documents",
                "ordering": ["due_date", "created_at"],
                "indexes": [models.Index(fields=["lead", "status"], name="client_docs_lead_status_idx")],
            },
        ),
    ]
