import django.db.models.deletion
import taggit.managers
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("taggit", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Lead",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(help_text="Lead's full name", max_length=200)),
                (
                    "email",
                    models.EmailField(
                        blank=True, db_index=True, help_text="Email address (optional)", max_length=254, null=True
                    ),
                ),
                ("phone", models.CharField(blank=True, db_index=True, help_text="Phone number", max_length=20)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("prospect", "Prospect"),
                            ("qualified", "Qualified"),
                            ("interested", "Interested"),
                            ("negotiating", "Negotiating"),
                        ],
                        default="prospect",
                        help_text="Lead temperature",
                        max_length=20,
                    ),
                ),
                (
                    "negotiation_status",
                    models.CharField(
                        choices=[
                            ("new_lead", "New lead"),
                            ("contact_made", "Contact made"),
                            ("visit_scheduled", "Visit scheduled"),
                            ("proposal_sent", "Proposal sent"),
                            ("in_negotiation", "In negotiation"),
                            ("contract_signed", "Contract signed"),
                            ("sale_completed", "Sale completed"),
                            ("interest_shown", "Interest shown"),
                            ("financially_qualified", "Financially qualified"),
                            ("visit_done", "Visit done"),
                            ("post_visit_follow_up", "Post-visit follow-up"),
                            ("negotiation_in_progress", "Negotiation in progress"),
                            ("documents_pending", "Documents pending"),
                        ],
                        db_index=True,
                        default="new_lead",
                        help_text="Current stage in the sales pipeline",
                        max_length=30,
                    ),
                ),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("manual", "Manual entry"),
                            ("website", "Website"),
                            ("referral", "Referral"),
                            ("social_media", "Social media"),
                            ("phone", "Phone"),
                            ("walk_in", "Walk-in"),
                            ("other", "Other"),
                        ],
                        default="manual",
                        help_text="Where did this lead come from?",
                        max_length=20,
                    ),
                ),
                (
                    "qualified",
                    models.BooleanField(db_index=True, default=False, help_text="Vetted by an agent as viable"),
                ),
                ("disqualified", models.BooleanField(db_index=True, default=False)),
                (
                    "disqualification_reason",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("no_interest", "No interest"),
                            ("incompatible_profile", "Incompatible profile"),
                            ("lost_contact", "Lost contact"),
                            ("duplicate", "Duplicate lead"),
                            ("insufficient_budget", "Insufficient budget"),
                            ("not_decision_maker", "Not the decision maker"),
                            ("other", "Other"),
                        ],
                        max_length=30,
                    ),
                ),
                ("disqualification_notes", models.TextField(blank=True)),
                ("monthly_income", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("profession", models.CharField(blank=True, max_length=100)),
                ("desired_property_type", models.CharField(blank=True, max_length=100)),
                ("interest_location", models.CharField(blank=True, max_length=200)),
                (
                    "notes",
                    models.TextField(blank=True, help_text="Free-text notes; calls and emails are appended here"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "agent",
                    models.ForeignKey(
                        blank=True,
                        help_text="Agent responsible for this lead",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="leads",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "tags",
                    taggit.managers.TaggableManager(
                        blank=True,
                        help_text="A comma-separated list of tags.",
                        through="taggit.TaggedItem",
                        to="taggit.Tag",
                        verbose_name="Tags",
                    ),
                ),
            ],
            options={
                "verbose_name": "Lead",
                "verbose_name_plural": "Leads",
                "db_table": "clients",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["agent", "negotiation_status"], name="clients_agent_status_idx"),
                    models.Index(fields=["qualified", "disqualified"], name="clients_qualification_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Activity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "activity_type",
                    models.CharField(
                        choices=[
                            ("new_lead", "New lead"),
                            ("qualification", "Qualification"),
                            ("disqualification", "Disqualification"),
                            ("requalification", "Requalification"),
                            ("status_change", "Status change"),
                            ("call", "Call"),
                            ("email", "Email"),
                            ("appointment", "Appointment"),
                            ("document", "Document"),
                            ("sale_finalized", "Sale finalized"),
                            ("sale_canceled", "Sale canceled"),
                            ("lead_updated", "Lead updated"),
                            ("lead_deleted", "Lead deleted"),
                        ],
                        max_length=30,
                    ),
                ),
                ("description", models.TextField(help_text="Human-readable description of what happened")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "lead",
                    models.ForeignKey(
                        blank=True,
                        help_text="Which lead this activity is for",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activities",
                        to="leads.lead",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        help_text="Who performed this action",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activities",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Activity",
                "verbose_name_plural": "Activities",
                "db_table": "activities",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["lead", "-created_at"], name="activities_lead_idx"),
                    models.Index(fields=["user", "-created_at"], name="activities_user_idx"),
                ],
            },
        ),
    ]
