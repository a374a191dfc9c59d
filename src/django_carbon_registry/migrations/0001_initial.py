# Generated manually for django-carbon-registry

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Project",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("version", models.PositiveIntegerField(default=1, help_text="Revision counter, incremented on every write")),
                ("project_id", models.CharField(help_text="Human-readable ID, e.g. 'KEN-2023-0045'", max_length=32, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("category", models.CharField(max_length=100)),
                ("methodology", models.CharField(max_length=100)),
                ("developer", models.CharField(help_text="Username of the registering developer", max_length=150)),
                ("location", models.CharField(max_length=255)),
                ("latitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("longitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("registered", "Registered"),
                            ("verified", "Verified"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("estimated_reduction", models.PositiveIntegerField(help_text="Estimated emission reduction in tCO2e")),
                ("image_url", models.URLField(blank=True, default="")),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="registered_projects",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gte", models.F("start_date"))),
                        name="project_end_after_start",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VerificationStage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True, default="")),
                ("order", models.PositiveIntegerField(unique=True)),
                (
                    "required_documents",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Document types expected before the stage is completed",
                    ),
                ),
                ("icon", models.CharField(blank=True, default="", max_length=50)),
            ],
            options={
                "ordering": ["order"],
            },
        ),
        migrations.CreateModel(
            name="ProjectVerification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("version", models.PositiveIntegerField(default=1, help_text="Revision counter, incremented on every write")),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("verifier", models.CharField(blank=True, default="", max_length=150)),
                ("third_party_verifier", models.CharField(blank=True, default="", max_length=255)),
                ("contact_email", models.EmailField(blank=True, default="", max_length=254)),
                ("verification_standard", models.CharField(blank=True, default="", max_length=100)),
                ("notes", models.TextField(blank=True, default="")),
                ("verification_report", models.URLField(blank=True, default="")),
                ("submitted_date", models.DateTimeField(auto_now_add=True)),
                ("estimated_completion_date", models.DateTimeField(blank=True, null=True)),
                ("completed_date", models.DateTimeField(blank=True, null=True)),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="verifications",
                        to="carbon_registry.project",
                    ),
                ),
                (
                    "current_stage",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="carbon_registry.verificationstage",
                    ),
                ),
                (
                    "completed_stages",
                    models.ManyToManyField(blank=True, related_name="+", to="carbon_registry.verificationstage"),
                ),
                (
                    "requested_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="requested_verifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-submitted_date", "-id"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "pending")),
                        fields=("project",),
                        name="one_pending_verification_per_project",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VerificationDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "document_type",
                    models.CharField(
                        help_text="e.g. 'methodology_assessment', 'site_inspection_report'",
                        max_length=100,
                    ),
                ),
                ("document_name", models.CharField(max_length=255)),
                ("document_url", models.URLField()),
                ("uploaded_at", models.DateTimeField(auto_now_add=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "verification",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="documents",
                        to="carbon_registry.projectverification",
                    ),
                ),
                (
                    "stage",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="documents",
                        to="carbon_registry.verificationstage",
                    ),
                ),
                (
                    "uploaded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["uploaded_at", "id"],
                "indexes": [
                    models.Index(fields=["verification", "stage"], name="registry_doc_stage_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VerificationComment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("comment", models.TextField()),
                ("commented_at", models.DateTimeField(auto_now_add=True)),
                ("is_internal", models.BooleanField(default=False)),
                (
                    "verification",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="comments",
                        to="carbon_registry.projectverification",
                    ),
                ),
                (
                    "stage",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="comments",
                        to="carbon_registry.verificationstage",
                    ),
                ),
                (
                    "commented_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["commented_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="CarbonCredit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("version", models.PositiveIntegerField(default=1, help_text="Revision counter, incremented on every write")),
                ("serial_number", models.CharField(max_length=100, unique=True)),
                ("vintage", models.PositiveSmallIntegerField(help_text="Year the emission reduction occurred")),
                ("batch_number", models.PositiveIntegerField()),
                ("quantity", models.PositiveIntegerField(help_text="Credits in tCO2e")),
                ("owner", models.CharField(help_text="Issuing developer; unchanged by transfers", max_length=150)),
                (
                    "status",
                    models.CharField(
                        choices=[("available", "Available"), ("retired", "Retired"), ("transferred", "Transferred")],
                        db_index=True,
                        default="available",
                        max_length=20,
                    ),
                ),
                ("issuance_date", models.DateTimeField(auto_now_add=True)),
                ("retirement_date", models.DateTimeField(blank=True, null=True)),
                ("retirement_purpose", models.TextField(blank=True, default="")),
                ("retirement_beneficiary", models.CharField(blank=True, default="", max_length=255)),
                ("transfer_date", models.DateTimeField(blank=True, null=True)),
                ("transfer_recipient", models.CharField(blank=True, default="", max_length=150)),
                ("transfer_purpose", models.TextField(blank=True, default="")),
                ("paris_agreement_eligible", models.BooleanField(default=False)),
                ("host_country", models.CharField(blank=True, default="", max_length=3)),
                (
                    "corresponding_adjustment_status",
                    models.CharField(
                        blank=True,
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        default="",
                        max_length=20,
                    ),
                ),
                ("corresponding_adjustment_details", models.TextField(blank=True, default="")),
                ("international_transfer", models.BooleanField(default=False)),
                ("mitigation_outcome", models.CharField(blank=True, default="", max_length=100)),
                ("authorization_reference", models.CharField(blank=True, default="", max_length=255)),
                ("authorization_date", models.DateField(blank=True, null=True)),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credits",
                        to="carbon_registry.project",
                    ),
                ),
                (
                    "issued_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-issuance_date", "-id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="credit_quantity_positive",
                    ),
                    models.UniqueConstraint(
                        fields=("project", "vintage", "batch_number"),
                        name="unique_credit_batch",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CorrespondingAdjustment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("version", models.PositiveIntegerField(default=1, help_text="Revision counter, incremented on every write")),
                ("credit_serial_number", models.CharField(max_length=100)),
                ("host_country", models.CharField(max_length=3)),
                ("recipient_country", models.CharField(blank=True, default="", max_length=3)),
                (
                    "adjustment_type",
                    models.CharField(
                        choices=[("Article 6.2", "Article 6.2"), ("Article 6.4", "Article 6.4")],
                        max_length=20,
                    ),
                ),
                ("adjustment_quantity", models.PositiveIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("verified", "Verified"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("adjustment_date", models.DateField(blank=True, null=True)),
                ("ndc_target", models.CharField(blank=True, default="", max_length=255)),
                ("mitigation_outcome_type", models.CharField(blank=True, default="", max_length=100)),
                ("authorized_by", models.CharField(blank=True, default="", max_length=255)),
                ("verified_by", models.CharField(blank=True, default="", max_length=255)),
                ("authorization_document", models.URLField(blank=True, default="")),
                ("verification_document", models.URLField(blank=True, default="")),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "credit",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="adjustments",
                        to="carbon_registry.carboncredit",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("adjustment_quantity__gt", 0)),
                        name="adjustment_quantity_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ActivityLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action",
                    models.CharField(
                        db_index=True,
                        help_text="e.g. 'project_created', 'credit_retired'",
                        max_length=50,
                    ),
                ),
                ("description", models.TextField()),
                ("entity_type", models.CharField(help_text="project, verification, credit or adjustment", max_length=20)),
                (
                    "entity_id",
                    models.CharField(
                        help_text="projectId, serial number or primary key of the entity",
                        max_length=100,
                    ),
                ),
                (
                    "actor_display",
                    models.CharField(
                        blank=True,
                        help_text="Snapshot of actor identity at the time of the action",
                        max_length=200,
                    ),
                ),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("timestamp", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="registry_activity",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-timestamp", "-id"],
                "indexes": [
                    models.Index(fields=["entity_type", "entity_id"], name="registry_activity_entity_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RegistryStatistics",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("total_projects", models.PositiveIntegerField(default=0)),
                ("verified_projects", models.PositiveIntegerField(default=0)),
                ("pending_verification", models.PositiveIntegerField(default=0)),
                ("total_credits", models.PositiveBigIntegerField(default=0)),
                ("last_updated", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name_plural": "Registry statistics",
            },
        ),
        migrations.CreateModel(
            name="RegistrySequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("scope", models.CharField(max_length=100, unique=True)),
                ("current_value", models.PositiveBigIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
    ]
