"""Models for django-carbon-registry.

Provides:
- ProjectCategory / Methodology: Reference data a project is classified by
- Project: A carbon-offset project registered by a developer
- VerificationStage: Ordered template step of the review process
- ProjectVerification: One verification process for a project
- VerificationDocument / VerificationComment: Evidence and discussion per stage
- CarbonCredit: A batch of issued credits with a single terminal transition
- CorrespondingAdjustment: Paris Agreement Article 6 accounting entry
- ActivityLog: Append-only audit trail of every state change
- RegistryStatistics: Singleton row of aggregate counters
- RegistrySequence: Locked counters behind project IDs and credit batches
"""

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.db.models import Q


class RegistryBaseModel(models.Model):
    """Base model with timestamps. Registry rows are never deleted."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class VersionedModel(RegistryBaseModel):
    """
    Base model with an optimistic revision counter.

    Services increment ``version`` on every write and reject writes
    made against a stale version.
    """

    version = models.PositiveIntegerField(
        default=1,
        help_text="Revision counter, incremented on every write",
    )

    class Meta:
        abstract = True


class ProjectCategory(models.Model):
    """Reference list of project categories (Forestry, Renewable Energy, ...)."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")
    color = models.CharField(
        max_length=20,
        default="green",
        help_text="Badge color used by clients",
    )

    class Meta:
        app_label = "carbon_registry"
        ordering = ["name"]
        verbose_name_plural = "Project categories"

    def __str__(self):
        return self.name


class Methodology(models.Model):
    """Accounting methodology a project may apply, e.g. 'VM0006'."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")
    category = models.ForeignKey(
        ProjectCategory,
        on_delete=models.PROTECT,
        related_name="methodologies",
    )
    document_url = models.URLField(blank=True, default="")

    class Meta:
        app_label = "carbon_registry"
        ordering = ["name"]
        verbose_name_plural = "Methodologies"

    def __str__(self):
        return self.name


class Project(VersionedModel):
    """
    A carbon-offset project.

    Status is only ever changed by the verification pipeline.
    """

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        REGISTERED = "registered", "Registered"
        VERIFIED = "verified", "Verified"
        REJECTED = "rejected", "Rejected"

    project_id = models.CharField(
        max_length=32,
        unique=True,
        help_text="Human-readable ID, e.g. 'KEN-2023-0045'",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=100)
    methodology = models.CharField(max_length=100)
    developer = models.CharField(
        max_length=150,
        help_text="Username of the registering developer",
    )
    location = models.CharField(max_length=255)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
        db_index=True,
    )
    estimated_reduction = models.PositiveIntegerField(
        help_text="Estimated emission reduction in tCO2e",
    )
    image_url = models.URLField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="registered_projects",
    )

    class Meta:
        app_label = "carbon_registry"
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gte=models.F("start_date")),
                name="project_end_after_start",
            ),
        ]

    def __str__(self):
        return f"{self.project_id}: {self.name}"


class VerificationStage(models.Model):
    """Ordered template step of the verification process."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")
    order = models.PositiveIntegerField(unique=True)
    required_documents = models.JSONField(
        default=list,
        blank=True,
        help_text="Document types expected before the stage is completed",
    )
    icon = models.CharField(max_length=50, blank=True, default="")

    class Meta:
        app_label = "carbon_registry"
        ordering = ["order"]

    def __str__(self):
        return f"{self.order}. {self.name}"


class ProjectVerification(VersionedModel):
    """
    A verification process for one project.

    At most one verification per project may be pending at a time.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    project = models.ForeignKey(
        Project,
        on_delete=models.PROTECT,
        related_name="verifications",
    )
    current_stage = models.ForeignKey(
        VerificationStage,
        on_delete=models.PROTECT,
        related_name="+",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    completed_stages = models.ManyToManyField(
        VerificationStage,
        blank=True,
        related_name="+",
    )
    verifier = models.CharField(max_length=150, blank=True, default="")
    third_party_verifier = models.CharField(max_length=255, blank=True, default="")
    contact_email = models.EmailField(blank=True, default="")
    verification_standard = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")
    verification_report = models.URLField(blank=True, default="")
    submitted_date = models.DateTimeField(auto_now_add=True)
    estimated_completion_date = models.DateTimeField(null=True, blank=True)
    completed_date = models.DateTimeField(null=True, blank=True)
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="requested_verifications",
    )

    class Meta:
        app_label = "carbon_registry"
        ordering = ["-submitted_date", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["project"],
                condition=Q(status="pending"),
                name="one_pending_verification_per_project",
            ),
        ]

    def __str__(self):
        return f"Verification of {self.project.project_id} ({self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING


class VerificationDocument(RegistryBaseModel):
    """Evidence attached to a verification stage. Only the review fields change."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    verification = models.ForeignKey(
        ProjectVerification,
        on_delete=models.PROTECT,
        related_name="documents",
    )
    stage = models.ForeignKey(
        VerificationStage,
        on_delete=models.PROTECT,
        related_name="documents",
    )
    document_type = models.CharField(
        max_length=100,
        help_text="e.g. 'methodology_assessment', 'site_inspection_report'",
    )
    document_name = models.CharField(max_length=255)
    document_url = models.URLField()
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    uploaded_at = models.DateTimeField(auto_now_add=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    notes = models.TextField(blank=True, default="")
    reviewed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        app_label = "carbon_registry"
        ordering = ["uploaded_at", "id"]
        indexes = [
            models.Index(fields=["verification", "stage"], name="registry_doc_stage_idx"),
        ]

    def __str__(self):
        return f"{self.document_type}: {self.document_name}"


class VerificationComment(models.Model):
    """Append-only discussion on a verification stage."""

    verification = models.ForeignKey(
        ProjectVerification,
        on_delete=models.PROTECT,
        related_name="comments",
    )
    stage = models.ForeignKey(
        VerificationStage,
        on_delete=models.PROTECT,
        related_name="comments",
    )
    comment = models.TextField()
    commented_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    commented_at = models.DateTimeField(auto_now_add=True)
    is_internal = models.BooleanField(default=False)

    class Meta:
        app_label = "carbon_registry"
        ordering = ["commented_at", "id"]

    def __str__(self):
        return f"Comment on {self.verification_id}/{self.stage_id}"


class CarbonCredit(VersionedModel):
    """
    A batch of issued carbon credits.

    Leaves ``available`` at most once: either retired or transferred.
    """

    class Status(models.TextChoices):
        AVAILABLE = "available", "Available"
        RETIRED = "retired", "Retired"
        TRANSFERRED = "transferred", "Transferred"

    class AdjustmentStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    serial_number = models.CharField(max_length=100, unique=True)
    project = models.ForeignKey(
        Project,
        on_delete=models.PROTECT,
        related_name="credits",
    )
    vintage = models.PositiveSmallIntegerField(
        help_text="Year the emission reduction occurred",
    )
    batch_number = models.PositiveIntegerField()
    quantity = models.PositiveIntegerField(help_text="Credits in tCO2e")
    owner = models.CharField(
        max_length=150,
        help_text="Issuing developer; unchanged by transfers",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.AVAILABLE,
        db_index=True,
    )
    issuance_date = models.DateTimeField(auto_now_add=True)
    issued_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    # Retirement
    retirement_date = models.DateTimeField(null=True, blank=True)
    retirement_purpose = models.TextField(blank=True, default="")
    retirement_beneficiary = models.CharField(max_length=255, blank=True, default="")

    # Transfer
    transfer_date = models.DateTimeField(null=True, blank=True)
    transfer_recipient = models.CharField(max_length=150, blank=True, default="")
    transfer_purpose = models.TextField(blank=True, default="")

    # Paris Agreement Article 6
    paris_agreement_eligible = models.BooleanField(default=False)
    host_country = models.CharField(max_length=3, blank=True, default="")
    corresponding_adjustment_status = models.CharField(
        max_length=20,
        choices=AdjustmentStatus.choices,
        blank=True,
        default="",
    )
    corresponding_adjustment_details = models.TextField(blank=True, default="")
    international_transfer = models.BooleanField(default=False)
    mitigation_outcome = models.CharField(max_length=100, blank=True, default="")
    authorization_reference = models.CharField(max_length=255, blank=True, default="")
    authorization_date = models.DateField(null=True, blank=True)

    class Meta:
        app_label = "carbon_registry"
        ordering = ["-issuance_date", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="credit_quantity_positive",
            ),
            models.UniqueConstraint(
                fields=["project", "vintage", "batch_number"],
                name="unique_credit_batch",
            ),
        ]

    def __str__(self):
        return f"{self.serial_number} ({self.quantity} tCO2e, {self.status})"

    @property
    def is_available(self) -> bool:
        return self.status == self.Status.AVAILABLE


class CorrespondingAdjustment(VersionedModel):
    """Paris Agreement Article 6 adjustment recorded against a credit."""

    class AdjustmentType(models.TextChoices):
        ARTICLE_6_2 = "Article 6.2", "Article 6.2"
        ARTICLE_6_4 = "Article 6.4", "Article 6.4"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        VERIFIED = "verified", "Verified"
        REJECTED = "rejected", "Rejected"

    credit = models.ForeignKey(
        CarbonCredit,
        on_delete=models.PROTECT,
        related_name="adjustments",
    )
    credit_serial_number = models.CharField(max_length=100)
    host_country = models.CharField(max_length=3)
    recipient_country = models.CharField(max_length=3, blank=True, default="")
    adjustment_type = models.CharField(max_length=20, choices=AdjustmentType.choices)
    adjustment_quantity = models.PositiveIntegerField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    adjustment_date = models.DateField(null=True, blank=True)
    ndc_target = models.CharField(max_length=255, blank=True, default="")
    mitigation_outcome_type = models.CharField(max_length=100, blank=True, default="")
    authorized_by = models.CharField(max_length=255, blank=True, default="")
    verified_by = models.CharField(max_length=255, blank=True, default="")
    authorization_document = models.URLField(blank=True, default="")
    verification_document = models.URLField(blank=True, default="")
    notes = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        app_label = "carbon_registry"
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(adjustment_quantity__gt=0),
                name="adjustment_quantity_positive",
            ),
        ]

    def __str__(self):
        return (
            f"{self.adjustment_type} {self.host_country}->{self.recipient_country or '?'} "
            f"({self.adjustment_quantity} of {self.credit_serial_number})"
        )


class ActivityLog(models.Model):
    """
    Immutable audit trail entry.

    One entry is written for every state-changing registry operation.
    Entries are never updated or deleted.
    """

    action = models.CharField(
        max_length=50,
        db_index=True,
        help_text="e.g. 'project_created', 'credit_retired'",
    )
    description = models.TextField()
    entity_type = models.CharField(
        max_length=20,
        help_text="project, verification, credit or adjustment",
    )
    entity_id = models.CharField(
        max_length=100,
        help_text="projectId, serial number or primary key of the entity",
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="registry_activity",
    )
    actor_display = models.CharField(
        max_length=200,
        blank=True,
        help_text="Snapshot of actor identity at the time of the action",
    )
    metadata = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        app_label = "carbon_registry"
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="registry_activity_entity_idx"),
        ]

    def __str__(self):
        return f"{self.actor_display or 'system'} {self.action} {self.entity_type}:{self.entity_id}"

    def save(self, *args, **kwargs):
        if self.pk and ActivityLog.objects.filter(pk=self.pk).exists():
            raise ValueError("Activity log entries are immutable and cannot be updated")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Activity log entries are immutable and cannot be deleted")


class RegistryStatistics(models.Model):
    """
    Singleton row of aggregate counters.

    ``total_credits`` is cumulative issuance, not current supply.
    """

    total_projects = models.PositiveIntegerField(default=0)
    verified_projects = models.PositiveIntegerField(default=0)
    pending_verification = models.PositiveIntegerField(default=0)
    total_credits = models.PositiveBigIntegerField(default=0)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "carbon_registry"
        verbose_name_plural = "Registry statistics"

    def __str__(self):
        return (
            f"projects={self.total_projects} verified={self.verified_projects} "
            f"pending={self.pending_verification} credits={self.total_credits}"
        )

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Registry statistics cannot be deleted")

    @classmethod
    def get_instance(cls):
        """
        Get or create the singleton row.

        Handles concurrent creation via IntegrityError retry.
        """
        try:
            with transaction.atomic():
                obj, _ = cls.objects.get_or_create(pk=1)
                return obj
        except IntegrityError:
            return cls.objects.get(pk=1)


class RegistrySequence(models.Model):
    """
    Locked counter for identifier allocation.

    Scopes look like 'project:KEN:2023' or 'batch:KEN-2023-0045:2023'.
    """

    scope = models.CharField(max_length=100, unique=True)
    current_value = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "carbon_registry"

    def __str__(self):
        return f"{self.scope}: {self.current_value}"
