"""
Verification pipeline services.

A verification starts pending at the first stage, moves through the
ordered stages and ends approved or rejected:

    pending --advance/complete stages--> approved | rejected

Approval marks the project verified. Every function locks the
verification row before checking its state.
"""

import logging

from django.db import transaction
from django.utils import timezone

from ..activity import record_activity
from ..exceptions import (
    InvalidState,
    InvalidTransition,
    NotFound,
    PreconditionFailed,
    ValidationError,
)
from ..models import (
    Project,
    ProjectVerification,
    VerificationComment,
    VerificationDocument,
    VerificationStage,
)
from ..notary import notarize
from ..statistics import adjust_counters
from .common import lock_entity, reject_unknown_fields, save_versioned

logger = logging.getLogger(__name__)

METADATA_FIELDS = (
    "verifier",
    "third_party_verifier",
    "contact_email",
    "verification_standard",
    "notes",
    "verification_report",
    "estimated_completion_date",
)

VERIFIER_FIELDS = ("third_party_verifier", "contact_email", "verification_standard")


def get_verification(pk) -> ProjectVerification:
    try:
        return ProjectVerification.objects.select_related(
            "project", "current_stage"
        ).get(pk=pk)
    except (ProjectVerification.DoesNotExist, ValueError, TypeError):
        raise NotFound("verification", pk)


def get_stage(pk) -> VerificationStage:
    try:
        return VerificationStage.objects.get(pk=pk)
    except (VerificationStage.DoesNotExist, ValueError, TypeError):
        raise NotFound("verification stage", pk)


def _lock(verification, expected_version=None) -> ProjectVerification:
    return lock_entity(
        ProjectVerification,
        "verification",
        verification.pk,
        expected_version,
        pk=verification.pk,
    )


def _require_pending(verification: ProjectVerification, action: str) -> None:
    if not verification.is_pending:
        raise InvalidState(
            "verification",
            verification.status,
            f"Cannot {action}: verification is already {verification.status}",
        )


def _log(verification, action, description, actor, **metadata):
    metadata.setdefault("project_id", verification.project.project_id)
    record_activity(
        action=action,
        description=description,
        entity_type="verification",
        entity_id=verification.pk,
        actor=actor,
        metadata=metadata,
    )


@transaction.atomic
def request_verification(project: Project, actor, **metadata) -> ProjectVerification:
    """
    Open a pending verification for a project at the first stage.

    A draft or previously rejected project moves to registered.

    Args:
        project: Project to verify
        actor: User requesting verification
        **metadata: Optional verifier metadata (see METADATA_FIELDS)

    Returns:
        The created ProjectVerification

    Raises:
        PreconditionFailed: If the project is verified or already pending
        NotFound: If no verification stages are configured
    """
    reject_unknown_fields(metadata, METADATA_FIELDS)

    project = lock_entity(Project, "project", project.project_id, pk=project.pk)
    if project.status == Project.Status.VERIFIED:
        raise PreconditionFailed(f"Project {project.project_id} is already verified")
    if project.verifications.filter(status=ProjectVerification.Status.PENDING).exists():
        raise PreconditionFailed(
            f"Project {project.project_id} already has a pending verification"
        )

    first_stage = VerificationStage.objects.order_by("order").first()
    if first_stage is None:
        raise NotFound("verification stage", "first")

    verification = ProjectVerification.objects.create(
        project=project,
        current_stage=first_stage,
        requested_by=actor,
        **metadata,
    )

    if project.status != Project.Status.REGISTERED:
        project.status = Project.Status.REGISTERED
        save_versioned(project, ["status"])

    adjust_counters(pending_verification=1)
    _log(
        verification,
        "verification_requested",
        f"Verification requested for project {project.project_id}",
        actor,
    )
    notarize("verification", verification.pk, "created", {"project_id": project.project_id})
    logger.info("Verification %s opened for %s", verification.pk, project.project_id)
    return verification


def _advance(verification, next_stage) -> bool:
    if verification.current_stage_id == next_stage.pk:
        return False
    verification.current_stage = next_stage
    return True


@transaction.atomic
def advance_stage(verification, next_stage, actor, expected_version=None) -> ProjectVerification:
    """
    Move a pending verification to another stage.

    The previous stage is not marked complete.
    """
    verification = _lock(verification, expected_version)
    _require_pending(verification, "advance stage")

    if _advance(verification, next_stage):
        save_versioned(verification, ["current_stage"])
        _log(
            verification,
            "verification_stage_advanced",
            f"Verification for {verification.project.project_id} advanced to {next_stage.name}",
            actor,
            stage_id=next_stage.pk,
        )
    return verification


def missing_documents(verification, stage) -> list:
    """Required document types for a stage with no non-rejected upload."""
    required = stage.required_documents or []
    present = set(
        VerificationDocument.objects.filter(verification=verification, stage=stage)
        .exclude(status=VerificationDocument.Status.REJECTED)
        .values_list("document_type", flat=True)
    )
    return [doc_type for doc_type in required if doc_type not in present]


@transaction.atomic
def complete_stage(verification, stage, actor):
    """
    Mark a stage complete on a pending verification.

    Completing an already-completed stage is a no-op. Missing required
    documents produce warnings, never a refusal.

    Returns:
        Tuple of (verification, warnings)
    """
    verification = _lock(verification)
    _require_pending(verification, "complete stage")

    if verification.completed_stages.filter(pk=stage.pk).exists():
        return verification, []

    warnings = [
        f"Missing required document: {doc_type}"
        for doc_type in missing_documents(verification, stage)
    ]
    if warnings:
        logger.warning(
            "Stage %s completed on verification %s with missing documents: %s",
            stage.name,
            verification.pk,
            ", ".join(warnings),
        )

    verification.completed_stages.add(stage)
    save_versioned(verification, [])
    _log(
        verification,
        "verification_stage_completed",
        f"Stage {stage.name} completed for project {verification.project.project_id}",
        actor,
        stage_id=stage.pk,
        warnings=warnings,
    )
    return verification, warnings


def _decide(verification, new_status) -> Project:
    """Apply approval or rejection to a locked pending verification."""
    if not verification.is_pending:
        raise InvalidTransition(
            verification.status,
            new_status,
            f"Verification is already {verification.status}",
        )

    verification.status = new_status
    verification.completed_date = timezone.now()
    project = lock_entity(
        Project, "project", verification.project.project_id, pk=verification.project_id
    )

    if new_status == ProjectVerification.Status.APPROVED:
        project.status = Project.Status.VERIFIED
        save_versioned(project, ["status"])
        adjust_counters(verified_projects=1, pending_verification=-1)
    else:
        adjust_counters(pending_verification=-1)
    verification.project = project
    return project


@transaction.atomic
def approve_verification(verification, actor, expected_version=None) -> ProjectVerification:
    """
    Approve a pending verification and mark its project verified.

    Raises:
        InvalidTransition: If the verification is not pending
    """
    verification = _lock(verification, expected_version)
    project = _decide(verification, ProjectVerification.Status.APPROVED)
    save_versioned(verification, ["status", "completed_date"])

    _log(
        verification,
        "verification_approved",
        f"Verification approved for project {project.project_id}",
        actor,
    )
    notarize("verification", verification.pk, "updated", {"status": verification.status})
    logger.info("Verification %s approved, %s verified", verification.pk, project.project_id)
    return verification


@transaction.atomic
def reject_verification(verification, actor, expected_version=None) -> ProjectVerification:
    """
    Reject a pending verification. The project status is left alone.

    Raises:
        InvalidTransition: If the verification is not pending
    """
    verification = _lock(verification, expected_version)
    project = _decide(verification, ProjectVerification.Status.REJECTED)
    save_versioned(verification, ["status", "completed_date"])

    _log(
        verification,
        "verification_rejected",
        f"Verification rejected for project {project.project_id}",
        actor,
    )
    notarize("verification", verification.pk, "updated", {"status": verification.status})
    logger.info("Verification %s rejected", verification.pk)
    return verification


@transaction.atomic
def assign_verifier(verification, actor, expected_version=None, **fields) -> ProjectVerification:
    """Attach third-party verifier metadata to a pending verification."""
    reject_unknown_fields(fields, VERIFIER_FIELDS)
    verification = _lock(verification, expected_version)
    _require_pending(verification, "assign verifier")

    for field, value in fields.items():
        setattr(verification, field, value)
    save_versioned(verification, fields.keys())

    _log(
        verification,
        "verification_verifier_assigned",
        f"Verifier {verification.third_party_verifier or 'updated'} assigned to "
        f"project {verification.project.project_id}",
        actor,
        fields=sorted(fields),
    )
    return verification


@transaction.atomic
def update_verification(
    verification,
    actor,
    expected_version=None,
    current_stage=None,
    status=None,
    **metadata,
) -> ProjectVerification:
    """
    Apply a combined update in one transaction with one activity entry.

    Metadata is written first, then a stage move, then a status change.
    Metadata and stage changes require the verification to be pending.

    Args:
        current_stage: Optional VerificationStage to move to
        status: Optional 'approved' or 'rejected'; 'pending' is accepted
            as a no-op while the verification is still pending

    Raises:
        InvalidState: For metadata or stage changes on a decided verification
        InvalidTransition: For a decision on a verification that is no
            longer pending, or any other illegal status change
    """
    reject_unknown_fields(metadata, METADATA_FIELDS)
    verification = _lock(verification, expected_version)

    changed = sorted(metadata)
    stage_moved = False
    if metadata or current_stage is not None:
        _require_pending(verification, "update verification")
    for field, value in metadata.items():
        setattr(verification, field, value)
    if current_stage is not None:
        stage_moved = _advance(verification, current_stage)
        if stage_moved:
            changed.append("current_stage")

    if status == ProjectVerification.Status.PENDING:
        if not verification.is_pending:
            raise InvalidTransition(verification.status, status)
    elif status in (ProjectVerification.Status.APPROVED, ProjectVerification.Status.REJECTED):
        _decide(verification, status)
        changed += ["status", "completed_date"]
    elif status is not None:
        raise InvalidTransition(verification.status, status)

    if not changed:
        return verification
    save_versioned(verification, changed)

    project_id = verification.project.project_id
    if "status" in changed:
        action = f"verification_{verification.status}"
        description = f"Verification {verification.status} for project {project_id}"
    elif stage_moved and not metadata:
        action = "verification_stage_advanced"
        description = (
            f"Verification for {project_id} advanced to {verification.current_stage.name}"
        )
    else:
        action = "verification_updated"
        description = f"Verification updated for project {project_id}"

    _log(verification, action, description, actor, fields=changed)
    notarize("verification", verification.pk, "updated", {"fields": changed})
    logger.info("Verification %s: %s", verification.pk, action)
    return verification


@transaction.atomic
def add_document(
    verification,
    stage,
    actor,
    *,
    document_type: str,
    document_name: str,
    document_url: str,
) -> VerificationDocument:
    """Attach a document to a stage of a pending verification."""
    verification = _lock(verification)
    _require_pending(verification, "add document")

    document = VerificationDocument.objects.create(
        verification=verification,
        stage=stage,
        document_type=document_type,
        document_name=document_name,
        document_url=document_url,
        uploaded_by=actor,
    )
    _log(
        verification,
        "verification_document_added",
        f"Document {document_name} added to {stage.name}",
        actor,
        document_id=document.pk,
        stage_id=stage.pk,
    )
    return document


@transaction.atomic
def review_document(document_pk, actor, status: str, notes: str = None) -> VerificationDocument:
    """
    Record the review outcome of a document.

    Only ``status`` and ``notes`` ever change on a document.
    """
    if status not in VerificationDocument.Status.values:
        raise ValidationError({"status": [f"Must be one of {', '.join(VerificationDocument.Status.values)}."]})

    try:
        document = VerificationDocument.objects.select_for_update().get(pk=document_pk)
    except (VerificationDocument.DoesNotExist, ValueError, TypeError):
        raise NotFound("document", document_pk)

    document.status = status
    document.reviewed_at = timezone.now()
    update_fields = ["status", "reviewed_at", "updated_at"]
    if notes is not None:
        document.notes = notes
        update_fields.append("notes")
    document.save(update_fields=update_fields)

    verification = document.verification
    _log(
        verification,
        "verification_document_reviewed",
        f"Document {document.document_name} marked {status}",
        actor,
        document_id=document.pk,
    )
    return document


@transaction.atomic
def add_comment(verification, stage, actor, comment: str, is_internal: bool = False) -> VerificationComment:
    """Append a comment to a stage of a verification."""
    if not comment or not comment.strip():
        raise ValidationError({"comment": ["This field is required."]})

    entry = VerificationComment.objects.create(
        verification=verification,
        stage=stage,
        comment=comment,
        commented_by=actor,
        is_internal=is_internal,
    )
    _log(
        verification,
        "verification_comment_added",
        f"Comment added on {stage.name}",
        actor,
        comment_id=entry.pk,
        stage_id=stage.pk,
        is_internal=is_internal,
    )
    return entry
