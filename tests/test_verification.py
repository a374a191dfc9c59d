"""Tests for the verification pipeline."""

import pytest

from django_carbon_registry.exceptions import (
    ConcurrentModification,
    InvalidState,
    InvalidTransition,
    NotFound,
    PreconditionFailed,
    ValidationError,
)
from django_carbon_registry.models import (
    ActivityLog,
    Project,
    ProjectVerification,
    VerificationDocument,
    VerificationStage,
)
from django_carbon_registry.services.verification import (
    add_comment,
    add_document,
    advance_stage,
    approve_verification,
    assign_verifier,
    complete_stage,
    reject_verification,
    request_verification,
    review_document,
    update_verification,
)
from django_carbon_registry.statistics import get_statistics


@pytest.mark.django_db
class TestRequestVerification:

    def test_starts_pending_at_first_stage(self, verification, stages):
        assert verification.status == ProjectVerification.Status.PENDING
        assert verification.current_stage == stages[0]
        assert verification.completed_stages.count() == 0

    def test_increments_pending_counter(self, verification):
        assert get_statistics().pending_verification == 1

    def test_moves_draft_project_to_registered(self, make_project, stages, user):
        project = make_project(status="draft")

        request_verification(project, user)

        project.refresh_from_db()
        assert project.status == Project.Status.REGISTERED

    def test_second_pending_request_rejected(self, project, verification, user):
        with pytest.raises(PreconditionFailed):
            request_verification(project, user)

        assert ProjectVerification.objects.filter(project=project).count() == 1
        assert get_statistics().pending_verification == 1

    def test_verified_project_cannot_be_resubmitted(self, verified_project, user):
        with pytest.raises(PreconditionFailed):
            request_verification(verified_project, user)

    def test_resubmission_after_rejection_creates_new_record(self, project, verification, user):
        reject_verification(verification, user)

        again = request_verification(project, user)

        assert again.pk != verification.pk
        assert ProjectVerification.objects.filter(project=project).count() == 2

    def test_requires_configured_stages(self, project, user):
        with pytest.raises(NotFound):
            request_verification(project, user)

    def test_stores_verifier_metadata(self, project, stages, user):
        verification = request_verification(
            project,
            user,
            third_party_verifier="SGS Climate",
            contact_email="audit@sgs.example",
            verification_standard="VCS",
        )

        assert verification.third_party_verifier == "SGS Climate"
        assert verification.verification_standard == "VCS"

    def test_records_activity(self, project, verification):
        entry = ActivityLog.objects.get(action="verification_requested")
        assert entry.entity_type == "verification"
        assert entry.entity_id == str(verification.pk)
        assert entry.metadata["project_id"] == project.project_id


@pytest.mark.django_db
class TestApproveAndReject:

    def test_approve_verifies_project_and_moves_counters(self, project, verification, user):
        approve_verification(verification, user)

        project.refresh_from_db()
        verification.refresh_from_db()
        stats = get_statistics()
        assert verification.status == ProjectVerification.Status.APPROVED
        assert verification.completed_date is not None
        assert project.status == Project.Status.VERIFIED
        assert stats.verified_projects == 1
        assert stats.pending_verification == 0

    def test_second_approve_fails_without_changes(self, verification, user):
        approve_verification(verification, user)

        with pytest.raises(InvalidTransition):
            approve_verification(verification, user)

        stats = get_statistics()
        assert stats.verified_projects == 1
        assert stats.pending_verification == 0
        assert ActivityLog.objects.filter(action="verification_approved").count() == 1

    def test_reject_leaves_project_status(self, project, verification, user):
        reject_verification(verification, user)

        project.refresh_from_db()
        verification.refresh_from_db()
        assert verification.status == ProjectVerification.Status.REJECTED
        assert project.status == Project.Status.REGISTERED
        assert get_statistics().pending_verification == 0
        assert get_statistics().verified_projects == 0

    def test_approve_after_reject_fails(self, verification, user):
        reject_verification(verification, user)

        with pytest.raises(InvalidTransition):
            approve_verification(verification, user)

    def test_stale_version_rejected(self, verification, user):
        with pytest.raises(ConcurrentModification):
            approve_verification(verification, user, expected_version=99)

        verification.refresh_from_db()
        assert verification.status == ProjectVerification.Status.PENDING


@pytest.mark.django_db
class TestStages:

    def test_advance_does_not_complete_previous_stage(self, verification, stages, user):
        advanced = advance_stage(verification, stages[1], user)

        assert advanced.current_stage == stages[1]
        assert advanced.completed_stages.count() == 0
        assert ActivityLog.objects.filter(action="verification_stage_advanced").count() == 1

    def test_advance_requires_pending(self, verification, stages, user):
        approve_verification(verification, user)

        with pytest.raises(InvalidState):
            advance_stage(verification, stages[1], user)

    def test_complete_stage_is_idempotent(self, verification, stages, user):
        complete_stage(verification, stages[0], user)
        complete_stage(verification, stages[0], user)

        verification.refresh_from_db()
        assert list(verification.completed_stages.all()) == [stages[0]]
        assert ActivityLog.objects.filter(action="verification_stage_completed").count() == 1

    def test_complete_stage_warns_about_missing_documents(self, verification, stages, user):
        stage = stages[0]
        add_document(
            verification,
            stage,
            user,
            document_type="project_design_document",
            document_name="PDD v2",
            document_url="https://docs.example/pdd.pdf",
        )

        _, warnings = complete_stage(verification, stage, user)

        assert warnings == ["Missing required document: monitoring_report"]
        assert verification.completed_stages.filter(pk=stage.pk).exists()

    def test_rejected_documents_do_not_count(self, verification, stages, user):
        stage = VerificationStage.objects.get(name="Site Inspection")
        document = add_document(
            verification,
            stage,
            user,
            document_type="site_inspection_report",
            document_name="Inspection",
            document_url="https://docs.example/inspection.pdf",
        )
        review_document(document.pk, user, status="rejected", notes="Illegible")

        _, warnings = complete_stage(verification, stage, user)

        assert warnings == ["Missing required document: site_inspection_report"]

    def test_complete_stage_requires_pending(self, verification, stages, user):
        reject_verification(verification, user)

        with pytest.raises(InvalidState):
            complete_stage(verification, stages[0], user)


@pytest.mark.django_db
class TestUpdateVerification:

    def test_combined_update_logs_one_entry(self, verification, stages, user):
        before = ActivityLog.objects.count()

        result = update_verification(
            verification,
            user,
            current_stage=stages[4],
            notes="All clear",
            status="approved",
        )

        assert result.status == ProjectVerification.Status.APPROVED
        assert result.current_stage == stages[4]
        assert result.notes == "All clear"
        assert ActivityLog.objects.count() == before + 1
        assert ActivityLog.objects.first().action == "verification_approved"
        assert get_statistics().verified_projects == 1

    def test_metadata_only_update(self, verification, user):
        result = update_verification(verification, user, verifier="auditor1")

        assert result.verifier == "auditor1"
        assert ActivityLog.objects.first().action == "verification_updated"

    @pytest.mark.parametrize("decision", ["approved", "rejected"])
    def test_repeated_decision_rejected(self, verification, user, decision):
        update_verification(verification, user, status=decision)
        stats = get_statistics()

        with pytest.raises(InvalidTransition):
            update_verification(verification, user, status=decision)

        after = get_statistics()
        assert after.verified_projects == stats.verified_projects
        assert after.pending_verification == stats.pending_verification == 0

    def test_pending_status_is_noop_while_pending(self, verification, user):
        result = update_verification(verification, user, status="pending")

        assert result.status == ProjectVerification.Status.PENDING
        assert result.version == verification.version

    def test_backward_status_rejected(self, verification, user):
        approve_verification(verification, user)

        with pytest.raises(InvalidTransition):
            update_verification(verification, user, status="pending")

    def test_metadata_change_on_decided_verification_rejected(self, verification, user):
        approve_verification(verification, user)

        with pytest.raises(InvalidState):
            update_verification(verification, user, notes="late note")

    def test_unknown_fields_rejected(self, verification, user):
        with pytest.raises(ValidationError):
            update_verification(verification, user, project="other")

    def test_assign_verifier_while_pending(self, verification, user):
        result = assign_verifier(
            verification,
            user,
            third_party_verifier="Bureau Veritas",
            contact_email="climate@bv.example",
            verification_standard="Gold Standard",
        )

        assert result.third_party_verifier == "Bureau Veritas"
        assert result.version == verification.version + 1


@pytest.mark.django_db
class TestDocumentsAndComments:

    def test_documents_only_while_pending(self, verification, stages, user):
        approve_verification(verification, user)

        with pytest.raises(InvalidState):
            add_document(
                verification,
                stages[0],
                user,
                document_type="monitoring_report",
                document_name="MR",
                document_url="https://docs.example/mr.pdf",
            )

    def test_review_document_changes_only_review_fields(self, verification, stages, user):
        document = add_document(
            verification,
            stages[0],
            user,
            document_type="monitoring_report",
            document_name="MR",
            document_url="https://docs.example/mr.pdf",
        )

        reviewed = review_document(document.pk, user, status="approved")

        assert reviewed.status == VerificationDocument.Status.APPROVED
        assert reviewed.reviewed_at is not None
        assert reviewed.document_name == "MR"

    def test_review_document_rejects_unknown_status(self, verification, stages, user):
        document = add_document(
            verification,
            stages[0],
            user,
            document_type="monitoring_report",
            document_name="MR",
            document_url="https://docs.example/mr.pdf",
        )

        with pytest.raises(ValidationError):
            review_document(document.pk, user, status="lost")

    def test_comments_allowed_after_decision(self, verification, stages, user):
        approve_verification(verification, user)

        comment = add_comment(verification, stages[4], user, "Approved after site visit", is_internal=True)

        assert comment.is_internal is True
        assert ActivityLog.objects.filter(action="verification_comment_added").count() == 1

    def test_blank_comment_rejected(self, verification, stages, user):
        with pytest.raises(ValidationError):
            add_comment(verification, stages[0], user, "   ")
