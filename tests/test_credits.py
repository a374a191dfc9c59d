"""Tests for the credit lifecycle."""

from datetime import date

import pytest

from django_carbon_registry.exceptions import (
    ConcurrentModification,
    InvalidState,
    NotFound,
    PreconditionFailed,
    ValidationError,
)
from django_carbon_registry.models import ActivityLog, CarbonCredit
from django_carbon_registry.services.credits import (
    get_credit_by_serial,
    issue_credits,
    retire_credit,
    transfer_credit,
    update_paris_compliance,
)
from django_carbon_registry.statistics import get_statistics


@pytest.mark.django_db
class TestIssueCredits:

    def test_issues_available_batch_owned_by_developer(self, credit, verified_project, user):
        assert credit.status == CarbonCredit.Status.AVAILABLE
        assert credit.owner == verified_project.developer == user.username
        assert credit.serial_number == f"CR-{verified_project.project_id}-2023-2024-001"
        assert credit.batch_number == 1

    def test_batches_increase_per_vintage(self, verified_project, user):
        first = issue_credits(verified_project, 100, 2023, user)
        second = issue_credits(verified_project, 200, 2023, user)
        other_vintage = issue_credits(verified_project, 300, 2024, user)

        assert first.serial_number.endswith("-2023-2024-001")
        assert second.serial_number.endswith("-2023-2024-002")
        assert other_vintage.serial_number.endswith("-2024-2025-001")

    def test_total_credits_tracks_cumulative_issuance(self, verified_project, user):
        for quantity in (100, 250, 650):
            issue_credits(verified_project, quantity, 2023, user)

        assert get_statistics().total_credits == 1000

    @pytest.mark.parametrize("status", ["draft", "registered"])
    def test_requires_verified_project(self, make_project, user, status):
        project = make_project(status=status)

        with pytest.raises(PreconditionFailed):
            issue_credits(project, 500, 2023, user)

        assert CarbonCredit.objects.count() == 0
        assert get_statistics().total_credits == 0
        assert not ActivityLog.objects.filter(action="credit_issued").exists()

    @pytest.mark.parametrize("quantity", [0, -5, "many"])
    def test_rejects_non_positive_quantity(self, verified_project, user, quantity):
        with pytest.raises(ValidationError) as exc_info:
            issue_credits(verified_project, quantity, 2023, user)
        assert "quantity" in exc_info.value.fields

    def test_paris_fields_stored(self, verified_project, user):
        credit = issue_credits(
            verified_project,
            500,
            2023,
            user,
            paris_agreement_eligible=True,
            host_country="ken",
            authorization_date="2023-06-30",
        )

        assert credit.paris_agreement_eligible is True
        assert credit.host_country == "KEN"
        assert credit.authorization_date == date(2023, 6, 30)

    def test_records_activity(self, credit):
        entry = ActivityLog.objects.get(action="credit_issued")
        assert entry.entity_type == "credit"
        assert entry.entity_id == credit.serial_number


@pytest.mark.django_db
class TestRetireCredit:

    def test_retire_stamps_fields(self, credit, user):
        retired = retire_credit(credit, user, purpose="Offset 2023 flights", beneficiary="Acme Ltd")

        assert retired.status == CarbonCredit.Status.RETIRED
        assert retired.retirement_date is not None
        assert retired.retirement_purpose == "Offset 2023 flights"
        assert retired.retirement_beneficiary == "Acme Ltd"
        assert retired.version == 2

    def test_retire_does_not_reduce_total_credits(self, credit, user):
        retire_credit(credit, user)

        assert get_statistics().total_credits == 1000

    def test_retire_twice_fails(self, credit, user):
        retire_credit(credit, user)

        with pytest.raises(InvalidState) as exc_info:
            retire_credit(credit, user)

        assert "Only available credits can be retired" in str(exc_info.value)
        assert ActivityLog.objects.filter(action="credit_retired").count() == 1

    def test_stale_version_rejected(self, credit, user):
        with pytest.raises(ConcurrentModification):
            retire_credit(credit, user, expected_version=5)

        credit.refresh_from_db()
        assert credit.status == CarbonCredit.Status.AVAILABLE


@pytest.mark.django_db
class TestTransferCredit:

    def test_transfer_records_recipient_and_keeps_owner(self, credit, user, other_user):
        transferred = transfer_credit(credit, other_user.username, user, purpose="Sale")

        assert transferred.status == CarbonCredit.Status.TRANSFERRED
        assert transferred.transfer_recipient == other_user.username
        assert transferred.transfer_purpose == "Sale"
        assert transferred.owner == user.username

    def test_unknown_recipient_leaves_credit_untouched(self, credit, user):
        with pytest.raises(NotFound):
            transfer_credit(credit, "nobody", user)

        credit.refresh_from_db()
        assert credit.status == CarbonCredit.Status.AVAILABLE
        assert credit.version == 1

    def test_inactive_recipient_rejected(self, credit, user, other_user):
        other_user.is_active = False
        other_user.save()

        with pytest.raises(NotFound):
            transfer_credit(credit, other_user.username, user)

    def test_retire_then_transfer_fails_and_credit_unchanged(self, credit, user, other_user):
        retire_credit(credit, user, purpose="Offset")
        credit.refresh_from_db()
        snapshot = (credit.status, credit.version, credit.transfer_recipient)

        with pytest.raises(InvalidState):
            transfer_credit(credit, other_user.username, user)

        credit.refresh_from_db()
        assert (credit.status, credit.version, credit.transfer_recipient) == snapshot
        assert not ActivityLog.objects.filter(action="credit_transferred").exists()

    def test_transfer_then_retire_fails(self, credit, user, other_user):
        transfer_credit(credit, other_user.username, user)

        with pytest.raises(InvalidState):
            retire_credit(credit, user)


@pytest.mark.django_db
class TestParisCompliance:

    def test_updates_fields_in_any_status(self, credit, user):
        retire_credit(credit, user)

        updated = update_paris_compliance(
            credit,
            user,
            paris_agreement_eligible=True,
            host_country="KE",
            corresponding_adjustment_status="pending",
            international_transfer=True,
        )

        assert updated.host_country == "KE"
        assert updated.corresponding_adjustment_status == "pending"
        assert updated.status == CarbonCredit.Status.RETIRED

    @pytest.mark.parametrize(
        "fields",
        [
            {"host_country": "KENYA"},
            {"authorization_date": "not-a-date"},
            {"corresponding_adjustment_status": "verified"},
            {"serial_number": "CR-FAKE"},
        ],
    )
    def test_invalid_fields_rejected(self, credit, user, fields):
        with pytest.raises(ValidationError):
            update_paris_compliance(credit, user, **fields)

        credit.refresh_from_db()
        assert credit.version == 1


@pytest.mark.django_db
class TestLookup:

    def test_get_by_serial(self, credit):
        assert get_credit_by_serial(credit.serial_number) == credit

    def test_missing_serial_raises(self):
        with pytest.raises(NotFound):
            get_credit_by_serial("CR-NONE")
