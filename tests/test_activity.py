"""Tests for the append-only activity log."""

from unittest import mock

import pytest
from django.db import DatabaseError

from django_carbon_registry.activity import _get_actor_display, list_activity, record_activity
from django_carbon_registry.exceptions import InvalidState
from django_carbon_registry.models import ActivityLog, CarbonCredit
from django_carbon_registry.services.credits import retire_credit, transfer_credit


def log(action="project_created", entity_id="KEN-2023-0001", **kwargs):
    return record_activity(
        action=action,
        description=f"{action} {entity_id}",
        entity_type=kwargs.pop("entity_type", "project"),
        entity_id=entity_id,
        **kwargs,
    )


@pytest.mark.django_db
class TestRecordActivity:

    def test_records_actor_snapshot(self, user):
        entry = log(actor=user, metadata={"source": "api"})

        assert entry.actor == user
        assert entry.actor_display == "greenfields"
        assert entry.metadata == {"source": "api"}

    def test_system_entries_have_no_actor(self):
        entry = log()

        assert entry.actor is None
        assert entry.actor_display == ""

    def test_entries_are_immutable(self):
        entry = log()
        entry.description = "rewritten"

        with pytest.raises(ValueError):
            entry.save()
        with pytest.raises(ValueError):
            entry.delete()

    def test_database_error_is_logged_not_raised(self, caplog):
        with mock.patch.object(ActivityLog.objects, "create", side_effect=DatabaseError("disk full")):
            result = log()

        assert result is None
        assert "Failed to record activity" in caplog.text

    def test_failed_log_does_not_roll_back_transition(self, credit, user):
        with mock.patch.object(ActivityLog.objects, "create", side_effect=DatabaseError("disk full")):
            retire_credit(credit, user)

        credit.refresh_from_db()
        assert credit.status == CarbonCredit.Status.RETIRED


class TestActorDisplay:

    def test_prefers_username_then_email(self):
        assert _get_actor_display(mock.Mock(username="ana", email="ana@example.org")) == "ana"
        assert _get_actor_display(mock.Mock(username="", email="ana@example.org")) == "ana@example.org"

    def test_empty_for_no_actor(self):
        assert _get_actor_display(None) == ""


@pytest.mark.django_db
class TestListActivity:

    def test_newest_first(self):
        for index in range(3):
            log(entity_id=f"KEN-2023-000{index}")

        entries = list_activity()

        assert [entry.entity_id for entry in entries] == [
            "KEN-2023-0002",
            "KEN-2023-0001",
            "KEN-2023-0000",
        ]

    def test_limit_applied_and_capped(self, settings):
        settings.REGISTRY_ACTIVITY_MAX_LIMIT = 2
        for index in range(4):
            log(entity_id=str(index))

        assert len(list_activity(limit=1)) == 1
        assert len(list_activity(limit=100)) == 2

    def test_filters_by_entity(self):
        log(entity_id="KEN-2023-0001")
        log(action="credit_issued", entity_type="credit", entity_id="CR-1")

        entries = list_activity(entity_type="credit")

        assert [entry.entity_id for entry in entries] == ["CR-1"]

    def test_one_entry_per_successful_transition(self, credit, user, other_user):
        baseline = ActivityLog.objects.count()

        transfer_credit(credit, other_user.username, user)
        with pytest.raises(InvalidState):
            retire_credit(credit, user)

        entries = list_activity(entity_type="credit", entity_id=credit.serial_number)
        assert ActivityLog.objects.count() == baseline + 1
        assert [entry.action for entry in entries] == ["credit_transferred", "credit_issued"]
