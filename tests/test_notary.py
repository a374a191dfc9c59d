"""Tests for notary backends and their loading."""

from unittest import mock

import pytest
from django.core.exceptions import ImproperlyConfigured

from django_carbon_registry.conf import clear_notary_cache, get_notary, get_setting, load_notary
from django_carbon_registry.notary import BaseNotary, MockNotary, NotaryReceipt, notarize
from django_carbon_registry.services.credits import retire_credit


class RecordingNotary(BaseNotary):
    """Notary that keeps every call in memory."""

    network = "recording"
    calls = []

    def record(self, entity_type, entity_id, action, payload):
        self.calls.append((entity_type, entity_id, action, payload))
        return NotaryReceipt(tx_hash=f"0x{len(self.calls):064x}", network=self.network)


class ExplodingNotary(BaseNotary):
    def record(self, entity_type, entity_id, action, payload):
        raise ConnectionError("node unreachable")


class NotANotary:
    pass


@pytest.fixture(autouse=True)
def reset_notary_cache():
    clear_notary_cache()
    RecordingNotary.calls = []
    yield
    clear_notary_cache()


class TestBackendLoading:

    def test_default_backend_is_mock(self):
        assert get_setting("NOTARY_BACKEND") == "django_carbon_registry.notary.MockNotary"
        assert isinstance(get_notary(), MockNotary)

    def test_backend_is_cached(self):
        assert get_notary() is get_notary()

    def test_configured_backend_loaded(self, settings):
        settings.REGISTRY_NOTARY_BACKEND = "tests.test_notary.RecordingNotary"

        assert isinstance(get_notary(), RecordingNotary)

    @pytest.mark.parametrize(
        "path",
        [
            "nodots",
            "tests.missing_module.Notary",
            "tests.test_notary.Missing",
            "tests.test_notary.NotANotary",
        ],
    )
    def test_bad_paths_raise_improperly_configured(self, path):
        with pytest.raises(ImproperlyConfigured):
            load_notary(path)


class TestMockNotary:

    def test_receipt_has_hash_and_network(self):
        receipt = MockNotary().record("credit", "CR-1", "retired", {})

        assert receipt.network == "mock"
        assert receipt.tx_hash.startswith("0x")
        assert len(receipt.tx_hash) == 66


@pytest.mark.django_db
class TestNotarize:

    def test_runs_after_commit(self, settings, django_capture_on_commit_callbacks):
        settings.REGISTRY_NOTARY_BACKEND = "tests.test_notary.RecordingNotary"

        with django_capture_on_commit_callbacks(execute=True):
            notarize("project", "KEN-2023-0001", "created", {"name": "Kasigau"})

        assert RecordingNotary.calls == [
            ("project", "KEN-2023-0001", "created", {"name": "Kasigau"})
        ]

    def test_not_called_before_commit(self, settings, django_capture_on_commit_callbacks):
        settings.REGISTRY_NOTARY_BACKEND = "tests.test_notary.RecordingNotary"

        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            notarize("project", "KEN-2023-0001", "created")

        assert len(callbacks) == 1
        assert RecordingNotary.calls == []

    def test_transition_notarized_with_serial(self, credit, user, settings, django_capture_on_commit_callbacks):
        settings.REGISTRY_NOTARY_BACKEND = "tests.test_notary.RecordingNotary"

        with django_capture_on_commit_callbacks(execute=True):
            retire_credit(credit, user)

        entity_type, entity_id, action, payload = RecordingNotary.calls[-1]
        assert (entity_type, entity_id, action) == ("credit", credit.serial_number, "retired")
        assert payload["status"] == "retired"

    def test_backend_failure_is_swallowed(self, credit, user, settings, django_capture_on_commit_callbacks, caplog):
        settings.REGISTRY_NOTARY_BACKEND = "tests.test_notary.ExplodingNotary"

        with django_capture_on_commit_callbacks(execute=True):
            retired = retire_credit(credit, user)

        assert retired.status == "retired"
        assert "Notary failed" in caplog.text

    def test_mock_notary_logs_receipt(self, django_capture_on_commit_callbacks):
        with mock.patch.object(MockNotary, "record", wraps=MockNotary().record) as record:
            with django_capture_on_commit_callbacks(execute=True):
                notarize("adjustment", 7, "adjusted", {"quantity": 10})

        record.assert_called_once_with("adjustment", "7", "adjusted", {"quantity": 10})
