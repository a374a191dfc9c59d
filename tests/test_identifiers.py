"""Tests for project IDs, serial numbers and sequence allocation."""

import pytest

from django_carbon_registry.exceptions import ValidationError
from django_carbon_registry.identifiers import (
    format_project_id,
    format_serial_number,
    generate_project_id,
    next_batch_number,
    next_value,
    normalize_country_code,
)
from django_carbon_registry.models import RegistrySequence


class TestFormatting:
    """Pure formatting, no database."""

    def test_project_id_is_zero_padded(self):
        assert format_project_id("ken", 2023, 45) == "KEN-2023-0045"

    def test_project_id_accepts_two_letter_country(self):
        assert format_project_id("br", 2021, 7) == "BR-2021-0007"

    def test_serial_number_encodes_vintage_span_and_batch(self):
        assert format_serial_number("KEN-2023-0045", 1, 2023) == "CR-KEN-2023-0045-2023-2024-001"

    def test_serial_number_is_deterministic(self):
        first = format_serial_number("IND-2022-0003", 12, 2022)
        second = format_serial_number("IND-2022-0003", 12, 2022)
        assert first == second == "CR-IND-2022-0003-2022-2023-012"

    def test_increasing_batches_never_collide(self):
        serials = {format_serial_number("KEN-2023-0001", batch, 2023) for batch in range(1, 200)}
        assert len(serials) == 199

    def test_serial_prefix_is_configurable(self, settings):
        settings.REGISTRY_SERIAL_PREFIX = "VCU"
        assert format_serial_number("KEN-2023-0001", 1, 2023).startswith("VCU-KEN-2023-0001")

    @pytest.mark.parametrize("code", ["", "K", "KENY", "K3N", None])
    def test_invalid_country_codes_rejected(self, code):
        with pytest.raises(ValidationError) as exc_info:
            normalize_country_code(code)
        assert "countryCode" in exc_info.value.fields

    def test_invalid_year_rejected(self):
        with pytest.raises(ValidationError):
            format_project_id("KEN", "twenty", 1)

    def test_invalid_vintage_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            format_serial_number("KEN-2023-0001", 1, 99)
        assert "vintage" in exc_info.value.fields


@pytest.mark.django_db
class TestAllocation:
    """Sequence allocation backed by RegistrySequence rows."""

    def test_next_value_starts_at_one(self):
        assert next_value("scope:a") == 1
        assert next_value("scope:a") == 2
        assert RegistrySequence.objects.get(scope="scope:a").current_value == 2

    def test_scopes_are_independent(self):
        next_value("scope:a")
        next_value("scope:a")
        assert next_value("scope:b") == 1

    def test_generate_project_id_is_sequential_per_country_and_year(self):
        assert generate_project_id("KEN", 2023) == "KEN-2023-0001"
        assert generate_project_id("ken", 2023) == "KEN-2023-0002"
        assert generate_project_id("KEN", 2024) == "KEN-2024-0001"
        assert generate_project_id("BRA", 2023) == "BRA-2023-0001"

    def test_generate_project_id_skips_taken_ids(self, make_project):
        make_project(project_id="KEN-2023-0001", country_code=None)

        assert generate_project_id("KEN", 2023) == "KEN-2023-0002"

    def test_batch_numbers_are_scoped_to_project_and_vintage(self):
        assert next_batch_number("KEN-2023-0001", 2023) == 1
        assert next_batch_number("KEN-2023-0001", 2023) == 2
        assert next_batch_number("KEN-2023-0001", 2024) == 1
        assert next_batch_number("KEN-2023-0002", 2023) == 1
