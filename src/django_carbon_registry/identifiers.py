"""Identifier scheme for projects and credit batches.

Project IDs look like ``KEN-2023-0045`` and credit serial numbers like
``CR-KEN-2023-0045-2023-2024-001``. Formatting is pure; allocation uses
``RegistrySequence`` rows locked with select_for_update() so concurrent
requests never receive the same number.
"""

import re

from django.db import transaction

from .conf import get_setting
from .exceptions import ValidationError
from .models import Project, RegistrySequence


COUNTRY_CODE_RE = re.compile(r"^[A-Za-z]{2,3}$")


def normalize_country_code(country_code: str) -> str:
    """Upper-case and validate a 2-3 letter country code."""
    if not country_code or not COUNTRY_CODE_RE.match(country_code):
        raise ValidationError({"countryCode": ["Country code must be 2-3 letters."]})
    return country_code.upper()


def _validate_year(year, field: str = "year") -> int:
    try:
        year = int(year)
    except (TypeError, ValueError):
        raise ValidationError({field: ["Year must be a four-digit number."]})
    if not 1000 <= year <= 9999:
        raise ValidationError({field: ["Year must be a four-digit number."]})
    return year


def format_project_id(country_code: str, year, sequence: int) -> str:
    """
    Format a project ID from its components.

    Examples:
        format_project_id("ken", 2023, 45) -> "KEN-2023-0045"
    """
    width = get_setting("PROJECT_SEQUENCE_WIDTH")
    country = normalize_country_code(country_code)
    year = _validate_year(year)
    return f"{country}-{year}-{str(sequence).zfill(width)}"


def format_serial_number(project_id: str, batch_number: int, vintage) -> str:
    """
    Format a credit serial number.

    The serial encodes the project, the vintage year span and the
    zero-padded batch number, so it is deterministic for its inputs.

    Examples:
        format_serial_number("KEN-2023-0045", 1, 2023)
        -> "CR-KEN-2023-0045-2023-2024-001"
    """
    vintage = _validate_year(vintage, field="vintage")
    width = get_setting("BATCH_SEQUENCE_WIDTH")
    prefix = get_setting("SERIAL_PREFIX")
    batch = str(batch_number).zfill(width)
    return f"{prefix}-{project_id}-{vintage}-{vintage + 1}-{batch}"


def next_value(scope: str) -> int:
    """
    Allocate the next value of a sequence scope atomically.

    Creates the sequence at zero the first time a scope is used.
    """
    with transaction.atomic():
        seq, _ = RegistrySequence.objects.get_or_create(scope=scope)
        seq = RegistrySequence.objects.select_for_update().get(pk=seq.pk)
        seq.current_value += 1
        seq.save(update_fields=["current_value", "updated_at"])
        return seq.current_value


def generate_project_id(country_code: str, year) -> str:
    """
    Allocate a fresh project ID for a country and year.

    Skips sequence values whose ID is already taken, e.g. by projects
    imported with explicit IDs.
    """
    country = normalize_country_code(country_code)
    year = _validate_year(year)
    scope = f"project:{country}:{year}"

    with transaction.atomic():
        while True:
            candidate = format_project_id(country, year, next_value(scope))
            if not Project.objects.filter(project_id=candidate).exists():
                return candidate


def next_batch_number(project_id: str, vintage) -> int:
    """Allocate the next batch number for a project and vintage."""
    vintage = _validate_year(vintage, field="vintage")
    return next_value(f"batch:{project_id}:{vintage}")
