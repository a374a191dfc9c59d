"""Locking and validation helpers shared by the registry services."""

import re
from datetime import date

from django.utils.dateparse import parse_date

from ..exceptions import ConcurrentModification, NotFound, ValidationError


COUNTRY_CODE_RE = re.compile(r"^[A-Za-z]{2,3}$")


def lock_entity(model, entity_type: str, key, expected_version: int = None, **lookup):
    """
    Fetch a row with select_for_update() and check its version.

    Must be called inside transaction.atomic().

    Raises:
        NotFound: If no row matches lookup
        ConcurrentModification: If expected_version is given and stale
    """
    try:
        obj = model.objects.select_for_update().get(**lookup)
    except model.DoesNotExist:
        raise NotFound(entity_type, key)

    if expected_version is not None and obj.version != expected_version:
        raise ConcurrentModification(entity_type, key, expected_version, obj.version)
    return obj


def save_versioned(obj, update_fields: list) -> None:
    """Increment the version and save the given fields."""
    obj.version += 1
    obj.save(update_fields=list(update_fields) + ["version", "updated_at"])


def reject_unknown_fields(fields: dict, allowed) -> None:
    unknown = sorted(set(fields) - set(allowed))
    if unknown:
        raise ValidationError({name: ["This field cannot be changed."] for name in unknown})


def clean_country_code(value: str, field: str, required: bool = True) -> str:
    """Upper-case a 2-3 letter country code, or raise ValidationError."""
    if not value:
        if required:
            raise ValidationError({field: ["This field is required."]})
        return ""
    if not COUNTRY_CODE_RE.match(value):
        raise ValidationError({field: ["Enter a 2-3 letter country code."]})
    return value.upper()


def clean_date(value, field: str):
    """Accept a date or an ISO date string."""
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError({field: ["Enter a valid date (YYYY-MM-DD)."]})
    return parsed


def clean_positive_int(value, field: str) -> int:
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError({field: ["Enter a whole number."]})
    if value <= 0:
        raise ValidationError({field: ["Must be greater than zero."]})
    return value
