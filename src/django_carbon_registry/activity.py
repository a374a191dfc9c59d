"""Public API for the registry activity log.

Every state-changing service calls ``record_activity`` exactly once:

    from django_carbon_registry.activity import record_activity

    record_activity(
        action="credit_retired",
        description="1000 credits retired for project KEN-2023-0045",
        entity_type="credit",
        entity_id=credit.serial_number,
        actor=user,
    )

Logging is observational: a database failure while writing the entry is
reported and never rolls back the transition it describes.
"""

import logging

from django.db import DatabaseError, transaction

from .conf import get_setting
from .models import ActivityLog

logger = logging.getLogger(__name__)


def _get_actor_display(actor):
    """Get display string for actor."""
    if not actor:
        return ""
    if getattr(actor, "username", None):
        return actor.username
    if getattr(actor, "email", None):
        return actor.email
    return str(actor)


def record_activity(
    action: str,
    description: str,
    entity_type: str,
    entity_id,
    actor=None,
    metadata: dict = None,
):
    """
    Append an activity log entry.

    Runs inside a savepoint so a failed insert leaves the surrounding
    transaction usable.

    Returns:
        The ActivityLog entry, or None if it could not be written
    """
    try:
        with transaction.atomic():
            return ActivityLog.objects.create(
                action=action,
                description=description,
                entity_type=entity_type,
                entity_id=str(entity_id),
                actor=actor if getattr(actor, "pk", None) else None,
                actor_display=_get_actor_display(actor)[:200],
                metadata=metadata or {},
            )
    except DatabaseError:
        logger.exception(
            "Failed to record activity %s for %s:%s", action, entity_type, entity_id
        )
        return None


def list_activity(limit: int = None, entity_type: str = None, entity_id=None):
    """
    List activity entries newest-first.

    Args:
        limit: Maximum entries (defaults to REGISTRY_ACTIVITY_DEFAULT_LIMIT,
            capped at REGISTRY_ACTIVITY_MAX_LIMIT)
        entity_type: Optional filter on entity type
        entity_id: Optional filter on entity id
    """
    if limit is None:
        limit = get_setting("ACTIVITY_DEFAULT_LIMIT")
    limit = max(0, min(int(limit), get_setting("ACTIVITY_MAX_LIMIT")))

    entries = ActivityLog.objects.select_related("actor")
    if entity_type:
        entries = entries.filter(entity_type=entity_type)
    if entity_id is not None:
        entries = entries.filter(entity_id=str(entity_id))
    return list(entries.order_by("-timestamp", "-id")[:limit])
