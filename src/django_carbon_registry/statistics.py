"""Aggregate registry statistics.

The counters live on the ``RegistryStatistics`` singleton row and are
adjusted with F() expressions inside the same transaction as the
mutation that triggers them. ``compute_statistics`` derives the same
numbers from the entity tables, which is what ``reconcile_statistics``
and the integrity check compare against.
"""

import logging

from django.db import transaction
from django.db.models import F, Sum, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from .models import CarbonCredit, Project, ProjectVerification, RegistryStatistics

logger = logging.getLogger(__name__)

COUNTER_FIELDS = (
    "total_projects",
    "verified_projects",
    "pending_verification",
    "total_credits",
)


def get_statistics() -> RegistryStatistics:
    """Return the statistics row, creating it on first access."""
    return RegistryStatistics.get_instance()


def adjust_counters(**deltas) -> None:
    """
    Apply counter deltas to the statistics row.

    Must be called inside the transaction of the triggering mutation.
    Counters never go below zero.

    Usage:
        adjust_counters(verified_projects=1, pending_verification=-1)
    """
    unknown = set(deltas) - set(COUNTER_FIELDS)
    if unknown:
        raise ValueError(f"Unknown statistics counters: {sorted(unknown)}")

    RegistryStatistics.get_instance()
    updates = {
        name: Greatest(F(name) + Value(delta), Value(0))
        for name, delta in deltas.items()
        if delta
    }
    if not updates:
        return
    RegistryStatistics.objects.filter(pk=1).update(last_updated=timezone.now(), **updates)


def compute_statistics() -> dict:
    """Derive the counters from the authoritative entity tables."""
    total_credits = CarbonCredit.objects.aggregate(total=Sum("quantity"))["total"] or 0
    return {
        "total_projects": Project.objects.count(),
        "verified_projects": Project.objects.filter(status=Project.Status.VERIFIED).count(),
        "pending_verification": ProjectVerification.objects.filter(
            status=ProjectVerification.Status.PENDING
        ).count(),
        "total_credits": total_credits,
    }


def statistics_drift() -> dict:
    """
    Compare stored counters with derived ones.

    Returns:
        Dict of counter -> (stored, computed) for every mismatch
    """
    stats = get_statistics()
    computed = compute_statistics()
    return {
        name: (getattr(stats, name), computed[name])
        for name in COUNTER_FIELDS
        if getattr(stats, name) != computed[name]
    }


@transaction.atomic
def reconcile_statistics() -> RegistryStatistics:
    """Rewrite the statistics row from the entity tables."""
    get_statistics()
    stats = RegistryStatistics.objects.select_for_update().get(pk=1)
    computed = compute_statistics()
    for name, value in computed.items():
        setattr(stats, name, value)
    stats.save()
    logger.info("Statistics reconciled: %s", stats)
    return stats
