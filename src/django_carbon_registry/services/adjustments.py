"""
Corresponding adjustment services (Paris Agreement Article 6).

Adjustments against one credit may never add up to more than the
credit's quantity. Status moves forward only:

    pending -> approved -> verified
    pending -> rejected

Verified and rejected adjustments are final: only their notes can change.
"""

import logging

from django.db import transaction
from django.db.models import Sum

from ..activity import record_activity
from ..exceptions import InvalidState, InvalidTransition, NotFound, PreconditionFailed, ValidationError
from ..models import CarbonCredit, CorrespondingAdjustment
from ..notary import notarize
from .common import (
    clean_country_code,
    clean_date,
    clean_positive_int,
    lock_entity,
    reject_unknown_fields,
    save_versioned,
)

logger = logging.getLogger(__name__)

Status = CorrespondingAdjustment.Status

ADJUSTMENT_TRANSITIONS = {
    Status.PENDING: {Status.APPROVED, Status.REJECTED},
    Status.APPROVED: {Status.VERIFIED},
    Status.VERIFIED: set(),
    Status.REJECTED: set(),
}

FINAL_STATUSES = (Status.VERIFIED, Status.REJECTED)

OPTIONAL_FIELDS = (
    "recipient_country",
    "adjustment_date",
    "ndc_target",
    "mitigation_outcome_type",
    "authorized_by",
    "verified_by",
    "authorization_document",
    "verification_document",
    "notes",
)

UPDATABLE_FIELDS = OPTIONAL_FIELDS + (
    "host_country",
    "adjustment_type",
    "adjustment_quantity",
    "status",
)


def get_adjustment(pk) -> CorrespondingAdjustment:
    try:
        return CorrespondingAdjustment.objects.select_related("credit").get(pk=pk)
    except (CorrespondingAdjustment.DoesNotExist, ValueError, TypeError):
        raise NotFound("adjustment", pk)


def adjusted_quantity(credit, exclude_pk=None) -> int:
    """Sum of adjustment quantities recorded against a credit."""
    adjustments = CorrespondingAdjustment.objects.filter(credit=credit)
    if exclude_pk is not None:
        adjustments = adjustments.exclude(pk=exclude_pk)
    return adjustments.aggregate(total=Sum("adjustment_quantity"))["total"] or 0


def _check_bound(credit, quantity: int, exclude_pk=None) -> None:
    already = adjusted_quantity(credit, exclude_pk=exclude_pk)
    if already + quantity > credit.quantity:
        raise PreconditionFailed(
            f"Adjustments for {credit.serial_number} would total {already + quantity} "
            f"which exceeds the credit quantity of {credit.quantity}"
        )


def _clean(fields: dict) -> dict:
    cleaned = dict(fields)
    if "host_country" in cleaned:
        cleaned["host_country"] = clean_country_code(cleaned["host_country"], "hostCountry")
    if "recipient_country" in cleaned:
        cleaned["recipient_country"] = clean_country_code(
            cleaned["recipient_country"], "recipientCountry", required=False
        )
    if "adjustment_date" in cleaned:
        cleaned["adjustment_date"] = clean_date(cleaned["adjustment_date"], "adjustmentDate")
    if "adjustment_quantity" in cleaned:
        cleaned["adjustment_quantity"] = clean_positive_int(
            cleaned["adjustment_quantity"], "adjustmentQuantity"
        )
    if "adjustment_type" in cleaned and (
        cleaned["adjustment_type"] not in CorrespondingAdjustment.AdjustmentType.values
    ):
        raise ValidationError({"adjustmentType": ["Must be 'Article 6.2' or 'Article 6.4'."]})
    return cleaned


@transaction.atomic
def create_adjustment(
    credit: CarbonCredit,
    actor,
    *,
    host_country: str,
    adjustment_type: str,
    adjustment_quantity,
    **optional,
) -> CorrespondingAdjustment:
    """
    Record a corresponding adjustment against a credit.

    New adjustments always start pending.

    Raises:
        ValidationError: For malformed fields
        PreconditionFailed: If an international transfer is not Paris-eligible
            or the adjustment would exceed the credit quantity
    """
    reject_unknown_fields(optional, OPTIONAL_FIELDS)
    fields = _clean(
        dict(
            optional,
            host_country=host_country,
            adjustment_type=adjustment_type,
            adjustment_quantity=adjustment_quantity,
        )
    )

    credit = lock_entity(CarbonCredit, "credit", credit.pk, pk=credit.pk)
    if credit.international_transfer and not credit.paris_agreement_eligible:
        raise PreconditionFailed(
            f"Credit {credit.serial_number} is an international transfer but is not "
            f"Paris Agreement eligible"
        )
    _check_bound(credit, fields["adjustment_quantity"])

    adjustment = CorrespondingAdjustment.objects.create(
        credit=credit,
        credit_serial_number=credit.serial_number,
        created_by=actor,
        **fields,
    )

    record_activity(
        action="adjustment_created",
        description=(
            f"{adjustment.adjustment_type} adjustment of {adjustment.adjustment_quantity} "
            f"recorded for {credit.serial_number}"
        ),
        entity_type="adjustment",
        entity_id=adjustment.pk,
        actor=actor,
        metadata={"serial_number": credit.serial_number},
    )
    notarize(
        "adjustment",
        adjustment.pk,
        "adjusted",
        {
            "serial_number": credit.serial_number,
            "quantity": adjustment.adjustment_quantity,
            "status": adjustment.status,
        },
    )
    logger.info("Adjustment %s created for %s", adjustment.pk, credit.serial_number)
    return adjustment


@transaction.atomic
def update_adjustment(
    adjustment: CorrespondingAdjustment, actor, expected_version: int = None, **patch
) -> CorrespondingAdjustment:
    """
    Partially update an adjustment.

    Setting the current status again is a no-op for the status field.
    Once verified or rejected, only ``notes`` may be updated.

    Raises:
        InvalidState: For changes other than notes on a final adjustment
        InvalidTransition: For a status move outside ADJUSTMENT_TRANSITIONS
        PreconditionFailed: If a new quantity breaks the per-credit bound
    """
    reject_unknown_fields(patch, UPDATABLE_FIELDS)
    patch = _clean(patch)

    credit = lock_entity(CarbonCredit, "credit", adjustment.credit_id, pk=adjustment.credit_id)
    adjustment = lock_entity(
        CorrespondingAdjustment, "adjustment", adjustment.pk, expected_version, pk=adjustment.pk
    )

    new_status = patch.get("status")
    if new_status is not None:
        if new_status not in Status.values:
            raise ValidationError({"status": [f"Must be one of {', '.join(Status.values)}."]})
        if new_status == adjustment.status:
            del patch["status"]
        elif new_status not in ADJUSTMENT_TRANSITIONS[adjustment.status]:
            raise InvalidTransition(adjustment.status, new_status)

    if adjustment.status in FINAL_STATUSES:
        frozen = sorted(
            field for field, value in patch.items()
            if field != "notes" and getattr(adjustment, field) != value
        )
        if frozen:
            raise InvalidState(
                "adjustment",
                adjustment.status,
                f"Adjustment is '{adjustment.status}'; cannot change {', '.join(frozen)}",
            )

    if "adjustment_quantity" in patch:
        _check_bound(credit, patch["adjustment_quantity"], exclude_pk=adjustment.pk)

    changed = [field for field, value in patch.items() if getattr(adjustment, field) != value]
    if not changed:
        return adjustment

    previous_status = adjustment.status
    for field in changed:
        setattr(adjustment, field, patch[field])
    save_versioned(adjustment, changed)

    record_activity(
        action="adjustment_updated",
        description=f"Adjustment {adjustment.pk} for {adjustment.credit_serial_number} updated",
        entity_type="adjustment",
        entity_id=adjustment.pk,
        actor=actor,
        metadata={
            "fields": sorted(changed),
            "from_status": previous_status,
            "to_status": adjustment.status,
        },
    )
    notarize(
        "adjustment",
        adjustment.pk,
        "adjusted",
        {"fields": sorted(changed), "status": adjustment.status},
    )
    return adjustment
