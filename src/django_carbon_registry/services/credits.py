"""
Credit lifecycle services.

A credit batch leaves ``available`` exactly once:

    available -> retired
    available -> transferred

Both transitions lock the credit row, so concurrent requests against the
same batch cannot both succeed.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from ..activity import record_activity
from ..exceptions import InvalidState, NotFound, PreconditionFailed, ValidationError
from ..identifiers import format_serial_number, next_batch_number
from ..models import CarbonCredit, Project
from ..notary import notarize
from ..statistics import adjust_counters
from .common import (
    clean_country_code,
    clean_date,
    clean_positive_int,
    lock_entity,
    reject_unknown_fields,
    save_versioned,
)

logger = logging.getLogger(__name__)

PARIS_FIELDS = (
    "paris_agreement_eligible",
    "host_country",
    "corresponding_adjustment_status",
    "corresponding_adjustment_details",
    "international_transfer",
    "mitigation_outcome",
    "authorization_reference",
    "authorization_date",
)


def get_credit(pk) -> CarbonCredit:
    try:
        return CarbonCredit.objects.select_related("project").get(pk=pk)
    except (CarbonCredit.DoesNotExist, ValueError, TypeError):
        raise NotFound("credit", pk)


def get_credit_by_serial(serial_number: str) -> CarbonCredit:
    try:
        return CarbonCredit.objects.select_related("project").get(serial_number=serial_number)
    except CarbonCredit.DoesNotExist:
        raise NotFound("credit", serial_number)


def resolve_participant(username: str):
    """Return the active user registered under ``username``."""
    User = get_user_model()
    try:
        return User.objects.get(username=username, is_active=True)
    except User.DoesNotExist:
        raise NotFound("participant", username)


def _clean_paris_fields(fields: dict) -> dict:
    reject_unknown_fields(fields, PARIS_FIELDS)
    cleaned = dict(fields)
    if "host_country" in cleaned:
        cleaned["host_country"] = clean_country_code(
            cleaned["host_country"], "hostCountry", required=False
        )
    if "authorization_date" in cleaned:
        cleaned["authorization_date"] = clean_date(
            cleaned["authorization_date"], "authorizationDate"
        )
    status = cleaned.get("corresponding_adjustment_status")
    if status and status not in CarbonCredit.AdjustmentStatus.values:
        raise ValidationError(
            {"correspondingAdjustmentStatus": ["Must be pending, approved or rejected."]}
        )
    return cleaned


def _credit_payload(credit: CarbonCredit) -> dict:
    return {
        "serial_number": credit.serial_number,
        "project_id": credit.project.project_id,
        "quantity": credit.quantity,
        "status": credit.status,
    }


@transaction.atomic
def issue_credits(project: Project, quantity, vintage, actor, **paris_fields) -> CarbonCredit:
    """
    Issue a new batch of credits against a verified project.

    Args:
        project: Project the credits are issued for
        quantity: Positive tCO2e amount
        vintage: Year the reductions occurred
        actor: User issuing the credits
        **paris_fields: Optional Paris Agreement metadata (see PARIS_FIELDS)

    Returns:
        The created CarbonCredit in status 'available'

    Raises:
        PreconditionFailed: If the project is not verified
        ValidationError: For a bad quantity, vintage or Paris field
    """
    quantity = clean_positive_int(quantity, "quantity")
    paris_fields = _clean_paris_fields(paris_fields)

    project = lock_entity(Project, "project", project.project_id, pk=project.pk)
    if project.status != Project.Status.VERIFIED:
        raise PreconditionFailed(
            f"Credits can only be issued for verified projects "
            f"({project.project_id} is {project.status})"
        )

    while True:
        batch_number = next_batch_number(project.project_id, vintage)
        serial_number = format_serial_number(project.project_id, batch_number, vintage)
        if not CarbonCredit.objects.filter(serial_number=serial_number).exists():
            break

    credit = CarbonCredit.objects.create(
        serial_number=serial_number,
        project=project,
        vintage=int(vintage),
        batch_number=batch_number,
        quantity=quantity,
        owner=project.developer,
        issued_by=actor,
        **paris_fields,
    )

    adjust_counters(total_credits=quantity)
    record_activity(
        action="credit_issued",
        description=f"{quantity} credits issued for project {project.project_id}",
        entity_type="credit",
        entity_id=credit.serial_number,
        actor=actor,
        metadata={"project_id": project.project_id, "quantity": quantity},
    )
    notarize("credit", credit.serial_number, "created", _credit_payload(credit))
    logger.info("Issued %s (%s tCO2e)", credit.serial_number, quantity)
    return credit


@transaction.atomic
def retire_credit(
    credit: CarbonCredit,
    actor,
    purpose: str = "",
    beneficiary: str = "",
    expected_version: int = None,
) -> CarbonCredit:
    """
    Retire an available credit batch permanently.

    Retirement does not reduce ``total_credits``, which counts cumulative
    issuance.

    Raises:
        InvalidState: If the credit is not available
    """
    credit = lock_entity(
        CarbonCredit, "credit", credit.pk, expected_version, pk=credit.pk
    )
    if not credit.is_available:
        raise InvalidState(
            "credit",
            credit.status,
            f"Only available credits can be retired (credit is {credit.status})",
        )

    credit.status = CarbonCredit.Status.RETIRED
    credit.retirement_date = timezone.now()
    credit.retirement_purpose = purpose or ""
    credit.retirement_beneficiary = beneficiary or ""
    save_versioned(
        credit,
        ["status", "retirement_date", "retirement_purpose", "retirement_beneficiary"],
    )

    record_activity(
        action="credit_retired",
        description=f"{credit.quantity} credits retired for project {credit.project.project_id}",
        entity_type="credit",
        entity_id=credit.serial_number,
        actor=actor,
        metadata={"purpose": credit.retirement_purpose, "beneficiary": credit.retirement_beneficiary},
    )
    notarize("credit", credit.serial_number, "retired", _credit_payload(credit))
    logger.info("Retired %s", credit.serial_number)
    return credit


@transaction.atomic
def transfer_credit(
    credit: CarbonCredit,
    recipient: str,
    actor,
    purpose: str = "",
    expected_version: int = None,
) -> CarbonCredit:
    """
    Transfer an available credit batch to another registry participant.

    ``owner`` keeps the issuing developer; ``transfer_recipient`` records
    the holder.

    Raises:
        InvalidState: If the credit is not available
        NotFound: If the recipient is not a registry participant
    """
    credit = lock_entity(
        CarbonCredit, "credit", credit.pk, expected_version, pk=credit.pk
    )
    if not credit.is_available:
        raise InvalidState(
            "credit",
            credit.status,
            f"Only available credits can be transferred (credit is {credit.status})",
        )
    if not recipient:
        raise ValidationError({"recipient": ["This field is required."]})
    participant = resolve_participant(recipient)

    credit.status = CarbonCredit.Status.TRANSFERRED
    credit.transfer_date = timezone.now()
    credit.transfer_recipient = participant.username
    credit.transfer_purpose = purpose or ""
    save_versioned(
        credit,
        ["status", "transfer_date", "transfer_recipient", "transfer_purpose"],
    )

    record_activity(
        action="credit_transferred",
        description=f"{credit.quantity} credits transferred to {participant.username}",
        entity_type="credit",
        entity_id=credit.serial_number,
        actor=actor,
        metadata={"recipient": participant.username, "purpose": credit.transfer_purpose},
    )
    notarize("credit", credit.serial_number, "transferred", _credit_payload(credit))
    logger.info("Transferred %s to %s", credit.serial_number, participant.username)
    return credit


@transaction.atomic
def update_paris_compliance(
    credit: CarbonCredit, actor, expected_version: int = None, **fields
) -> CarbonCredit:
    """
    Assign Paris Agreement metadata on a credit.

    Not a state transition; allowed in any credit status.
    """
    fields = _clean_paris_fields(fields)
    credit = lock_entity(
        CarbonCredit, "credit", credit.pk, expected_version, pk=credit.pk
    )

    for field, value in fields.items():
        setattr(credit, field, value)
    save_versioned(credit, fields.keys())

    record_activity(
        action="credit_paris_updated",
        description=f"Paris Agreement details updated for {credit.serial_number}",
        entity_type="credit",
        entity_id=credit.serial_number,
        actor=actor,
        metadata={"fields": sorted(fields)},
    )
    return credit
