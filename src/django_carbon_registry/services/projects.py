"""Project registration services."""

import logging

from django.db import transaction

from ..activity import record_activity
from ..exceptions import NotFound, ValidationError
from ..identifiers import generate_project_id
from ..models import Project
from ..notary import notarize
from ..statistics import adjust_counters
from .common import clean_date, clean_positive_int, lock_entity, reject_unknown_fields, save_versioned
from .reference import check_classification

logger = logging.getLogger(__name__)

INITIAL_STATUSES = (Project.Status.DRAFT, Project.Status.REGISTERED)

UPDATABLE_FIELDS = (
    "name",
    "description",
    "category",
    "methodology",
    "location",
    "latitude",
    "longitude",
    "start_date",
    "end_date",
    "estimated_reduction",
    "image_url",
)


def get_project(project_id: str) -> Project:
    """Look up a project by its human-readable ID."""
    try:
        return Project.objects.get(project_id=project_id)
    except Project.DoesNotExist:
        raise NotFound("project", project_id)


def _check_dates(start_date, end_date) -> None:
    if start_date and end_date and end_date < start_date:
        raise ValidationError({"endDate": ["End date must not be before the start date."]})


@transaction.atomic
def create_project(
    actor,
    *,
    name: str,
    category: str,
    methodology: str,
    location: str,
    start_date,
    end_date,
    estimated_reduction: int,
    country_code: str = None,
    project_id: str = None,
    status: str = None,
    developer: str = None,
    description: str = "",
    latitude=None,
    longitude=None,
    image_url: str = "",
) -> Project:
    """
    Register a new project.

    The project ID is allocated from ``country_code`` and the start year
    unless an explicit ``project_id`` is given.

    Args:
        actor: User registering the project
        status: 'draft' or 'registered' (defaults to draft)
        developer: Developer username (defaults to the actor's username)

    Returns:
        The created Project

    Raises:
        ValidationError: For an illegal initial status, bad dates, an
            unknown category or methodology, or a taken ID
    """
    status = status or Project.Status.DRAFT
    if status not in INITIAL_STATUSES:
        raise ValidationError(
            {"status": ["New projects must be 'draft' or 'registered'."]}
        )

    start_date = clean_date(start_date, "startDate")
    end_date = clean_date(end_date, "endDate")
    _check_dates(start_date, end_date)
    estimated_reduction = clean_positive_int(estimated_reduction, "estimatedReduction")
    check_classification(category, methodology)

    if project_id:
        if Project.objects.filter(project_id=project_id).exists():
            raise ValidationError({"projectId": [f"Project ID '{project_id}' is already registered."]})
    else:
        if not country_code:
            raise ValidationError({"countryCode": ["Required when no projectId is given."]})
        project_id = generate_project_id(country_code, start_date.year)

    project = Project.objects.create(
        project_id=project_id,
        name=name,
        description=description,
        category=category,
        methodology=methodology,
        developer=developer or actor.username,
        location=location,
        latitude=latitude,
        longitude=longitude,
        start_date=start_date,
        end_date=end_date,
        status=status,
        estimated_reduction=estimated_reduction,
        image_url=image_url,
        created_by=actor,
    )

    adjust_counters(total_projects=1)
    record_activity(
        action="project_created",
        description=f"Project {project.name} created",
        entity_type="project",
        entity_id=project.project_id,
        actor=actor,
    )
    notarize("project", project.project_id, "created", {"name": project.name, "status": project.status})
    logger.info("Project %s created by %s", project.project_id, actor)
    return project


@transaction.atomic
def update_project(project: Project, actor, expected_version: int = None, **changes) -> Project:
    """
    Update descriptive fields of a project.

    Status is owned by the verification pipeline and cannot be set here.

    Raises:
        ValidationError: For unknown fields, status changes or bad dates
        ConcurrentModification: If expected_version is stale
    """
    if "status" in changes:
        raise ValidationError(
            {"status": ["Project status is managed by the verification pipeline."]}
        )
    reject_unknown_fields(changes, UPDATABLE_FIELDS)

    project = lock_entity(
        Project, "project", project.project_id, expected_version, pk=project.pk
    )

    if "start_date" in changes:
        changes["start_date"] = clean_date(changes["start_date"], "startDate")
    if "end_date" in changes:
        changes["end_date"] = clean_date(changes["end_date"], "endDate")
    if "estimated_reduction" in changes:
        changes["estimated_reduction"] = clean_positive_int(
            changes["estimated_reduction"], "estimatedReduction"
        )
    _check_dates(
        changes.get("start_date", project.start_date),
        changes.get("end_date", project.end_date),
    )
    if "category" in changes or "methodology" in changes:
        check_classification(
            changes.get("category", project.category),
            changes.get("methodology", project.methodology),
        )

    for field, value in changes.items():
        setattr(project, field, value)
    save_versioned(project, changes.keys())

    record_activity(
        action="project_updated",
        description=f"Project {project.name} updated",
        entity_type="project",
        entity_id=project.project_id,
        actor=actor,
        metadata={"fields": sorted(changes)},
    )
    notarize("project", project.project_id, "updated", {"fields": sorted(changes)})
    return project
