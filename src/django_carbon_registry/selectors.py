"""Read queries for the carbon registry.

Selectors never lock and never write. Filters mirror the query
parameters accepted by the list endpoints.
"""

from .models import (
    CarbonCredit,
    CorrespondingAdjustment,
    Methodology,
    Project,
    ProjectCategory,
    ProjectVerification,
    VerificationComment,
    VerificationDocument,
    VerificationStage,
)


def list_categories():
    return ProjectCategory.objects.order_by("name")


def list_methodologies(*, category: str = None):
    methodologies = Methodology.objects.select_related("category")
    if category:
        methodologies = methodologies.filter(category__name=category)
    return methodologies.order_by("name")


def list_projects(*, status: str = None, developer: str = None, category: str = None):
    projects = Project.objects.all()
    if status:
        projects = projects.filter(status=status)
    if developer:
        projects = projects.filter(developer=developer)
    if category:
        projects = projects.filter(category=category)
    return projects


def list_stages():
    return VerificationStage.objects.order_by("order")


def list_verifications(*, status: str = None, project_id: str = None):
    """List verifications newest-first with their project and stage loaded."""
    verifications = ProjectVerification.objects.select_related(
        "project", "current_stage"
    ).prefetch_related("completed_stages")
    if status:
        verifications = verifications.filter(status=status)
    if project_id:
        verifications = verifications.filter(project__project_id=project_id)
    return verifications


def list_documents(verification, *, stage=None):
    documents = VerificationDocument.objects.filter(verification=verification).select_related(
        "stage", "uploaded_by"
    )
    if stage is not None:
        documents = documents.filter(stage=stage)
    return documents


def list_comments(verification, *, stage=None, include_internal: bool = True):
    comments = VerificationComment.objects.filter(verification=verification).select_related(
        "stage", "commented_by"
    )
    if stage is not None:
        comments = comments.filter(stage=stage)
    if not include_internal:
        comments = comments.filter(is_internal=False)
    return comments


def list_credits(*, project_id: str = None, owner: str = None, status: str = None):
    """
    List credit batches newest-first.

    Args:
        project_id: Human-readable project ID
        owner: Issuing developer username
        status: available, retired or transferred
    """
    credits = CarbonCredit.objects.select_related("project")
    if project_id:
        credits = credits.filter(project__project_id=project_id)
    if owner:
        credits = credits.filter(owner=owner)
    if status:
        credits = credits.filter(status=status)
    return credits


def list_adjustments(*, credit=None, status: str = None, host_country: str = None):
    adjustments = CorrespondingAdjustment.objects.select_related("credit")
    if credit is not None:
        adjustments = adjustments.filter(credit=credit)
    if status:
        adjustments = adjustments.filter(status=status)
    if host_country:
        adjustments = adjustments.filter(host_country=host_country.upper())
    return adjustments
