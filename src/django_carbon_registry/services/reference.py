"""Project categories and methodologies.

Projects store category and methodology by name; both names must exist
here, and the methodology must belong to the category.
"""

import logging

from django.db import transaction

from ..activity import record_activity
from ..exceptions import ValidationError
from ..models import Methodology, ProjectCategory

logger = logging.getLogger(__name__)


def check_classification(category: str, methodology: str) -> None:
    """
    Validate a project's category and methodology against reference data.

    Raises:
        ValidationError: If either name is unknown, or the methodology
            belongs to a different category
    """
    if not ProjectCategory.objects.filter(name=category).exists():
        raise ValidationError({"category": [f"Unknown project category '{category}'."]})

    found = Methodology.objects.select_related("category").filter(name=methodology).first()
    if found is None:
        raise ValidationError({"methodology": [f"Unknown methodology '{methodology}'."]})
    if found.category.name != category:
        raise ValidationError(
            {"methodology": [f"Methodology '{methodology}' does not apply to category '{category}'."]}
        )


@transaction.atomic
def create_category(actor, *, name: str, description: str = "", color: str = "") -> ProjectCategory:
    """Add a project category. Names are unique."""
    if not name:
        raise ValidationError({"name": ["This field is required."]})
    if ProjectCategory.objects.filter(name=name).exists():
        raise ValidationError({"name": [f"Category '{name}' already exists."]})

    category = ProjectCategory.objects.create(
        name=name,
        description=description or "",
        color=color or "green",
    )
    record_activity(
        action="category_created",
        description=f"Project category {name} created",
        entity_type="category",
        entity_id=category.pk,
        actor=actor,
    )
    logger.info("Category %s created by %s", name, actor)
    return category


@transaction.atomic
def create_methodology(
    actor,
    *,
    name: str,
    category: str,
    description: str = "",
    document_url: str = "",
) -> Methodology:
    """
    Add a methodology under an existing category.

    Args:
        category: Name of the ProjectCategory it applies to
    """
    if not name:
        raise ValidationError({"name": ["This field is required."]})
    if Methodology.objects.filter(name=name).exists():
        raise ValidationError({"name": [f"Methodology '{name}' already exists."]})
    parent = ProjectCategory.objects.filter(name=category).first()
    if parent is None:
        raise ValidationError({"category": [f"Unknown project category '{category}'."]})

    methodology = Methodology.objects.create(
        name=name,
        category=parent,
        description=description or "",
        document_url=document_url or "",
    )
    record_activity(
        action="methodology_created",
        description=f"Methodology {name} created for {parent.name}",
        entity_type="methodology",
        entity_id=methodology.pk,
        actor=actor,
    )
    logger.info("Methodology %s created by %s", name, actor)
    return methodology
