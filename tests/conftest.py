"""Shared fixtures for django-carbon-registry tests."""

from datetime import date
from io import StringIO

import pytest
from django.core.management import call_command
from django.test import Client

from django_carbon_registry.models import Methodology, ProjectCategory, VerificationStage


@pytest.fixture
def user(django_user_model):
    """Project developer."""
    return django_user_model.objects.create_user(username="greenfields", password="pass")


@pytest.fixture
def other_user(django_user_model):
    """Second registry participant, used as transfer recipient."""
    return django_user_model.objects.create_user(username="acme_buyer", password="pass")


@pytest.fixture
def stages(db):
    """The five seeded verification stages, in order."""
    call_command("seed_registry", stdout=StringIO())
    return list(VerificationStage.objects.order_by("order"))


@pytest.fixture
def classification(db):
    """Forestry and Renewable Energy categories with one methodology each."""
    forestry, _ = ProjectCategory.objects.get_or_create(name="Forestry")
    energy, _ = ProjectCategory.objects.get_or_create(name="Renewable Energy", defaults={"color": "blue"})
    Methodology.objects.get_or_create(name="VM0006", defaults={"category": forestry})
    Methodology.objects.get_or_create(name="ACM0002", defaults={"category": energy})
    return forestry


@pytest.fixture
def make_project(user, classification):
    """Factory for registered projects."""
    from django_carbon_registry.services.projects import create_project

    def _make(**overrides):
        params = {
            "name": "Kasigau Forest Protection",
            "category": "Forestry",
            "methodology": "VM0006",
            "location": "Taita-Taveta, Kenya",
            "start_date": date(2023, 1, 1),
            "end_date": date(2033, 1, 1),
            "estimated_reduction": 50000,
            "country_code": "KEN",
            "status": "registered",
        }
        params.update(overrides)
        return create_project(user, **params)

    return _make


@pytest.fixture
def project(make_project):
    return make_project()


@pytest.fixture
def verification(project, stages, user):
    from django_carbon_registry.services.verification import request_verification

    return request_verification(project, user)


@pytest.fixture
def verified_project(project, verification, user):
    from django_carbon_registry.services.verification import approve_verification

    approve_verification(verification, user)
    project.refresh_from_db()
    return project


@pytest.fixture
def credit(verified_project, user):
    """An available batch of 1000 credits, vintage 2023."""
    from django_carbon_registry.services.credits import issue_credits

    return issue_credits(verified_project, 1000, 2023, user)


@pytest.fixture
def api_client(user):
    """Django test client logged in as the developer."""
    client = Client()
    client.force_login(user)
    return client
