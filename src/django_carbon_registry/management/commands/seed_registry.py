"""Management command to seed reference data, verification stages and the statistics row."""

from django.core.management.base import BaseCommand
from django.db import transaction

from django_carbon_registry.models import Methodology, ProjectCategory, VerificationStage
from django_carbon_registry.statistics import get_statistics

DEFAULT_CATEGORIES = [
    {
        "name": "Forestry",
        "description": "Forest conservation, reforestation, and sustainable forest management",
        "color": "green",
    },
    {
        "name": "Renewable Energy",
        "description": "Solar, wind, hydroelectric, and other clean energy projects",
        "color": "blue",
    },
    {
        "name": "Agriculture",
        "description": "Sustainable farming practices and soil carbon sequestration",
        "color": "amber",
    },
    {
        "name": "Waste Management",
        "description": "Methane capture, waste-to-energy, and recycling initiatives",
        "color": "orange",
    },
]

DEFAULT_METHODOLOGIES = [
    {
        "name": "AR-ACM0003",
        "description": "Afforestation and reforestation of lands except wetlands",
        "category": "Forestry",
        "document_url": "https://cdm.unfccc.int/methodologies/DB/C9QS5G3CS8FW04MYYXDFOQDPXWM4OE",
    },
    {
        "name": "VM0006",
        "description": "Carbon Accounting for Mosaic and Landscape-scale REDD Projects",
        "category": "Forestry",
        "document_url": "https://verra.org/methodology/vm0006-carbon-accounting-for-mosaic-and-landscape-scale-redd-projects-v2-2/",
    },
    {
        "name": "ACM0002",
        "description": "Grid-connected electricity generation from renewable sources",
        "category": "Renewable Energy",
        "document_url": "https://cdm.unfccc.int/methodologies/DB/XP2LKUSA61DKUQC0PIWPGWDN8ED5PG",
    },
    {
        "name": "AMS-I.D",
        "description": "Grid connected renewable electricity generation",
        "category": "Renewable Energy",
        "document_url": "https://cdm.unfccc.int/methodologies/DB/W3TINZ7KKWCK7L8WTXFQQOFQQH4SBK",
    },
    {
        "name": "VM0017",
        "description": "Adoption of Sustainable Agricultural Land Management",
        "category": "Agriculture",
        "document_url": "https://verra.org/methodology/vm0017-adoption-of-sustainable-agricultural-land-management-v1-0/",
    },
    {
        "name": "AMS-III.F",
        "description": "Avoidance of methane emissions through composting",
        "category": "Waste Management",
        "document_url": "https://cdm.unfccc.int/methodologies/DB/4AWES69H3J9E4A8S69F5DCQPO6U1XW",
    },
]

DEFAULT_STAGES = [
    {
        "order": 1,
        "name": "Data Validation",
        "description": "Initial validation of project documentation and data",
        "required_documents": ["project_design_document", "monitoring_report"],
        "icon": "file-check",
    },
    {
        "order": 2,
        "name": "Methodology Assessment",
        "description": "Evaluation of the applied methodology and calculations",
        "required_documents": ["methodology_assessment", "emission_calculations"],
        "icon": "calculator",
    },
    {
        "order": 3,
        "name": "Site Inspection",
        "description": "Physical inspection of the project site and activities",
        "required_documents": ["site_inspection_report"],
        "icon": "map-pin",
    },
    {
        "order": 4,
        "name": "Stakeholder Consultation",
        "description": "Gathering feedback from local stakeholders",
        "required_documents": ["stakeholder_consultation_summary"],
        "icon": "users",
    },
    {
        "order": 5,
        "name": "Final Review",
        "description": "Final review and decision on project verification",
        "required_documents": ["verification_report"],
        "icon": "badge-check",
    },
]


class Command(BaseCommand):
    help = "Create reference data, verification stages and the statistics row (idempotent)"

    def seed_reference_data(self):
        categories = 0
        for category in DEFAULT_CATEGORIES:
            _, was_created = ProjectCategory.objects.get_or_create(
                name=category["name"],
                defaults={key: value for key, value in category.items() if key != "name"},
            )
            categories += int(was_created)

        methodologies = 0
        for methodology in DEFAULT_METHODOLOGIES:
            defaults = dict(methodology)
            name = defaults.pop("name")
            defaults["category"] = ProjectCategory.objects.get(name=defaults["category"])
            _, was_created = Methodology.objects.get_or_create(name=name, defaults=defaults)
            methodologies += int(was_created)

        self.stdout.write(
            f"Seeded {categories} categor{'y' if categories == 1 else 'ies'} "
            f"and {methodologies} methodolog{'y' if methodologies == 1 else 'ies'}."
        )

    @transaction.atomic
    def handle(self, *args, **options):
        self.seed_reference_data()

        created = 0
        for stage in DEFAULT_STAGES:
            _, was_created = VerificationStage.objects.get_or_create(
                order=stage["order"],
                defaults={key: value for key, value in stage.items() if key != "order"},
            )
            created += int(was_created)

        get_statistics()

        self.stdout.write(
            self.style.SUCCESS(
                f"Seeded {created} verification stage(s); "
                f"{len(DEFAULT_STAGES) - created} already present."
            )
        )
