"""Tests for the registryctl CLI and management commands."""

from io import StringIO

import pytest
from click.testing import CliRunner
from django.core.management import call_command, get_commands

from django_carbon_registry.models import Methodology, ProjectCategory, RegistryStatistics, VerificationStage
from django_carbon_registry.statistics import get_statistics
from django_carbon_registry.terminal import cli as cli_module
from django_carbon_registry.terminal.cli import cli
from django_carbon_registry.terminal.formatters import (
    format_activity_table,
    format_credits_table,
    format_projects_table,
)


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Render tables at a fixed width so rows are not wrapped."""
    monkeypatch.setattr(cli_module.console, "width", 200)


class TestFormatters:

    def test_identifier_columns_never_wrap(self):
        tables = [format_projects_table([]), format_credits_table([]), format_activity_table([])]

        no_wrap = {
            column.header
            for table in tables
            for column in table.columns
            if column.no_wrap
        }

        assert no_wrap == {"Project ID", "Serial Number", "Action", "Entity"}


class TestRegistryctlManagementCommand:
    """Tests for the Django management command entry point."""

    def test_registryctl_is_discoverable(self):
        assert "registryctl" in get_commands()

    def test_registryctl_help_shows_usage(self, capsys):
        """Management command shows help text when called with --help."""
        try:
            call_command("registryctl", "--help")
        except SystemExit as e:
            assert e.code == 0

        captured = capsys.readouterr()
        assert "usage" in captured.out.lower()

    @pytest.mark.django_db
    def test_registryctl_stats(self, capsys):
        call_command("registryctl", "stats")

        assert "Registry Statistics" in capsys.readouterr().out


class TestCliCommandGroup:

    def test_list_subcommands_exist(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["list", "--help"])

        assert result.exit_code == 0
        for name in ("projects", "credits", "activity"):
            assert name in result.output

    def test_list_projects_has_status_filter(self):
        result = CliRunner().invoke(cli, ["list", "projects", "--help"])

        assert result.exit_code == 0
        assert "--status" in result.output
        assert "--limit" in result.output


@pytest.mark.django_db
class TestListCommands:

    def test_list_projects(self, project):
        result = CliRunner().invoke(cli, ["list", "projects"])

        assert result.exit_code == 0
        assert "Projects" in result.output
        assert project.project_id in result.output

    def test_list_projects_filtered_out(self, project):
        result = CliRunner().invoke(cli, ["list", "projects", "--status", "draft"])

        assert result.exit_code == 0
        assert project.project_id not in result.output

    def test_list_activity(self, project):
        result = CliRunner().invoke(cli, ["list", "activity", "--entity-type", "project"])

        assert result.exit_code == 0
        assert "project_created" in result.output


@pytest.mark.django_db
class TestStatisticsCommands:

    def test_stats_panel(self, project):
        result = CliRunner().invoke(cli, ["stats"])

        assert result.exit_code == 0
        assert "Registry Statistics" in result.output
        assert "Total projects:" in result.output

    def test_verify_consistent(self, project):
        result = CliRunner().invoke(cli, ["verify"])

        assert result.exit_code == 0
        assert "Statistics consistent" in result.output

    def test_verify_reports_drift_and_fails(self, project):
        RegistryStatistics.objects.filter(pk=1).update(total_projects=5)

        result = CliRunner().invoke(cli, ["verify"])

        assert result.exit_code == 1
        assert "Statistics Drift" in result.output
        assert get_statistics().total_projects == 5

    def test_verify_fix_reconciles(self, project):
        RegistryStatistics.objects.filter(pk=1).update(total_projects=5, total_credits=10)

        result = CliRunner().invoke(cli, ["verify", "--fix"])

        assert result.exit_code == 0
        assert "Reconciled 2 counter(s)" in result.output
        assert get_statistics().total_projects == 1
        assert get_statistics().total_credits == 0


@pytest.mark.django_db
class TestSeedRegistry:

    def test_seeds_five_ordered_stages(self):
        out = StringIO()
        call_command("seed_registry", stdout=out)

        stages = list(VerificationStage.objects.order_by("order"))
        assert [stage.order for stage in stages] == [1, 2, 3, 4, 5]
        assert stages[0].required_documents == ["project_design_document", "monitoring_report"]
        assert "Seeded 5 verification stage(s); 0 already present." in out.getvalue()

    def test_is_idempotent(self):
        call_command("seed_registry", stdout=StringIO())
        out = StringIO()
        call_command("seed_registry", stdout=out)

        assert VerificationStage.objects.count() == 5
        assert "Seeded 0 verification stage(s); 5 already present." in out.getvalue()

    def test_seeds_categories_and_methodologies(self):
        out = StringIO()
        call_command("seed_registry", stdout=out)

        assert list(ProjectCategory.objects.values_list("name", flat=True)) == [
            "Agriculture",
            "Forestry",
            "Renewable Energy",
            "Waste Management",
        ]
        assert Methodology.objects.count() == 6
        assert Methodology.objects.get(name="VM0006").category.name == "Forestry"
        assert "Seeded 4 categories and 6 methodologies." in out.getvalue()

    def test_keeps_existing_reference_data(self, classification):
        out = StringIO()
        call_command("seed_registry", stdout=out)

        assert ProjectCategory.objects.count() == 4
        assert Methodology.objects.count() == 6
        assert "Seeded 2 categories and 4 methodologies." in out.getvalue()
