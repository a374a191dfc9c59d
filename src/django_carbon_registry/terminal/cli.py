"""Click CLI for registryctl.

Usage:
    python manage.py registryctl [command] [options]
"""

import sys

import click
from rich.console import Console

console = Console()


@click.group()
@click.pass_context
def cli(ctx):
    """Carbon Registry Terminal UI.

    Browse projects, credits and activity, and check statistics integrity.
    """
    ctx.ensure_object(dict)


@cli.group(name="list")
def list_group():
    """List entities (projects, credits, activity)."""
    pass


@list_group.command(name="projects")
@click.option("--limit", default=50, help="Maximum records to return")
@click.option(
    "--status",
    type=click.Choice(["draft", "registered", "verified", "rejected"]),
    help="Filter by status",
)
@click.option("--developer", help="Filter by developer username")
def list_projects(limit, status, developer):
    """List projects."""
    from ..selectors import list_projects as get_projects
    from .formatters import format_projects_table

    projects = get_projects(status=status, developer=developer)[:limit]
    console.print(format_projects_table(projects))


@list_group.command(name="credits")
@click.option("--limit", default=50, help="Maximum records to return")
@click.option("--project", "project_id", help="Filter by project ID")
@click.option(
    "--status",
    type=click.Choice(["available", "retired", "transferred"]),
    help="Filter by status",
)
def list_credits(limit, project_id, status):
    """List credit batches."""
    from ..selectors import list_credits as get_credits
    from .formatters import format_credits_table

    credits = get_credits(project_id=project_id, status=status)[:limit]
    console.print(format_credits_table(credits))


@list_group.command(name="activity")
@click.option("--limit", default=20, help="Maximum records to return")
@click.option("--entity-type", help="Filter by entity type")
def list_activity(limit, entity_type):
    """List recent activity, newest first."""
    from ..activity import list_activity as get_activity
    from .formatters import format_activity_table

    entries = get_activity(limit=limit, entity_type=entity_type)
    console.print(format_activity_table(entries))


@cli.command()
def stats():
    """Show registry statistics."""
    from ..statistics import get_statistics
    from .formatters import format_statistics_panel

    console.print(format_statistics_panel(get_statistics()))


@cli.command()
@click.option("--fix", is_flag=True, help="Rewrite counters from the entity tables")
def verify(fix):
    """Check stored statistics against the entity tables."""
    from ..statistics import reconcile_statistics, statistics_drift
    from .formatters import format_drift_table

    console.print("[bold]Running statistics checks...[/bold]")

    drift = statistics_drift()
    if not drift:
        console.print("[bold green]Statistics consistent[/bold green]")
        return

    console.print(format_drift_table(drift))
    if fix:
        reconcile_statistics()
        console.print(f"[green]Reconciled {len(drift)} counter(s)[/green]")
        return

    console.print(f"[bold red]{len(drift)} counter(s) drifted. Run with --fix to reconcile.[/bold red]")
    sys.exit(1)


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
