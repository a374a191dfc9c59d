"""Rich table and panel formatters for registryctl."""

from rich.panel import Panel
from rich.table import Table

STATUS_STYLES = {
    "draft": "dim",
    "registered": "cyan",
    "verified": "green",
    "rejected": "red",
    "available": "green",
    "retired": "magenta",
    "transferred": "yellow",
}


def _date(value) -> str:
    return value.strftime("%Y-%m-%d") if value else "-"


def _status(status: str) -> str:
    style = STATUS_STYLES.get(status)
    return f"[{style}]{status}[/{style}]" if style else status


def format_projects_table(projects) -> Table:
    """Format projects as a Rich table.

    Args:
        projects: Iterable of Project objects

    Returns:
        Rich Table ready for display
    """
    table = Table(title="Projects")
    table.add_column("Project ID", style="bold", no_wrap=True)
    table.add_column("Name")
    table.add_column("Developer", style="cyan")
    table.add_column("Status")
    table.add_column("Est. tCO2e", justify="right")
    table.add_column("Created", style="dim")

    for project in projects:
        table.add_row(
            project.project_id,
            project.name,
            project.developer,
            _status(project.status),
            f"{project.estimated_reduction:,}",
            _date(project.created_at),
        )
    return table


def format_credits_table(credits) -> Table:
    """Format credit batches as a Rich table."""
    table = Table(title="Carbon Credits")
    table.add_column("Serial Number", style="bold", no_wrap=True)
    table.add_column("Vintage", justify="right")
    table.add_column("Quantity", justify="right")
    table.add_column("Owner", style="cyan")
    table.add_column("Status")
    table.add_column("Holder")

    for credit in credits:
        table.add_row(
            credit.serial_number,
            str(credit.vintage),
            f"{credit.quantity:,}",
            credit.owner,
            _status(credit.status),
            credit.transfer_recipient or "-",
        )
    return table


def format_activity_table(entries) -> Table:
    table = Table(title="Activity")
    table.add_column("When", style="dim")
    table.add_column("Action", style="cyan", no_wrap=True)
    table.add_column("Entity", no_wrap=True)
    table.add_column("Actor")
    table.add_column("Description")

    for entry in entries:
        table.add_row(
            entry.timestamp.strftime("%Y-%m-%d %H:%M:%S") if entry.timestamp else "-",
            entry.action,
            f"{entry.entity_type}:{entry.entity_id}",
            entry.actor_display or "system",
            entry.description,
        )
    return table


def format_statistics_panel(stats) -> Panel:
    """Format the statistics row as a Rich panel."""
    lines = [
        f"[bold]Total projects:[/bold] {stats.total_projects}",
        f"[bold]Verified projects:[/bold] {stats.verified_projects}",
        f"[bold]Pending verification:[/bold] {stats.pending_verification}",
        f"[bold]Total credits issued:[/bold] {stats.total_credits:,} tCO2e",
        f"[dim]Last updated: {stats.last_updated:%Y-%m-%d %H:%M:%S}[/dim]"
        if stats.last_updated
        else "[dim]Last updated: -[/dim]",
    ]
    return Panel("\n".join(lines), title="Registry Statistics")


def format_drift_table(drift: dict) -> Table:
    """Format statistics drift as counter / stored / computed rows."""
    table = Table(title="Statistics Drift")
    table.add_column("Counter", style="bold")
    table.add_column("Stored", justify="right", style="red")
    table.add_column("Computed", justify="right", style="green")

    for name, (stored, computed) in sorted(drift.items()):
        table.add_row(name, str(stored), str(computed))
    return table
