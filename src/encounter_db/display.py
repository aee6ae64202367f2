"""Display functions for migration status output."""

from rich.console import Console
from rich.table import Table

from .migrations import MigrationRegistry


def display_migration_status(registry: MigrationRegistry, current_version: int, console: Console) -> None:
    """
    Display every migration and whether it has been applied.

    Args:
        registry: Published migrations
        current_version: Schema version of the store
        console: Rich console instance for output
    """
    table = Table(title=f"Schema v{current_version} (latest v{registry.latest_version})")
    table.add_column("Version", justify="right", style="cyan")
    table.add_column("Description")
    table.add_column("Checksum", style="dim")
    table.add_column("Status")

    for migration in registry:
        if migration.version <= current_version:
            status = "[green]✓ Applied[/green]"
        else:
            status = "[yellow]Pending[/yellow]"
        table.add_row(str(migration.version), migration.description(), migration.checksum, status)

    console.print(table)

    pending = max(registry.latest_version - current_version, 0)
    if pending:
        console.print(f"{pending} migration(s) pending")
    elif current_version > registry.latest_version:
        console.print("[yellow]Database is newer than this release[/yellow]")
    else:
        console.print("Database schema is up to date")
