"""Encounter store opening and startup migration sequence."""

import sqlite3
from pathlib import Path
from types import TracebackType

from rich.console import Console

from .config import Config
from .connection import StoreConnectionError, open_connection
from .constants import DEFAULT_CONNECT_TIMEOUT
from .error_guidance import GuidanceProvider
from .migrations import MigrationRegistry, MigrationRunner, ProbeError, default_registry
from .utils import ErrorContext, handle_operation

console = Console()


class EncounterStore:
    """Owns the connection to the encounter database and keeps its schema current."""

    def __init__(
        self,
        db_file: Path | str,
        *,
        registry: MigrationRegistry | None = None,
        backup_before_migrate: bool = True,
        backup_dir: Path | None = None,
        timeout: float = DEFAULT_CONNECT_TIMEOUT,
        foreign_keys: bool = True,
        console: Console = console,
    ):
        """
        Open the store and bring its schema to the latest version.

        Startup order matters: a store that predates version tracking gets
        its baseline version inferred before any migration runs.

        Args:
            db_file: Path to database file, or ":memory:"
            registry: Migrations to apply (default: published migrations)
            backup_before_migrate: Whether to back up before migrating
            backup_dir: Directory for backups (default: next to the database)
            timeout: Seconds to wait for a lock held by another connection
            foreign_keys: Whether to enforce foreign key constraints
            console: Rich console for progress output

        Raises:
            StoreConnectionError: If the store cannot be opened or read
            ProbeError: If a legacy store's schema cannot be inspected
            MigrationError: If migrating fails
        """
        self.db_file = db_file
        self.registry = registry if registry is not None else default_registry()

        context = ErrorContext(
            "Open database",
            suggestions={ProbeError: "The database file may be damaged; restore a backup"},
        )
        try:
            self.conn = handle_operation(
                console,
                lambda: open_connection(db_file, timeout=timeout, foreign_keys=foreign_keys),
                context,
                error_types=(StoreConnectionError,),
            )
        except StoreConnectionError as e:
            guidance = GuidanceProvider.get_store_unreadable(str(db_file), str(e))
            console.print(GuidanceProvider.format_guidance(guidance))
            raise

        try:
            self.runner = MigrationRunner(self.conn, backup_dir=backup_dir, console=console)
            handle_operation(console, self.runner.ensure_version_is_set, context, error_types=(ProbeError,))
            self.runner.run_migrations(self.registry, backup=backup_before_migrate)
        except Exception:
            self.conn.close()
            raise

    @property
    def connection(self) -> sqlite3.Connection:
        """Open connection, for the data access layer."""
        return self.conn

    @property
    def schema_version(self) -> int:
        """Current schema version."""
        return self.runner.get_schema_version()

    def close(self) -> None:
        """Close the connection."""
        self.conn.close()

    def __enter__(self) -> "EncounterStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def open_store(config: Config, registry: MigrationRegistry | None = None) -> EncounterStore:
    """
    Open the store described by a configuration.

    Args:
        config: Loaded configuration
        registry: Migrations to apply (default: published migrations)

    Returns:
        Store migrated to the latest schema version
    """
    return EncounterStore(
        config.db_file,
        registry=registry,
        backup_before_migrate=config.backup_before_migrate,
        backup_dir=config.backup_dir,
        timeout=config.timeout,
        foreign_keys=config.foreign_keys,
    )
