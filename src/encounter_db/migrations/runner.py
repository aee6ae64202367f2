"""Migration runner for database schema updates."""

import errno
import logging
import sqlite3
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from rich.console import Console

from ..connection import StoreConnectionError, get_database_path
from ..constants import BACKUP_SUFFIX_TEMPLATE, BACKUP_TIMESTAMP_FORMAT, SCHEMA_VERSION_PRAGMA
from ..error_guidance import GuidanceProvider
from ..utils import ensure_dir
from .base import Migration, MigrationApplyError, MigrationError
from .legacy import LEGACY_PROBES, ProbeEntry, infer_version
from .registry import MigrationRegistry

logger = logging.getLogger(__name__)
console = Console()


class MigrationRunner:
    """Runs database migrations against a single open connection."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        backup_dir: Path | None = None,
        console: Console = console,
    ) -> None:
        """
        Initialize migration runner.

        Args:
            conn: Open SQLite connection owned by the caller
            backup_dir: Directory for pre-migration backups (default: next to the database)
            console: Rich console for progress output
        """
        self.conn = conn
        self.backup_dir = backup_dir
        self.console = console

    def get_schema_version(self) -> int:
        """
        Get current schema version from database.

        Returns:
            Current schema version, or 0 if not set

        Raises:
            StoreConnectionError: If the database header cannot be read
        """
        try:
            return self.conn.execute(f"PRAGMA {SCHEMA_VERSION_PRAGMA}").fetchone()[0]
        except sqlite3.Error as e:
            raise StoreConnectionError(f"Could not read schema version: {e}") from e

    def set_schema_version(self, version: int) -> None:
        """
        Set schema version in database.

        Args:
            version: Schema version to set

        Raises:
            ValueError: If version is negative or lower than the current version
            StoreConnectionError: If the database cannot be written
        """
        current = self.get_schema_version()
        if version < 0 or version < current:
            raise ValueError(f"Schema version cannot go from {current} to {version}")

        try:
            self.conn.execute(f"PRAGMA {SCHEMA_VERSION_PRAGMA} = {int(version)}")
            self.conn.commit()
        except sqlite3.Error as e:
            raise StoreConnectionError(f"Could not write schema version: {e}") from e

    def ensure_version_is_set(self, probes: Sequence[ProbeEntry] = LEGACY_PROBES) -> int:
        """
        Establish a baseline version for stores that predate version tracking.

        Must run before any migration is applied, otherwise a legacy store
        would be replayed from version 0 and fail on tables that already
        exist. No migration is applied here.

        Args:
            probes: Legacy markers ordered oldest first

        Returns:
            Schema version after the check

        Raises:
            StoreConnectionError: If the version cannot be read or written
            ProbeError: If the schema cannot be inspected
        """
        current = self.get_schema_version()
        if current != 0:
            return current

        inferred = infer_version(self.conn, probes)
        if inferred > 0:
            logger.info(f"Untracked database matches schema v{inferred}, recording baseline")
            self.set_schema_version(inferred)
        return inferred

    def needs_migration(self, registry: MigrationRegistry) -> bool:
        """
        Check if any migrations need to be run.

        Returns:
            True if migrations are pending
        """
        return self.get_schema_version() < registry.latest_version

    def backup_database(self) -> Path | None:
        """
        Create a backup of the database file before migrations.

        Uses the SQLite online backup API so the copy is consistent even
        with uncommitted WAL content.

        Returns:
            Path to backup file, or None for in-memory databases or if backup failed
        """
        db_path = get_database_path(self.conn)
        if db_path is None:
            return None

        timestamp = datetime.now().strftime(BACKUP_TIMESTAMP_FORMAT)
        backup_name = f"{db_path.stem}{BACKUP_SUFFIX_TEMPLATE.format(timestamp=timestamp)}{db_path.suffix}"
        backup_path = (self.backup_dir or db_path.parent) / backup_name

        try:
            ensure_dir(backup_path.parent)
            target = sqlite3.connect(backup_path)
            try:
                self.conn.backup(target)
            finally:
                target.close()
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Failed to back up {db_path} to {backup_path}: {e}")
            self.console.print(f"[yellow]Warning:[/yellow] Failed to create backup: {e}")
            if isinstance(e, PermissionError):
                guidance = GuidanceProvider.get_permission_denied(str(backup_path.parent), "backup")
                self.console.print(GuidanceProvider.format_guidance(guidance))
            elif isinstance(e, OSError) and e.errno == errno.ENOSPC:
                guidance = GuidanceProvider.get_disk_space_full(str(backup_path.parent))
                self.console.print(GuidanceProvider.format_guidance(guidance))
            return None

        self.console.print(f"  Created backup: {backup_path}")
        logger.info(f"Backed up {db_path} to {backup_path}")
        return backup_path

    def run_migrations(self, registry: MigrationRegistry, backup: bool = True) -> int:
        """
        Run all pending migrations with automatic backup.

        Call ensure_version_is_set() first so legacy stores start from
        their inferred version. A backup is taken before migrating a store
        that already has a schema; if a migration fails, that backup can be
        restored manually.

        Args:
            registry: Migrations to run
            backup: Whether to back up the database first

        Returns:
            Schema version after migrating

        Raises:
            MigrationError: If the store is newer than the registry
            MigrationApplyError: If a migration fails
        """
        current_version = self.get_schema_version()
        latest_version = registry.latest_version

        if current_version == latest_version:
            return current_version

        if current_version > latest_version:
            guidance = GuidanceProvider.get_store_too_new(current_version, latest_version)
            self.console.print(GuidanceProvider.format_guidance(guidance))
            raise MigrationError(
                f"Database schema version {current_version} is newer than the latest "
                f"known migration ({latest_version})"
            )

        self.console.print(f"Running database migrations (v{current_version} -> v{latest_version})...")

        # Nothing worth keeping in a store that has no schema yet
        backup_path = self.backup_database() if backup and current_version > 0 else None

        try:
            version = registry.apply(self.conn, current_version, on_step=self._announce)
        except MigrationApplyError as e:
            self.console.print(f"[red]Error:[/red] Migration {e.version} failed: {e.cause}")
            if backup_path:
                self.console.print(f"[yellow]Hint:[/yellow] Restore backup from: {backup_path}")
            guidance = GuidanceProvider.get_migration_failed(e.version, str(e.cause), backup_path)
            self.console.print(GuidanceProvider.format_guidance(guidance))
            raise

        self.console.print("Database migrations completed.")
        return version

    def _announce(self, migration: Migration) -> None:
        self.console.print(
            f"  Applying migration {migration.version}: {migration.description()} "
            f"(checksum: {migration.checksum})"
        )
