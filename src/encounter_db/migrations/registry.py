"""Ordered registry of published schema migrations."""

import logging
import sqlite3
from collections.abc import Callable, Iterable, Iterator

from ..constants import MEMORY_DB, SCHEMA_VERSION_PRAGMA
from .base import Migration, MigrationApplyError, MigrationError, MigrationValidationError

logger = logging.getLogger(__name__)


class MigrationRegistry:
    """
    Immutable, ordered sequence of migrations.

    A migration's version is its 1-based position in the sequence, so the
    latest version is simply the number of migrations. The sequence is only
    ever extended at the end; published steps are never reordered or edited.
    """

    def __init__(self, migrations: Iterable[Migration]):
        """
        Initialize registry.

        Args:
            migrations: Migrations in version order
        """
        self._migrations: tuple[Migration, ...] = tuple(migrations)

    def __len__(self) -> int:
        return len(self._migrations)

    def __iter__(self) -> Iterator[Migration]:
        return iter(self._migrations)

    @property
    def latest_version(self) -> int:
        """Version reached once every published migration is applied."""
        return len(self._migrations)

    def get(self, version: int) -> Migration | None:
        """
        Get migration by version.

        Args:
            version: Migration version (1-based)

        Returns:
            Migration if published, None otherwise
        """
        if 1 <= version <= len(self._migrations):
            return self._migrations[version - 1]
        return None

    def pending(self, current_version: int, target_version: int | None = None) -> list[Migration]:
        """
        Get migrations that still need to run.

        Args:
            current_version: Version the store is at
            target_version: Version to stop at (default: latest)

        Returns:
            Migrations with current_version < version <= target_version
        """
        target = self.latest_version if target_version is None else target_version
        return [m for m in self._migrations if current_version < m.version <= target]

    def apply(
        self,
        conn: sqlite3.Connection,
        current_version: int,
        target_version: int | None = None,
        on_step: Callable[[Migration], None] | None = None,
    ) -> int:
        """
        Apply pending migrations in order.

        Each step runs in its own transaction together with the schema
        version update. If a step fails, the steps before it stay applied
        and the store is left at the last completed version.

        Args:
            conn: Open SQLite connection
            current_version: Version the store is at
            target_version: Version to stop at (default: latest)
            on_step: Called with each migration before it is applied

        Returns:
            Version the store is at after applying

        Raises:
            MigrationError: If the requested versions are out of range, or the
                store is not at current_version
            MigrationApplyError: If a migration fails
        """
        target = self.latest_version if target_version is None else target_version

        if current_version < 0:
            raise ValueError(f"Schema version cannot be negative: {current_version}")
        if current_version > self.latest_version:
            raise MigrationError(
                f"Database schema version {current_version} is newer than the latest "
                f"known migration ({self.latest_version})"
            )
        if target > self.latest_version:
            raise MigrationError(f"Unknown target version {target} (latest is {self.latest_version})")
        if target < current_version:
            raise MigrationError(f"Cannot downgrade schema from v{current_version} to v{target}")

        stored = conn.execute(f"PRAGMA {SCHEMA_VERSION_PRAGMA}").fetchone()[0]
        if stored != current_version:
            raise MigrationError(f"Database schema is at v{stored}, not the expected v{current_version}")

        version = current_version
        for migration in self.pending(current_version, target):
            if on_step is not None:
                on_step(migration)
            try:
                migration.migrate(conn)
            except sqlite3.Error as e:
                logger.error(f"Migration {migration.version} failed, schema left at v{version}: {e}")
                raise MigrationApplyError(migration.version, e) from e
            version = migration.version
            logger.info(f"Applied migration {version}: {migration.description()}")

        return version

    def validate(self) -> None:
        """
        Replay the whole sequence against a scratch in-memory store.

        Intended for tests and release checks, not for every startup.

        Raises:
            MigrationValidationError: If the sequence is inconsistent
        """
        for position, migration in enumerate(self._migrations, start=1):
            if migration.version != position:
                raise MigrationValidationError(
                    f"Migration at position {position} declares version {migration.version}"
                )
            if not migration.sql.strip():
                raise MigrationValidationError(f"Migration {position} has no statements")

        conn = sqlite3.connect(MEMORY_DB)
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            try:
                version = self.apply(conn, 0)
            except MigrationApplyError as e:
                raise MigrationValidationError(
                    f"Migration {e.version} cannot be applied after v{e.version - 1}: {e.cause}"
                ) from e

            stored = conn.execute(f"PRAGMA {SCHEMA_VERSION_PRAGMA}").fetchone()[0]
            if stored != version:
                raise MigrationValidationError(f"Schema version is {stored} after replay, expected {version}")

            integrity = conn.execute("PRAGMA integrity_check").fetchone()[0]
            if integrity != "ok":
                raise MigrationValidationError(f"Integrity check failed after replay: {integrity}")

            violations = conn.execute("PRAGMA foreign_key_check").fetchall()
            if violations:
                raise MigrationValidationError(f"Foreign key check failed after replay: {violations}")
        finally:
            conn.close()
