"""Base classes for database migrations."""

import hashlib
import sqlite3
from abc import ABC, abstractmethod

from ..constants import MIGRATION_CHECKSUM_LENGTH, SCHEMA_VERSION_PRAGMA


class MigrationError(Exception):
    """
    Raised when the migration sequence cannot be applied to a store.

    This covers requests the registry refuses outright:
    - The store reports a schema version newer than the latest known migration
    - A target version below the current one (downgrades are not supported)
    - A target version that has not been published
    """

    pass


class MigrationApplyError(MigrationError):
    """
    Raised when a single migration step fails to apply.

    The failing step is rolled back as a whole, so the store is left at
    ``version - 1``. The original database error is kept on ``cause`` and
    chained as ``__cause__``.
    """

    def __init__(self, version: int, cause: Exception):
        self.version = version
        self.cause = cause
        super().__init__(f"Migration {version} failed: {cause}")


class MigrationValidationError(MigrationError):
    """Raised when the published migration sequence is internally inconsistent."""

    pass


class Migration(ABC):
    """
    Base class for schema migrations with integrity verification.

    Each migration has a version number (its 1-based position in the
    registry), a batch of SQL statements and a description. Published
    migrations are never edited; new ones are appended.
    """

    version: int
    sql: str

    @abstractmethod
    def description(self) -> str:
        """Return a human-readable description of this migration."""
        pass

    @property
    def checksum(self) -> str:
        """
        Calculate checksum of the migration statements.

        Whitespace is normalized so re-indenting a migration does not
        change its checksum.

        Returns:
            Hex string of SHA256 hash (first 16 chars)
        """
        normalized = " ".join(self.sql.split())
        return hashlib.sha256(normalized.encode()).hexdigest()[:MIGRATION_CHECKSUM_LENGTH]

    def migrate(self, conn: sqlite3.Connection) -> None:
        """
        Apply the migration and advance the schema version in one transaction.

        Args:
            conn: Open SQLite connection

        Raises:
            sqlite3.Error: If any statement fails; the transaction is rolled back
        """
        script = f"BEGIN;\n{self.sql}\nPRAGMA {SCHEMA_VERSION_PRAGMA} = {int(self.version)};\nCOMMIT;"
        try:
            conn.executescript(script)
        except sqlite3.Error:
            if conn.in_transaction:
                conn.rollback()
            raise

    def __repr__(self) -> str:
        return f"<{type(self).__name__} version={self.version}>"
