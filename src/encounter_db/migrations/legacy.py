"""Schema version inference for stores created before version tracking."""

import logging
import sqlite3
from collections.abc import Sequence
from dataclasses import dataclass

from ..constants import MEMORY_DB
from .base import MigrationApplyError, MigrationValidationError
from .registry import MigrationRegistry

logger = logging.getLogger(__name__)


class ProbeError(Exception):
    """
    Raised when the schema of a legacy store cannot be inspected.

    Wraps the underlying sqlite3 error. Raised when reading table metadata
    fails, for example on a corrupt or locked database file.
    """

    pass


@dataclass(frozen=True)
class ProbeEntry:
    """A column whose presence means the store is at least at ``version``."""

    table: str
    column: str
    version: int


# One marker per migration, oldest first. Append only, in lockstep with
# MIGRATIONS. A marker must survive every later migration or be superseded
# by a newer one before it is dropped (migration 11 drops
# encounter.difficulty and encounter.boss_only_damage, and provides
# encounter_preview.id).
LEGACY_PROBES: tuple[ProbeEntry, ...] = (
    ProbeEntry("encounter", "id", 1),
    ProbeEntry("encounter", "misc", 2),
    ProbeEntry("encounter", "difficulty", 3),
    ProbeEntry("encounter", "version", 4),
    ProbeEntry("entity", "dps", 5),
    ProbeEntry("encounter", "boss_only_damage", 6),
    ProbeEntry("encounter", "total_shielding", 7),
    ProbeEntry("entity", "character_id", 8),
    ProbeEntry("entity", "engravings", 9),
    ProbeEntry("entity", "gear_hash", 10),
    ProbeEntry("encounter_preview", "id", 11),
    # FTS5 shadow table created alongside the encounter_search index
    ProbeEntry("encounter_search_data", "id", 12),
    ProbeEntry("encounter", "boss_hp_log", 13),
    ProbeEntry("sync_logs", "encounter_id", 14),
    ProbeEntry("entity", "spec", 15),
)


def table_has_column(conn: sqlite3.Connection, table: str, column: str) -> bool:
    """
    Check whether a column exists on a table.

    Args:
        conn: Open SQLite connection
        table: Table name
        column: Column name

    Returns:
        True if the table exists and has the column
    """
    row = conn.execute("SELECT 1 FROM pragma_table_info(?) WHERE name = ?", (table, column)).fetchone()
    return row is not None


def infer_version(conn: sqlite3.Connection, probes: Sequence[ProbeEntry] = LEGACY_PROBES) -> int:
    """
    Infer the schema version of a store from its physical schema.

    Probes are checked newest first and the first hit wins: migrations only
    add structure, so a later marker implies every earlier one.

    Args:
        conn: Open SQLite connection
        probes: Markers ordered oldest first

    Returns:
        Inferred version, or 0 for an empty store

    Raises:
        ProbeError: If the schema metadata cannot be read
    """
    try:
        for probe in reversed(probes):
            if table_has_column(conn, probe.table, probe.column):
                logger.debug(f"Found {probe.table}.{probe.column}, inferring schema v{probe.version}")
                return probe.version
    except sqlite3.Error as e:
        raise ProbeError(f"Could not inspect database schema: {e}") from e

    return 0


def validate_probes(registry: MigrationRegistry, probes: Sequence[ProbeEntry] = LEGACY_PROBES) -> None:
    """
    Verify that the probe table matches the migration registry.

    Builds a scratch store at every version from 0 to latest and checks
    that inference returns exactly that version.

    Args:
        registry: Migration registry the probes describe
        probes: Markers ordered oldest first

    Raises:
        MigrationValidationError: If a version would be inferred incorrectly
    """
    previous = 0
    for probe in probes:
        if probe.version <= previous:
            raise MigrationValidationError(
                f"Probe {probe.table}.{probe.column} (v{probe.version}) is out of order"
            )
        if probe.version > registry.latest_version:
            raise MigrationValidationError(
                f"Probe {probe.table}.{probe.column} refers to unknown migration {probe.version}"
            )
        previous = probe.version

    for version in range(registry.latest_version + 1):
        conn = sqlite3.connect(MEMORY_DB)
        try:
            try:
                registry.apply(conn, 0, target_version=version)
            except MigrationApplyError as e:
                raise MigrationValidationError(f"Cannot build scratch store at v{version}: {e}") from e

            inferred = infer_version(conn, probes)
            if inferred != version:
                raise MigrationValidationError(f"Store at v{version} is inferred as v{inferred}")
        finally:
            conn.close()
