"""Tests for the migration registry."""

import sqlite3

import pytest

from encounter_db.migrations import (
    CURRENT_SCHEMA_VERSION,
    MIGRATIONS,
    Migration,
    MigrationApplyError,
    MigrationError,
    MigrationRegistry,
    MigrationValidationError,
    default_registry,
    table_has_column,
)


def _schema_snapshot(conn: sqlite3.Connection) -> list[tuple[str, str, str, str | None]]:
    """Return every schema object, sorted, for comparing stores."""
    return conn.execute(
        "SELECT type, name, tbl_name, sql FROM sqlite_master ORDER BY type, name"
    ).fetchall()


def _user_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


class _SqlMigration(Migration):
    """Ad-hoc migration for registry tests."""

    def __init__(self, version: int, sql: str):
        self.version = version
        self.sql = sql

    def description(self) -> str:
        return f"Test migration {self.version}"


class TestPublishedMigrations:
    """Tests for the published migration sequence."""

    def test_validate(self) -> None:
        """Test that the published sequence replays cleanly."""
        default_registry().validate()

    def test_latest_version_is_count(self) -> None:
        """Test latest version equals the number of migrations."""
        registry = default_registry()
        assert registry.latest_version == len(MIGRATIONS) == CURRENT_SCHEMA_VERSION == 15

    def test_versions_match_positions(self) -> None:
        """Test each migration's version is its 1-based position."""
        assert [m.version for m in MIGRATIONS] == list(range(1, len(MIGRATIONS) + 1))

    def test_descriptions_present(self) -> None:
        """Test every migration has a description and a checksum."""
        for migration in MIGRATIONS:
            assert migration.description()
            assert len(migration.checksum) == 16

    def test_checksums_unique(self) -> None:
        """Test no two migrations share statements."""
        checksums = [m.checksum for m in MIGRATIONS]
        assert len(set(checksums)) == len(checksums)


class TestMigrationRegistry:
    """Tests for MigrationRegistry."""

    def test_get(self) -> None:
        """Test looking up migrations by version."""
        registry = default_registry()
        assert registry.get(1) is MIGRATIONS[0]
        assert registry.get(15) is MIGRATIONS[14]
        assert registry.get(0) is None
        assert registry.get(16) is None

    def test_pending(self) -> None:
        """Test pending returns only migrations after the current version."""
        registry = default_registry()
        assert [m.version for m in registry.pending(12)] == [13, 14, 15]
        assert [m.version for m in registry.pending(3, target_version=5)] == [4, 5]
        assert registry.pending(15) == []

    def test_registry_is_immutable(self) -> None:
        """Test the registry does not follow changes to the source list."""
        source = [_SqlMigration(1, "CREATE TABLE a (id INTEGER);")]
        registry = MigrationRegistry(source)
        source.append(_SqlMigration(2, "CREATE TABLE b (id INTEGER);"))

        assert registry.latest_version == 1

    def test_apply_empty_store(self) -> None:
        """Test applying everything to an empty store."""
        conn = sqlite3.connect(":memory:")
        registry = default_registry()

        version = registry.apply(conn, 0)

        assert version == 15
        assert _user_version(conn) == 15
        assert table_has_column(conn, "entity", "spec")
        assert table_has_column(conn, "sync_logs", "encounter_id")
        conn.close()

    def test_apply_is_deterministic(self) -> None:
        """Test two empty stores end with identical schemas."""
        registry = default_registry()
        first = sqlite3.connect(":memory:")
        second = sqlite3.connect(":memory:")

        registry.apply(first, 0)
        registry.apply(second, 0)

        assert _schema_snapshot(first) == _schema_snapshot(second)
        first.close()
        second.close()

    def test_apply_at_latest_is_noop(self) -> None:
        """Test a second apply at the latest version changes nothing."""
        conn = sqlite3.connect(":memory:")
        registry = default_registry()
        registry.apply(conn, 0)
        before = _schema_snapshot(conn)
        calls: list[int] = []

        version = registry.apply(conn, 15, on_step=lambda m: calls.append(m.version))

        assert version == 15
        assert calls == []
        assert _schema_snapshot(conn) == before
        conn.close()

    def test_apply_to_target_version(self) -> None:
        """Test applying up to a target version stops there."""
        conn = sqlite3.connect(":memory:")
        registry = default_registry()

        version = registry.apply(conn, 0, target_version=4)

        assert version == 4
        assert _user_version(conn) == 4
        assert table_has_column(conn, "encounter", "favorite")
        assert not table_has_column(conn, "entity", "dps")
        conn.close()

    def test_apply_in_stages_matches_full_apply(self) -> None:
        """Test resuming from an intermediate version ends at the same schema."""
        registry = default_registry()
        staged = sqlite3.connect(":memory:")
        full = sqlite3.connect(":memory:")

        registry.apply(staged, 0, target_version=7)
        registry.apply(staged, 7)
        registry.apply(full, 0)

        assert _schema_snapshot(staged) == _schema_snapshot(full)
        assert _user_version(staged) == _user_version(full) == 15
        staged.close()
        full.close()

    def test_on_step_called_in_order(self) -> None:
        """Test the step callback sees each pending migration in order."""
        conn = sqlite3.connect(":memory:")
        seen: list[int] = []

        default_registry().apply(conn, 0, target_version=3, on_step=lambda m: seen.append(m.version))

        assert seen == [1, 2, 3]
        conn.close()

    def test_apply_newer_store_raises(self) -> None:
        """Test a store ahead of the registry is refused."""
        conn = sqlite3.connect(":memory:")
        with pytest.raises(MigrationError, match="newer"):
            default_registry().apply(conn, 16)
        conn.close()

    def test_apply_downgrade_raises(self) -> None:
        """Test a target below the current version is refused."""
        conn = sqlite3.connect(":memory:")
        with pytest.raises(MigrationError, match="downgrade"):
            default_registry().apply(conn, 5, target_version=3)
        conn.close()

    def test_apply_unknown_target_raises(self) -> None:
        """Test a target beyond the latest version is refused."""
        conn = sqlite3.connect(":memory:")
        with pytest.raises(MigrationError, match="Unknown target"):
            default_registry().apply(conn, 0, target_version=99)
        conn.close()

    def test_apply_negative_version_raises(self) -> None:
        """Test a negative current version is rejected."""
        conn = sqlite3.connect(":memory:")
        with pytest.raises(ValueError):
            default_registry().apply(conn, -1)
        conn.close()

    def test_apply_stale_version_raises(self) -> None:
        """Test a current version behind the stored one is refused without lowering it."""
        conn = sqlite3.connect(":memory:")
        registry = default_registry()
        registry.apply(conn, 0)
        before = _schema_snapshot(conn)
        calls: list[int] = []

        with pytest.raises(MigrationError, match="at v15"):
            registry.apply(conn, 13, on_step=lambda m: calls.append(m.version))

        assert _user_version(conn) == 15
        assert calls == []
        assert _schema_snapshot(conn) == before
        conn.close()


class TestFailedMigration:
    """Tests for a step that fails part way through."""

    def _registry(self) -> MigrationRegistry:
        return MigrationRegistry(
            [
                _SqlMigration(1, "CREATE TABLE encounter (id INTEGER PRIMARY KEY);"),
                _SqlMigration(2, "ALTER TABLE encounter ADD COLUMN misc TEXT;"),
                _SqlMigration(
                    3,
                    "ALTER TABLE encounter ADD COLUMN difficulty TEXT;\n"
                    "ALTER TABLE missing_table ADD COLUMN nope TEXT;",
                ),
            ]
        )

    def test_failure_reports_version(self) -> None:
        """Test the error names the failing migration."""
        conn = sqlite3.connect(":memory:")

        with pytest.raises(MigrationApplyError) as exc_info:
            self._registry().apply(conn, 0)

        assert exc_info.value.version == 3
        assert isinstance(exc_info.value.cause, sqlite3.OperationalError)
        assert exc_info.value.__cause__ is exc_info.value.cause
        conn.close()

    def test_failure_keeps_completed_steps(self) -> None:
        """Test earlier steps stay applied and the failing step is rolled back."""
        conn = sqlite3.connect(":memory:")

        with pytest.raises(MigrationApplyError):
            self._registry().apply(conn, 0)

        assert _user_version(conn) == 2
        assert table_has_column(conn, "encounter", "misc")
        assert not table_has_column(conn, "encounter", "difficulty")
        assert not conn.in_transaction
        conn.close()

    def test_resume_after_fix(self) -> None:
        """Test a fixed registry resumes from the last completed step."""
        conn = sqlite3.connect(":memory:")
        with pytest.raises(MigrationApplyError):
            self._registry().apply(conn, 0)

        fixed = MigrationRegistry(
            [
                *list(self._registry())[:2],
                _SqlMigration(3, "ALTER TABLE encounter ADD COLUMN difficulty TEXT;"),
            ]
        )
        seen: list[int] = []
        version = fixed.apply(conn, _user_version(conn), on_step=lambda m: seen.append(m.version))

        assert version == 3
        assert seen == [3]
        assert table_has_column(conn, "encounter", "difficulty")
        conn.close()


class TestValidate:
    """Tests for MigrationRegistry.validate."""

    def test_empty_registry_is_valid(self) -> None:
        """Test an empty registry validates."""
        MigrationRegistry([]).validate()

    def test_gap_in_versions(self) -> None:
        """Test a version that does not match its position is reported."""
        registry = MigrationRegistry(
            [
                _SqlMigration(1, "CREATE TABLE a (id INTEGER);"),
                _SqlMigration(3, "CREATE TABLE b (id INTEGER);"),
            ]
        )
        with pytest.raises(MigrationValidationError, match="position 2"):
            registry.validate()

    def test_empty_statements(self) -> None:
        """Test a migration without statements is reported."""
        registry = MigrationRegistry([_SqlMigration(1, "   ")])
        with pytest.raises(MigrationValidationError, match="no statements"):
            registry.validate()

    def test_step_incompatible_with_earlier_state(self) -> None:
        """Test a step that assumes a missing table is reported."""
        registry = MigrationRegistry(
            [
                _SqlMigration(1, "CREATE TABLE a (id INTEGER);"),
                _SqlMigration(2, "ALTER TABLE b ADD COLUMN name TEXT;"),
            ]
        )
        with pytest.raises(MigrationValidationError, match="Migration 2"):
            registry.validate()

    def test_recreating_existing_table(self) -> None:
        """Test a step that recreates an existing table is reported."""
        registry = MigrationRegistry(
            [
                _SqlMigration(1, "CREATE TABLE a (id INTEGER);"),
                _SqlMigration(2, "CREATE TABLE a (id INTEGER);"),
            ]
        )
        with pytest.raises(MigrationValidationError):
            registry.validate()
