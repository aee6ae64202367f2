"""Database migration system for the encounter store."""

from .base import Migration, MigrationApplyError, MigrationError, MigrationValidationError
from .legacy import LEGACY_PROBES, ProbeEntry, ProbeError, infer_version, table_has_column, validate_probes
from .migration_001_create_encounter_tables import Migration001CreateEncounterTables
from .migration_002_add_encounter_misc import Migration002AddEncounterMisc
from .migration_003_add_encounter_difficulty import Migration003AddEncounterDifficulty
from .migration_004_add_encounter_flags import Migration004AddEncounterFlags
from .migration_005_add_entity_dps import Migration005AddEntityDps
from .migration_006_add_boss_only_damage import Migration006AddBossOnlyDamage
from .migration_007_add_shielding import Migration007AddShielding
from .migration_008_add_entity_character_id import Migration008AddEntityCharacterId
from .migration_009_add_entity_engravings import Migration009AddEntityEngravings
from .migration_010_add_entity_gear_hash import Migration010AddEntityGearHash
from .migration_011_split_encounter_preview import Migration011SplitEncounterPreview
from .migration_012_add_encounter_search import Migration012AddEncounterSearch
from .migration_013_add_compressed_logs import Migration013AddCompressedLogs
from .migration_014_add_sync_logs import Migration014AddSyncLogs
from .migration_015_add_entity_spec import Migration015AddEntitySpec
from .registry import MigrationRegistry
from .runner import MigrationRunner

# Published migrations in order. Append only: never edit, reorder or remove
# an entry once released, and add a matching LEGACY_PROBES entry.
MIGRATIONS: tuple[Migration, ...] = (
    Migration001CreateEncounterTables(),
    Migration002AddEncounterMisc(),
    Migration003AddEncounterDifficulty(),
    Migration004AddEncounterFlags(),
    Migration005AddEntityDps(),
    Migration006AddBossOnlyDamage(),
    Migration007AddShielding(),
    Migration008AddEntityCharacterId(),
    Migration009AddEntityEngravings(),
    Migration010AddEntityGearHash(),
    Migration011SplitEncounterPreview(),
    Migration012AddEncounterSearch(),
    Migration013AddCompressedLogs(),
    Migration014AddSyncLogs(),
    Migration015AddEntitySpec(),
)

CURRENT_SCHEMA_VERSION = len(MIGRATIONS)


def default_registry() -> MigrationRegistry:
    """Build the registry of published migrations."""
    return MigrationRegistry(MIGRATIONS)


__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "LEGACY_PROBES",
    "MIGRATIONS",
    "Migration",
    "MigrationApplyError",
    "MigrationError",
    "MigrationRegistry",
    "MigrationRunner",
    "MigrationValidationError",
    "ProbeEntry",
    "ProbeError",
    "default_registry",
    "infer_version",
    "table_has_column",
    "validate_probes",
]
