"""Constants used throughout encounter-db."""

# SQLite pragma holding the persisted schema version (file header slot)
SCHEMA_VERSION_PRAGMA = "user_version"

# Scratch database used for build-time validation
MEMORY_DB = ":memory:"

# Backup file naming
BACKUP_SUFFIX_TEMPLATE = "_backup_{timestamp}"
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

# Connection defaults
DEFAULT_CONNECT_TIMEOUT = 5.0  # seconds to wait on a locked database file

# Checksum length (hex characters) shown in migration output
MIGRATION_CHECKSUM_LENGTH = 16

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
