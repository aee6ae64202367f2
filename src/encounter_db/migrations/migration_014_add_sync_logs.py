"""Migration #14: Track uploads of encounters to the log server."""

from .base import Migration


class Migration014AddSyncLogs(Migration):
    """Migration #14: Track uploads of encounters to the log server."""

    version = 14

    sql = """
        CREATE TABLE IF NOT EXISTS sync_logs (
            encounter_id INTEGER PRIMARY KEY,
            upstream_id TEXT,
            failed BOOLEAN NOT NULL DEFAULT 0,
            FOREIGN KEY (encounter_id) REFERENCES encounter (id) ON DELETE CASCADE
        );
    """

    def description(self) -> str:
        """Return migration description."""
        return "Allow uploading logs"
