"""Migration #13: Add compressed boss hp and stagger logs."""

from .base import Migration


class Migration013AddCompressedLogs(Migration):
    """Migration #13: Add compressed boss hp and stagger logs.

    ``boss_hp_log`` holds a compressed blob rather than JSON text.
    """

    version = 13

    sql = """
        ALTER TABLE encounter ADD COLUMN boss_hp_log BLOB;
        ALTER TABLE encounter ADD COLUMN stagger_log TEXT;
    """

    def description(self) -> str:
        """Return migration description."""
        return "Add compression to logs"
