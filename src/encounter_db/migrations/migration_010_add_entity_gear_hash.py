"""Migration #10: Add gear_hash column to entity."""

from .base import Migration


class Migration010AddEntityGearHash(Migration):
    """Migration #10: Add gear_hash column to entity."""

    version = 10

    sql = """
        ALTER TABLE entity ADD COLUMN gear_hash TEXT;
    """

    def description(self) -> str:
        """Return migration description."""
        return "Add gear_hash column to entity"
