"""Migration #8: Add character_id column to entity."""

from .base import Migration


class Migration008AddEntityCharacterId(Migration):
    """Migration #8: Add character_id column to entity."""

    version = 8

    sql = """
        ALTER TABLE entity ADD COLUMN character_id INTEGER;
    """

    def description(self) -> str:
        """Return migration description."""
        return "Add character_id column to entity"
